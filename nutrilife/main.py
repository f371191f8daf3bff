import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from nutrilife.core.config import settings
from nutrilife.routers import ai_features, auth, habits, monitoring, profile, recipes, reports
from nutrilife.services.session_controller import SessionStateError

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="NutriLife AI API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SessionStateError)
async def session_state_error_handler(request: Request, exc: SessionStateError):
    return JSONResponse(status_code=409, content={"detail": str(exc)})


# Include the routers from other files
app.include_router(auth.router)
app.include_router(profile.router)
app.include_router(monitoring.router)
app.include_router(habits.router)
app.include_router(recipes.router)
app.include_router(ai_features.router)
app.include_router(reports.router)


@app.get("/")
def read_root():
    return {"message": "Welcome to NutriLife AI"}
