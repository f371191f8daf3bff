import logging
from typing import Any, Awaitable, Callable

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from nutrilife.core.security import get_active_session, get_gateway
from nutrilife.models.credit_ledger import DenialReason, Denied, Feature, is_success
from nutrilife.models.schemas import (
    CalculatorRequest,
    ChatRequest,
    RecipeRequest,
    WeeklyPlanRequest,
    WorkoutPlanRequest,
)
from nutrilife.services.ai_gateway import AIGateway
from nutrilife.services.session_controller import SessionController

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/ai",
    tags=["AI Features"]
)


async def run_feature(
    session: SessionController,
    feature: Feature,
    call: Callable[[], Awaitable[Any]],
    failure_detail: str,
) -> dict:
    """Gate the call, run it and shape the response. Credit is only spent on success."""
    decision, result = await session.gate.run(feature, session.state.profile, call)

    if isinstance(decision, Denied):
        if decision.reason == DenialReason.REQUEST_IN_FLIGHT:
            raise HTTPException(
                status_code=409,
                detail=f"A {feature.value} request is already in progress.",
            )
        raise HTTPException(
            status_code=402,
            detail=(
                f"Not enough credits: {feature.value} costs {decision.cost}, "
                f"you have {decision.balance}. Upgrade to Premium for unlimited use."
            ),
        )

    if not is_success(result):
        raise HTTPException(status_code=502, detail=result if isinstance(result, str) else failure_detail)

    return {"result": result, "credits": session.state.credits}


@router.post("/scan")
async def scan_food(
    image: UploadFile = File(...),
    session: SessionController = Depends(get_active_session),
    gateway: AIGateway = Depends(get_gateway),
):
    mime_type = image.content_type or ""
    if not mime_type.startswith("image/"):
        raise HTTPException(status_code=400, detail="Please upload an image file.")
    data = await image.read()
    if not data:
        raise HTTPException(status_code=400, detail="The uploaded image is empty.")

    profile = session.state.profile
    return await run_feature(
        session, Feature.SCAN,
        lambda: gateway.analyze_food_image(data, mime_type, profile),
        "Could not analyze the image. Please try again.",
    )


@router.post("/calculator")
async def calculate_nutrition(
    request: CalculatorRequest,
    session: SessionController = Depends(get_active_session),
    gateway: AIGateway = Depends(get_gateway),
):
    profile = session.state.profile
    return await run_feature(
        session, Feature.CALCULATOR,
        lambda: gateway.calculate_nutrition(request.text, profile),
        "Could not complete the calculation.",
    )


@router.post("/recipes")
async def generate_recipes(
    request: RecipeRequest,
    session: SessionController = Depends(get_active_session),
    gateway: AIGateway = Depends(get_gateway),
):
    profile = session.state.profile
    return await run_feature(
        session, Feature.RECIPE,
        lambda: gateway.profile_recipes(profile, request.prompt),
        "No recipes could be generated. Please try again.",
    )


@router.post("/recipes/surprise")
async def surprise_recipe(
    session: SessionController = Depends(get_active_session),
    gateway: AIGateway = Depends(get_gateway),
):
    profile = session.state.profile
    return await run_feature(
        session, Feature.RECIPE,
        lambda: gateway.surprise_recipe(profile),
        "No recipe could be generated. Please try again.",
    )


@router.post("/weekly-plan")
async def generate_weekly_plan(
    request: WeeklyPlanRequest,
    session: SessionController = Depends(get_active_session),
    gateway: AIGateway = Depends(get_gateway),
):
    profile = session.state.profile
    return await run_feature(
        session, Feature.WEEKLY_PLAN,
        lambda: gateway.generate_weekly_plan(profile, request.days, request.preferences or ""),
        "The plan could not be generated. Please try again in a few moments.",
    )


@router.post("/workout-plan")
async def generate_workout_plan(
    request: WorkoutPlanRequest,
    session: SessionController = Depends(get_active_session),
    gateway: AIGateway = Depends(get_gateway),
):
    profile = session.state.profile
    return await run_feature(
        session, Feature.WORKOUT_PLAN,
        lambda: gateway.generate_workout_plan(profile, request.focus, request.days),
        "The plan could not be generated. The AI might be busy, please try again in a few moments.",
    )


@router.post("/chat")
async def chat(
    request: ChatRequest,
    session: SessionController = Depends(get_active_session),
    gateway: AIGateway = Depends(get_gateway),
):
    """One chat turn. The client keeps the conversation history."""
    profile = session.state.profile
    return await run_feature(
        session, Feature.CHAT,
        lambda: gateway.chat(request.message, profile),
        "Sorry, I'm having trouble connecting. Please try again later.",
    )
