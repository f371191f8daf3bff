from fastapi import APIRouter, Depends
from fastapi.responses import Response

from nutrilife.core.security import get_active_session
from nutrilife.models.schemas import Recipe, WeeklyPlan, WorkoutPlan
from nutrilife.services.report_renderer import (
    Report,
    recipe_report,
    weekly_plan_report,
    workout_plan_report,
)
from nutrilife.services.session_controller import SessionController

router = APIRouter(
    prefix="/reports",
    tags=["Reports"]
)


def _pdf_response(report: Report) -> Response:
    return Response(
        content=report.content,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{report.filename}"',
            "X-Report-Pages": str(report.pages),
        },
    )


@router.post("/recipe")
def export_recipe(recipe: Recipe, session: SessionController = Depends(get_active_session)):
    return _pdf_response(recipe_report(recipe))


@router.post("/weekly-plan")
def export_weekly_plan(plan: WeeklyPlan, session: SessionController = Depends(get_active_session)):
    return _pdf_response(weekly_plan_report(plan, session.state.profile.name))


@router.post("/workout-plan")
def export_workout_plan(plan: WorkoutPlan, session: SessionController = Depends(get_active_session)):
    return _pdf_response(workout_plan_report(plan))
