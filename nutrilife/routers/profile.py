from fastapi import APIRouter, Depends

from nutrilife.core.security import get_active_session, get_session
from nutrilife.models.schemas import ProfileCreate
from nutrilife.models.user_logic import HealthMetrics
from nutrilife.services.session_controller import SessionController

router = APIRouter(
    tags=["Profile"]
)


@router.post("/onboarding", status_code=201)
def complete_onboarding(profile_data: ProfileCreate, session: SessionController = Depends(get_session)):
    """
    Create the profile from the onboarding form.
    New profiles start on the free plan with the starting credit grant.
    """
    profile = session.complete_onboarding(profile_data)
    return {
        "status": "success",
        "profile": profile,
        "session": session.state.summary(),
    }


@router.get("/profile")
def get_profile(session: SessionController = Depends(get_active_session)):
    return {
        "status": "success",
        "profile": session.state.profile,
        "credits": session.state.credits,
    }


@router.put("/profile")
def update_profile(profile_data: ProfileCreate, session: SessionController = Depends(get_active_session)):
    """Profile edits keep the current plan."""
    profile = session.update_profile(profile_data)
    return {"status": "success", "message": "Profile updated successfully", "profile": profile}


@router.post("/profile/upgrade")
def upgrade(session: SessionController = Depends(get_active_session)):
    profile = session.upgrade_to_premium()
    return {
        "status": "success",
        "message": "Upgraded to NutriLife AI Premium with unlimited features.",
        "profile": profile,
    }


@router.get("/profile/metrics")
def profile_metrics(session: SessionController = Depends(get_active_session)):
    return HealthMetrics(session.state.profile).as_dict()
