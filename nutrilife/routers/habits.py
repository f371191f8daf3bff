from fastapi import APIRouter, Depends, HTTPException

from nutrilife.core.security import get_active_session
from nutrilife.models.schemas import HabitCreate
from nutrilife.services.session_controller import SessionController

router = APIRouter(
    prefix="/habits",
    tags=["Habits"]
)


def _habit_not_found(habit_id: int) -> HTTPException:
    return HTTPException(status_code=404, detail=f"Habit {habit_id} not found.")


@router.get("")
def list_habits(session: SessionController = Depends(get_active_session)):
    return {"habits": session.state.habits, "stars": session.state.stars}


@router.post("", status_code=201)
def add_habit(habit: HabitCreate, session: SessionController = Depends(get_active_session)):
    created = session.add_habit(habit.text)
    if created is None:
        raise HTTPException(status_code=400, detail="Habit text cannot be empty.")
    return {"habit": created, "stars": session.state.stars}


@router.post("/{habit_id}/toggle")
def toggle_habit(habit_id: int, session: SessionController = Depends(get_active_session)):
    """Completing a habit earns a star; un-completing it takes the star back."""
    habit = session.toggle_habit(habit_id)
    if habit is None:
        raise _habit_not_found(habit_id)
    return {"habit": habit, "stars": session.state.stars}


@router.delete("/{habit_id}")
def delete_habit(habit_id: int, session: SessionController = Depends(get_active_session)):
    habit = session.delete_habit(habit_id)
    if habit is None:
        raise _habit_not_found(habit_id)
    return {"deleted": habit, "stars": session.state.stars}
