from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from nutrilife.core.security import get_active_session
from nutrilife.models.schemas import NoteUpdate
from nutrilife.services.session_controller import SessionController

router = APIRouter(
    prefix="/monitoring",
    tags=["Monitoring"]
)


@router.get("/calendar")
def read_calendar(
    year: Optional[int] = Query(default=None, ge=1, le=9999),
    month: Optional[int] = Query(default=None, ge=1, le=12),
    session: SessionController = Depends(get_active_session),
):
    """Month grid for the daily notes view; defaults to the current month."""
    today = date.today()
    return session.calendar(year or today.year, month or today.month)


@router.get("/notes/{day}")
def read_note(day: date, session: SessionController = Depends(get_active_session)):
    return {"date": day.isoformat(), "text": session.note_for(day)}


@router.put("/notes/{day}")
def save_note(day: date, note: NoteUpdate, session: SessionController = Depends(get_active_session)):
    text = session.save_note(day, note.text)
    return {"date": day.isoformat(), "text": text}
