import calendar
import logging
import threading
import time
from collections import OrderedDict
from datetime import date
from typing import Optional

from nutrilife.core.config import settings
from nutrilife.models.credit_ledger import STARTING_CREDITS, CreditLedger, FeatureGate
from nutrilife.models.schemas import Habit, Plan, ProfileCreate, Recipe, UserProfile
from nutrilife.models.session_state import (
    NAVIGABLE_VIEWS,
    Identity,
    SessionPhase,
    SessionState,
    View,
)
from nutrilife.services.profile_store import ProfileStore, StoredRecords

logger = logging.getLogger(__name__)


class SessionStateError(RuntimeError):
    """An operation was attempted in the wrong session phase."""


class SessionController:
    """
    Drives one user's session through its phases:

        unauthenticated -> onboarding -> active -> (sign out) -> unauthenticated

    Every mutation made while active is written back to the ProfileStore.
    """

    def __init__(self, store: ProfileStore):
        self.store = store
        self.state = SessionState()
        self.ledger = CreditLedger(self.state)
        self.gate = FeatureGate(self.ledger, on_charge=self._persist)
        self._last_habit_id = 0

    # --- Phase transitions ---

    def resolve_identity(self, identity: Optional[Identity]) -> SessionState:
        if identity is None:
            self.sign_out()
            self.state.identity_resolved = True
            return self.state

        self._reset()
        self.state.identity = identity
        self.state.identity_resolved = True

        records = self.store.load(identity.uid)
        if records.profile is None:
            logger.info(f"🆕 No profile for user {identity.uid}, starting onboarding")
            self.state.phase = SessionPhase.ONBOARDING
            self.state.active_view = View.ONBOARDING
            return self.state

        self._apply_records(records, records.profile)
        self.state.phase = SessionPhase.ACTIVE
        self.state.active_view = View.MONITORING
        logger.info(f"✅ Session restored for user {identity.uid}")
        return self.state

    def _apply_records(self, records: StoredRecords, profile: UserProfile) -> None:
        self.state.profile = profile
        self.state.habits = records.habits
        self.state.stars = records.stars or 0
        self.state.recipes = records.recipes
        self.state.notes = records.notes
        if records.credits is not None:
            self.state.credits = records.credits
        elif profile.plan == Plan.FREE:
            self.state.credits = STARTING_CREDITS
        else:
            self.state.credits = 0
        self._last_habit_id = max((h.id for h in self.state.habits), default=0)

    def complete_onboarding(self, form: ProfileCreate) -> UserProfile:
        self._require(SessionPhase.ONBOARDING)
        profile = UserProfile(**form.model_dump(), plan=Plan.FREE)
        # records stored while the profile was unreadable are kept, not overwritten
        records = self.store.load(self.state.identity.uid)
        self._apply_records(records, profile)
        self.state.phase = SessionPhase.ACTIVE
        self.state.active_view = View.HABITS
        self._persist()
        logger.info(f"🎉 Onboarding completed for user {self.state.identity.uid}")
        return profile

    def sign_out(self) -> SessionState:
        if self.state.identity:
            logger.info(f"👋 Signing out user {self.state.identity.uid}")
        self._reset()
        return self.state

    def _reset(self) -> None:
        self.state.identity = None
        self.state.phase = SessionPhase.UNAUTHENTICATED
        self.state.active_view = View.WELCOME
        self.state.profile = None
        self.state.habits = []
        self.state.stars = 0
        self.state.credits = 0
        self.state.recipes = []
        self.state.notes = {}
        self._last_habit_id = 0

    def _require(self, phase: SessionPhase) -> None:
        if self.state.phase != phase:
            raise SessionStateError(
                f"Operation requires the '{phase.value}' phase, session is '{self.state.phase.value}'"
            )

    def _persist(self) -> None:
        if self.state.phase != SessionPhase.ACTIVE or self.state.identity is None:
            return
        if not self.store.save_session(self.state.identity.uid, self.state):
            logger.warning(f"⚠️ Session for user {self.state.identity.uid} was only partially saved")

    # --- Navigation and profile ---

    def navigate(self, view: View) -> View:
        self._require(SessionPhase.ACTIVE)
        if view not in NAVIGABLE_VIEWS:
            raise SessionStateError(f"View '{view.value}' cannot be opened from an active session")
        self.state.active_view = view
        return view

    def update_profile(self, form: ProfileCreate) -> UserProfile:
        self._require(SessionPhase.ACTIVE)
        self.state.profile = UserProfile(**form.model_dump(), plan=self.state.profile.plan)
        self._persist()
        return self.state.profile

    def upgrade_to_premium(self) -> UserProfile:
        self._require(SessionPhase.ACTIVE)
        self.state.profile = self.state.profile.model_copy(update={"plan": Plan.PREMIUM})
        self._persist()
        logger.info(f"👑 User {self.state.identity.uid} upgraded to premium")
        return self.state.profile

    # --- Habits and stars ---

    def _next_habit_id(self) -> int:
        habit_id = max(int(time.time() * 1000), self._last_habit_id + 1)
        self._last_habit_id = habit_id
        return habit_id

    def add_habit(self, text: str) -> Optional[Habit]:
        self._require(SessionPhase.ACTIVE)
        text = text.strip()
        if not text:
            return None
        habit = Habit(id=self._next_habit_id(), text=text, completed=False)
        self.state.habits = [*self.state.habits, habit]
        self._persist()
        return habit

    def toggle_habit(self, habit_id: int) -> Optional[Habit]:
        self._require(SessionPhase.ACTIVE)
        habit = next((h for h in self.state.habits if h.id == habit_id), None)
        if habit is None:
            return None

        toggled = habit.model_copy(update={"completed": not habit.completed})
        self.state.stars = max(0, self.state.stars + (1 if toggled.completed else -1))
        self.state.habits = [toggled if h.id == habit_id else h for h in self.state.habits]
        self._persist()
        return toggled

    def delete_habit(self, habit_id: int) -> Optional[Habit]:
        """Remove a habit. Stars already earned from it are kept."""
        self._require(SessionPhase.ACTIVE)
        habit = next((h for h in self.state.habits if h.id == habit_id), None)
        if habit is None:
            return None
        self.state.habits = [h for h in self.state.habits if h.id != habit_id]
        self._persist()
        return habit

    # --- Saved recipes ---

    def save_recipe(self, recipe: Recipe) -> bool:
        self._require(SessionPhase.ACTIVE)
        if any(r.recipe_name == recipe.recipe_name for r in self.state.recipes):
            return False
        self.state.recipes = [*self.state.recipes, recipe]
        self._persist()
        return True

    # --- Daily notes ---

    def note_for(self, day: date) -> str:
        self._require(SessionPhase.ACTIVE)
        return self.state.notes.get(day.isoformat(), "")

    def save_note(self, day: date, text: str) -> str:
        self._require(SessionPhase.ACTIVE)
        self.state.notes = {**self.state.notes, day.isoformat(): text}
        self.store.save_notes(self.state.identity.uid, self.state.notes)
        return text

    def calendar(self, year: int, month: int) -> dict:
        self._require(SessionPhase.ACTIVE)
        days_in_month = calendar.monthrange(year, month)[1]
        days = []
        for day in range(1, days_in_month + 1):
            key = date(year, month, day).isoformat()
            days.append({
                "date": key,
                "has_note": bool(self.state.notes.get(key, "").strip()),
            })
        return {
            "year": year,
            "month": month,
            # Monday == 0
            "first_weekday": calendar.monthrange(year, month)[0],
            "days": days,
        }


class SessionManager:
    """
    One SessionController per signed-in identity.

    Sync routes call in from FastAPI's thread pool, so the session map is
    guarded by a lock. At most `max_sessions` controllers are kept; the least
    recently used one is dropped first and is restored from the store on its
    next request.
    """

    def __init__(self, store: ProfileStore, max_sessions: Optional[int] = None):
        self.store = store
        self.max_sessions = max_sessions or settings.MAX_SESSIONS
        self._sessions: OrderedDict[str, SessionController] = OrderedDict()
        self._lock = threading.Lock()

    def open(self, identity: Identity) -> SessionController:
        with self._lock:
            controller = self._sessions.get(identity.uid)
            if controller is None:
                controller = SessionController(self.store)
                controller.resolve_identity(identity)
                self._sessions[identity.uid] = controller
            self._sessions.move_to_end(identity.uid)

            while len(self._sessions) > self.max_sessions:
                uid, _ = self._sessions.popitem(last=False)
                logger.info(f"♻️ Dropped idle session for user {uid}")
            return controller

    def get(self, uid: str) -> Optional[SessionController]:
        with self._lock:
            return self._sessions.get(uid)

    def close(self, uid: str) -> Optional[SessionController]:
        with self._lock:
            controller = self._sessions.pop(uid, None)
        if controller is not None:
            controller.sign_out()
        return controller
