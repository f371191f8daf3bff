import json
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from pydantic import ValidationError

from nutrilife.core.config import settings
from nutrilife.models.schemas import Habit, Recipe, UserProfile
from nutrilife.models.session_state import SessionState
from nutrilife.services.supabase_client import get_supabase

logger = logging.getLogger(__name__)

PROFILE = "profile"
HABITS = "habits"
STARS = "stars"
CREDITS = "credits"
RECIPES = "recipes"
NOTES = "notes"

SESSION_RECORDS = (PROFILE, HABITS, STARS, CREDITS, RECIPES)


class KeyValueStore:
    """JSON values keyed by (user_id, record_key)."""

    def get(self, user_id: str, key: str) -> Optional[Any]:
        raise NotImplementedError

    def set(self, user_id: str, key: str, value: Any) -> None:
        raise NotImplementedError


class SupabaseKeyValueStore(KeyValueStore):
    """
    Records live in one table:

        user_records(user_id text, record_key text, value jsonb,
                     primary key (user_id, record_key))
    """

    def __init__(self, client=None, table: Optional[str] = None):
        self._client = client
        self.table = table or settings.USER_RECORDS_TABLE

    @property
    def client(self):
        if self._client is None:
            self._client = get_supabase()
        return self._client

    def get(self, user_id: str, key: str) -> Optional[Any]:
        response = self.client.table(self.table)\
            .select('value')\
            .eq('user_id', user_id)\
            .eq('record_key', key)\
            .limit(1)\
            .execute()

        if response.data and len(response.data) > 0:
            return response.data[0].get('value')
        return None

    def set(self, user_id: str, key: str, value: Any) -> None:
        self.client.table(self.table)\
            .upsert({'user_id': user_id, 'record_key': key, 'value': value},
                    on_conflict='user_id,record_key')\
            .execute()


class InMemoryKeyValueStore(KeyValueStore):
    """Process-local store; values go through JSON like the real backend."""

    def __init__(self):
        self._records: dict[tuple[str, str], str] = {}

    def get(self, user_id: str, key: str) -> Optional[Any]:
        raw = self._records.get((user_id, key))
        return json.loads(raw) if raw is not None else None

    def set(self, user_id: str, key: str, value: Any) -> None:
        self._records[(user_id, key)] = json.dumps(value)


@dataclass
class StoredRecords:
    profile: Optional[UserProfile] = None
    habits: list[Habit] = field(default_factory=list)
    stars: Optional[int] = None
    credits: Optional[int] = None
    recipes: list[Recipe] = field(default_factory=list)
    notes: dict[str, str] = field(default_factory=dict)


class ProfileStore:
    """Per-identity persistence of the session records."""

    def __init__(self, backend: KeyValueStore):
        self.backend = backend

    def _read(self, user_id: str, key: str) -> Optional[Any]:
        try:
            return self.backend.get(user_id, key)
        except Exception as e:
            logger.error(f"❌ Could not read '{key}' for user {user_id}: {e}")
            return None

    def _write(self, user_id: str, key: str, value: Any) -> bool:
        try:
            self.backend.set(user_id, key, value)
            return True
        except Exception as e:
            logger.error(f"❌ Could not save '{key}' for user {user_id}: {e}")
            return False

    def load_profile(self, user_id: str) -> Optional[UserProfile]:
        raw = self._read(user_id, PROFILE)
        if raw is None:
            return None
        try:
            return UserProfile.model_validate(raw)
        except ValidationError as e:
            logger.error(f"❌ Stored profile for user {user_id} is invalid: {e}")
            return None

    def load(self, user_id: str) -> StoredRecords:
        """Read every record; unreadable ones fall back to their defaults."""
        records = StoredRecords(profile=self.load_profile(user_id))

        raw_habits = self._read(user_id, HABITS) or []
        try:
            records.habits = [Habit.model_validate(h) for h in raw_habits]
        except (ValidationError, TypeError) as e:
            logger.error(f"❌ Stored habits for user {user_id} are invalid: {e}")

        raw_recipes = self._read(user_id, RECIPES) or []
        try:
            records.recipes = [Recipe.model_validate(r) for r in raw_recipes]
        except (ValidationError, TypeError) as e:
            logger.error(f"❌ Stored recipes for user {user_id} are invalid: {e}")

        records.stars = _as_count(self._read(user_id, STARS))
        records.credits = _as_count(self._read(user_id, CREDITS))

        raw_notes = self._read(user_id, NOTES)
        if isinstance(raw_notes, dict):
            records.notes = {str(k): str(v) for k, v in raw_notes.items()}

        return records

    def save_session(self, user_id: str, state: SessionState) -> bool:
        """Write profile, habits, stars, credits and recipes. Not atomic."""
        values = {
            PROFILE: state.profile.model_dump(mode='json') if state.profile else None,
            HABITS: [h.model_dump(mode='json') for h in state.habits],
            STARS: state.stars,
            CREDITS: state.credits,
            RECIPES: [r.model_dump(mode='json') for r in state.recipes],
        }
        ok = True
        for key in SESSION_RECORDS:
            ok = self._write(user_id, key, values[key]) and ok
        return ok

    def save_notes(self, user_id: str, notes: dict[str, str]) -> bool:
        return self._write(user_id, NOTES, dict(notes))


def _as_count(value: Any) -> Optional[int]:
    if value is None:
        return None
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        return None
