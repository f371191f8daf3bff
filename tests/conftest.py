import json
import itertools
from typing import Optional

import pytest
from fastapi.testclient import TestClient

from nutrilife.core.security import get_gateway, get_identity_provider, get_session_manager
from nutrilife.main import app
from nutrilife.models.schemas import ProfileCreate
from nutrilife.models.session_state import Identity
from nutrilife.services.ai_gateway import AIGateway
from nutrilife.services.identity import AuthSession, IdentityProvider
from nutrilife.services.profile_store import InMemoryKeyValueStore, ProfileStore
from nutrilife.services.session_controller import SessionController, SessionManager


PROFILE_FORM = {
    "name": "Ana Torres",
    "condition": "diabetes",
    "goal": "Keep my glucose stable",
    "gender": "female",
    "age": 52,
    "weight": 68,
    "height": 162,
    "activity_level": "light",
}


def recipe_dict(name: str, ingredients: int = 3, steps: int = 3) -> dict:
    return {
        "recipe_name": name,
        "description": f"A light {name.lower()} for stable glucose.",
        "ingredients": [f"{n + 1}00 g ingredient {n + 1}" for n in range(ingredients)],
        "instructions": [f"Step {n + 1} for {name}." for n in range(steps)],
        "prep_time": "20 minutes",
    }


def day_meals_dict(day: str) -> dict:
    return {
        slot: recipe_dict(f"{day} {slot}")
        for slot in ["breakfast", "morning_snack", "lunch", "afternoon_snack", "dinner"]
    }


def weekly_plan_json(days: list[str]) -> str:
    return json.dumps({day: day_meals_dict(day) for day in days})


def food_analysis_json() -> str:
    return json.dumps({
        "total_calories": 540,
        "macros": {"protein": 32, "carbs": 48, "fat": 21},
        "identified_foods": ["Grilled chicken breast (150g)", "Brown rice (120g)", "Salad (80g)"],
        "feedback": {
            "composition_analysis": "Balanced plate with lean protein.",
            "recommendation": "Good choice; keep the rice portion moderate.",
            "is_recommended": True,
        },
    })


def workout_plan_json(days: list[str]) -> str:
    workout = {
        "name": "Brisk walk",
        "sets": "1",
        "repetitions": "20 minutes",
        "description": "Walk at a pace that lets you talk.",
        "rest": "None",
    }
    return json.dumps({
        "plan_name": "Active Start Plan",
        "focus": "Low-impact cardio",
        "duration": f"{len(days)} days",
        "schedule": {day: [workout, workout] for day in days},
        "recommendations": [
            "Measure your glucose before and after training",
            "Always stay hydrated",
            "Stop if you feel dizzy",
        ],
    })


class FakeIdentityProvider(IdentityProvider):
    def __init__(self):
        self.users: dict[str, tuple[str, Identity]] = {}
        self.tokens: dict[str, Identity] = {}
        self._counter = itertools.count(1)

    def sign_up(self, email: str, password: str, name: str) -> bool:
        uid = f"user-{len(self.users) + 1}"
        self.users[email] = (password, Identity(uid=uid, email=email, display_name=name))
        return True

    def sign_in(self, email: str, password: str) -> Optional[AuthSession]:
        entry = self.users.get(email)
        if entry is None or entry[0] != password:
            return None
        token = f"token-{next(self._counter)}"
        self.tokens[token] = entry[1]
        return AuthSession(identity=entry[1], access_token=token)

    def current_identity(self, token: str) -> Optional[Identity]:
        return self.tokens.get(token)

    def sign_out(self, token: str) -> None:
        self.tokens.pop(token, None)


class FakeOracle:
    """Replays queued responses; an Exception instance is raised instead of returned."""

    def __init__(self):
        self.responses = []
        self.calls = []

    def queue(self, *responses):
        self.responses.extend(responses)

    async def generate(self, contents, system_instruction=None, response_schema=None):
        self.calls.append({
            "contents": contents,
            "system_instruction": system_instruction,
            "response_schema": response_schema,
        })
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def store():
    return ProfileStore(InMemoryKeyValueStore())


@pytest.fixture
def identity():
    return Identity(uid="user-1", email="ana@example.com", display_name="Ana")


@pytest.fixture
def profile_form():
    return ProfileCreate(**PROFILE_FORM)


@pytest.fixture
def active_session(store, identity, profile_form):
    controller = SessionController(store)
    controller.resolve_identity(identity)
    controller.complete_onboarding(profile_form)
    return controller


@pytest.fixture
def oracle():
    return FakeOracle()


@pytest.fixture
def gateway(oracle):
    return AIGateway(oracle)


@pytest.fixture
def provider():
    provider = FakeIdentityProvider()
    provider.sign_up("ana@example.com", "secret-pass", "Ana")
    return provider


@pytest.fixture
def manager(store):
    return SessionManager(store)


@pytest.fixture
def client(provider, manager, gateway):
    app.dependency_overrides[get_identity_provider] = lambda: provider
    app.dependency_overrides[get_session_manager] = lambda: manager
    app.dependency_overrides[get_gateway] = lambda: gateway
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def login(client, email="ana@example.com", password="secret-pass"):
    response = client.post("/token", data={"username": email, "password": password})
    assert response.status_code == 200, response.text
    body = response.json()
    return {"Authorization": f"Bearer {body['access_token']}"}, body
