import asyncio
import json

import pytest

from nutrilife.models.schemas import ChatMessage, FoodAnalysis, NutritionalAnalysis, UserProfile
from nutrilife.services.ai_gateway import (
    CHAT_ERROR,
    IMAGE_ANALYSIS_ERROR,
    NUTRITION_ERROR,
    extract_json,
    GeminiOracle,
)
from nutrilife.tools.contracts import MEAL_SLOTS

from conftest import (
    PROFILE_FORM,
    food_analysis_json,
    recipe_dict,
    weekly_plan_json,
    workout_plan_json,
)

PROFILE = UserProfile(**PROFILE_FORM)


def test_extract_json_plain_and_fenced():
    assert extract_json('{"a": 1}') == {"a": 1}
    assert extract_json('Here you go:\n```json\n{"a": [1, 2]}\n```') == {"a": [1, 2]}
    assert extract_json("```\n[1]\n```") == [1]


@pytest.mark.parametrize("text", ["", "   ", "not json", "```json\n{broken\n```"])
def test_extract_json_rejects_bad_payloads(text):
    with pytest.raises(ValueError):
        extract_json(text)


def test_oracle_requires_api_key(monkeypatch):
    from nutrilife.core.config import settings

    monkeypatch.setattr(settings, "GEMINI_API_KEY", None)
    with pytest.raises(EnvironmentError):
        GeminiOracle()


def test_analyze_food_image_success(gateway, oracle):
    oracle.queue(food_analysis_json())
    result = asyncio.run(gateway.analyze_food_image(b"\xff\xd8jpeg-bytes", "image/jpeg", PROFILE))

    assert isinstance(result, FoodAnalysis)
    assert result.total_calories == 540
    assert result.feedback.is_recommended is True

    image_part, text_part = oracle.calls[0]["contents"]
    assert image_part.inline_data.data == b"\xff\xd8jpeg-bytes"
    assert image_part.inline_data.mime_type == "image/jpeg"
    assert "diabetes" in text_part.text
    assert oracle.calls[0]["response_schema"] is not None


@pytest.mark.parametrize("response", [
    "this is not json",
    json.dumps({"total_calories": 100}),
    RuntimeError("model unavailable"),
])
def test_analyze_food_image_failures_return_error_text(gateway, oracle, response):
    oracle.queue(response)
    result = asyncio.run(gateway.analyze_food_image(b"img", "image/png", PROFILE))
    assert result == IMAGE_ANALYSIS_ERROR


def test_empty_image_is_not_sent(gateway, oracle):
    assert asyncio.run(gateway.analyze_food_image(b"", "image/png", PROFILE)) == IMAGE_ANALYSIS_ERROR
    assert oracle.calls == []


def test_calculate_nutrition(gateway, oracle):
    payload = json.loads(food_analysis_json())
    payload.pop("identified_foods")
    payload["sugars"] = 6.5
    oracle.queue(json.dumps(payload), "garbage")

    result = asyncio.run(gateway.calculate_nutrition("a bowl of oatmeal with banana", PROFILE))
    assert isinstance(result, NutritionalAnalysis)
    assert result.sugars == 6.5
    assert "oatmeal" in oracle.calls[0]["contents"]

    assert asyncio.run(gateway.calculate_nutrition("oatmeal", PROFILE)) == NUTRITION_ERROR


def test_generate_recipes(gateway, oracle):
    oracle.queue(json.dumps([recipe_dict("Lentil Soup"), recipe_dict("Chickpea Salad")]))
    recipes = asyncio.run(gateway.generate_recipes("legume dishes", 2))
    assert [r.recipe_name for r in recipes] == ["Lentil Soup", "Chickpea Salad"]


@pytest.mark.parametrize("response", [
    "{not json",
    json.dumps(recipe_dict("Single object")),
    json.dumps([{"recipe_name": "Incomplete"}]),
    TimeoutError(),
])
def test_generate_recipes_failures_return_empty_list(gateway, oracle, response):
    oracle.queue(response)
    assert asyncio.run(gateway.generate_recipes("anything")) == []


def test_profile_and_surprise_recipes_include_profile(gateway, oracle):
    oracle.queue(json.dumps([recipe_dict("A"), recipe_dict("B")]), json.dumps([recipe_dict("C")]))

    assert len(asyncio.run(gateway.profile_recipes(PROFILE, "low sodium dinner"))) == 2
    assert len(asyncio.run(gateway.surprise_recipe(PROFILE))) == 1

    assert "low sodium dinner" in oracle.calls[0]["contents"]
    assert "Keep my glucose stable" in oracle.calls[0]["contents"]
    assert "Keep my glucose stable" in oracle.calls[1]["contents"]


def test_weekly_plan_has_exactly_the_requested_days(gateway, oracle):
    oracle.queue(weekly_plan_json(["Monday", "Tuesday", "Wednesday"]))
    plan = asyncio.run(gateway.generate_weekly_plan(PROFILE, 3, "no fish"))

    assert list(plan.days) == ["Monday", "Tuesday", "Wednesday"]
    for meals in plan.days.values():
        assert all(getattr(meals, slot).recipe_name for slot in MEAL_SLOTS)

    schema = oracle.calls[0]["response_schema"]
    assert schema.required == ["Monday", "Tuesday", "Wednesday"]
    assert "no fish" in oracle.calls[0]["contents"]


def test_weekly_plan_drops_extra_days(gateway, oracle):
    oracle.queue(weekly_plan_json(["Monday", "Tuesday", "Friday"]))
    plan = asyncio.run(gateway.generate_weekly_plan(PROFILE, 2))
    assert list(plan.days) == ["Monday", "Tuesday"]


def test_weekly_plan_missing_day_fails(gateway, oracle):
    oracle.queue(weekly_plan_json(["Monday"]))
    assert asyncio.run(gateway.generate_weekly_plan(PROFILE, 2)) is None


def test_weekly_plan_incomplete_day_fails(gateway, oracle):
    payload = json.loads(weekly_plan_json(["Monday"]))
    del payload["Monday"]["dinner"]
    oracle.queue(json.dumps(payload))
    assert asyncio.run(gateway.generate_weekly_plan(PROFILE, 1)) is None


def test_weekly_plan_invalid_day_count_never_calls_model(gateway, oracle):
    assert asyncio.run(gateway.generate_weekly_plan(PROFILE, 9)) is None
    assert oracle.calls == []


def test_workout_plan(gateway, oracle):
    oracle.queue(workout_plan_json(["Day 1", "Day 2", "Day 3", "Day 4"]))
    plan = asyncio.run(gateway.generate_workout_plan(PROFILE, "Low-impact strength", 3))

    assert list(plan.schedule) == ["Day 1", "Day 2", "Day 3"]
    assert len(plan.recommendations) == 3
    assert "Low-impact strength" in oracle.calls[0]["contents"]


def test_workout_plan_without_schedule_fails(gateway, oracle):
    oracle.queue(json.dumps({"plan_name": "x"}))
    assert asyncio.run(gateway.generate_workout_plan(PROFILE, "cardio", 3)) is None


def test_chat_uses_profile_system_prompt(gateway, oracle):
    oracle.queue("Try a handful of almonds.")
    reply = asyncio.run(gateway.chat("What is a good snack?", PROFILE))

    assert reply == ChatMessage(sender="ai", text="Try a handful of almonds.")
    call = oracle.calls[0]
    assert call["contents"] == "What is a good snack?"
    assert "Ana Torres" in call["system_instruction"]
    assert "diabetes" in call["system_instruction"]
    assert "Keep my glucose stable" in call["system_instruction"]


@pytest.mark.parametrize("response", ["", ConnectionError("offline")])
def test_chat_failure_returns_apology(gateway, oracle, response):
    oracle.queue(response)
    assert asyncio.run(gateway.chat("hello", PROFILE)) == CHAT_ERROR
