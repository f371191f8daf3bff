import json
import logging
import random
import re
from typing import Any, Optional, Union

from google import genai
from google.genai import types

from nutrilife.core import prompts
from nutrilife.core.config import settings
from nutrilife.models.schemas import (
    ChatMessage,
    FoodAnalysis,
    NutritionalAnalysis,
    Recipe,
    UserProfile,
    WeeklyPlan,
    WorkoutPlan,
)
from nutrilife.tools.contracts import (
    DAY_MEALS_SCHEMA,
    FOOD_ANALYSIS_SCHEMA,
    NUTRITION_SCHEMA,
    RECIPE_LIST_SCHEMA,
    build_day_keyed_contract,
    weekly_day_labels,
    workout_day_labels,
    workout_plan_contract,
)

logger = logging.getLogger(__name__)

IMAGE_ANALYSIS_ERROR = "Could not analyze the image. Please try again."
NUTRITION_ERROR = "Could not complete the calculation. Try again with a clearer description."
CHAT_ERROR = "Sorry, I'm having trouble connecting. Please try again later."


class GeminiOracle:
    """Thin async wrapper over the google-genai client."""

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None):
        api_key = api_key or settings.GEMINI_API_KEY
        if not api_key:
            raise EnvironmentError("GEMINI_API_KEY not found")
        self.model = model or settings.GEMINI_MODEL
        self.client = genai.Client(api_key=api_key)

    async def generate(
        self,
        contents: Any,
        system_instruction: Optional[str] = None,
        response_schema: Optional[types.Schema] = None,
    ) -> str:
        config = types.GenerateContentConfig(
            system_instruction=system_instruction,
            response_mime_type="application/json" if response_schema is not None else None,
            response_schema=response_schema,
        )
        response = await self.client.aio.models.generate_content(
            model=self.model,
            contents=contents,
            config=config,
        )
        return response.text or ""


def extract_json(text: str) -> Any:
    """Parse a JSON payload, tolerating a ```json code fence around it."""
    if not text or not text.strip():
        raise ValueError("Model returned an empty response")

    fenced = re.search(r'```(?:json)?\s*(.*?)\s*```', text, re.DOTALL)
    payload = fenced.group(1) if fenced else text.strip()
    try:
        return json.loads(payload)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON from model: {e}") from e


class AIGateway:
    """
    Builds prompts and contracts for each feature flow and calls the oracle.

    Every flow catches its own failures and returns the flow's error value
    (an error string, None or an empty list) instead of raising.
    """

    def __init__(self, oracle):
        self.oracle = oracle

    async def _generate_json(self, contents: Any, schema: types.Schema, flow: str) -> Any:
        logger.info(f"🤖 Calling model for {flow}")
        text = await self.oracle.generate(contents, response_schema=schema)
        logger.debug(f"📥 {flow} response: {text[:200]}...")
        return extract_json(text)

    async def analyze_food_image(
        self, image: bytes, mime_type: str, profile: UserProfile
    ) -> Union[FoodAnalysis, str]:
        try:
            if not image:
                raise ValueError("Empty image payload")
            contents = [
                types.Part.from_bytes(data=image, mime_type=mime_type),
                types.Part(text=prompts.food_image_prompt(profile)),
            ]
            data = await self._generate_json(contents, FOOD_ANALYSIS_SCHEMA, "image analysis")
            return FoodAnalysis.model_validate(data)
        except Exception:
            logger.exception("❌ Error analyzing food image")
            return IMAGE_ANALYSIS_ERROR

    async def calculate_nutrition(
        self, text: str, profile: UserProfile
    ) -> Union[NutritionalAnalysis, str]:
        try:
            data = await self._generate_json(
                prompts.nutrition_prompt(text, profile), NUTRITION_SCHEMA, "nutrition calculation"
            )
            return NutritionalAnalysis.model_validate(data)
        except Exception:
            logger.exception("❌ Error calculating nutrition")
            return NUTRITION_ERROR

    async def generate_recipes(self, request: str, count: int = 2) -> list[Recipe]:
        try:
            data = await self._generate_json(
                prompts.recipes_prompt(request, count), RECIPE_LIST_SCHEMA, "recipe generation"
            )
            if not isinstance(data, list):
                raise ValueError(f"Expected a list of recipes, got {type(data).__name__}")
            return [Recipe.model_validate(item) for item in data]
        except Exception:
            logger.exception("❌ Error generating recipes")
            return []

    async def profile_recipes(self, profile: UserProfile, request: str) -> list[Recipe]:
        return await self.generate_recipes(prompts.profile_recipe_request(profile, request, 2), 2)

    async def surprise_recipe(self, profile: UserProfile) -> list[Recipe]:
        theme = random.choice(prompts.SURPRISE_THEMES)
        return await self.generate_recipes(prompts.surprise_recipe_request(profile, theme), 1)

    async def generate_weekly_plan(
        self, profile: UserProfile, days: int, preferences: str = ""
    ) -> Optional[WeeklyPlan]:
        try:
            day_labels = weekly_day_labels(days)
            contract = build_day_keyed_contract(day_labels, DAY_MEALS_SCHEMA)
            data = await self._generate_json(
                prompts.weekly_plan_prompt(profile, day_labels, preferences or ""),
                contract,
                "weekly plan",
            )
            if not isinstance(data, dict):
                raise ValueError(f"Expected an object keyed by day, got {type(data).__name__}")
            missing = [day for day in day_labels if day not in data]
            if missing:
                raise ValueError(f"Weekly plan is missing days: {missing}")
            return WeeklyPlan.model_validate({"days": {day: data[day] for day in day_labels}})
        except Exception:
            logger.exception("❌ Error generating weekly plan")
            return None

    async def generate_workout_plan(
        self, profile: UserProfile, focus: str, days: int
    ) -> Optional[WorkoutPlan]:
        try:
            day_labels = workout_day_labels(days)
            data = await self._generate_json(
                prompts.workout_plan_prompt(profile, focus, day_labels),
                workout_plan_contract(day_labels),
                "workout plan",
            )
            schedule = data.get("schedule") if isinstance(data, dict) else None
            if not isinstance(schedule, dict):
                raise ValueError("Workout plan has no schedule")
            missing = [day for day in day_labels if day not in schedule]
            if missing:
                raise ValueError(f"Workout plan is missing days: {missing}")
            data["schedule"] = {day: schedule[day] for day in day_labels}
            return WorkoutPlan.model_validate(data)
        except Exception:
            logger.exception("❌ Error generating workout plan")
            return None

    async def chat(self, message: str, profile: UserProfile) -> Union[ChatMessage, str]:
        """One stateless chat turn; the caller keeps the conversation."""
        try:
            text = await self.oracle.generate(
                message, system_instruction=prompts.chat_system_prompt(profile)
            )
            if not text or not text.strip():
                raise ValueError("Model returned an empty response")
            return ChatMessage(sender="ai", text=text)
        except Exception:
            logger.exception("❌ Error in AI chat")
            return CHAT_ERROR
