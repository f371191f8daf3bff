from google.genai import types

WEEK_DAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]
MEAL_SLOTS = ["breakfast", "morning_snack", "lunch", "afternoon_snack", "dinner"]
MAX_PLAN_DAYS = 7


def _check_days(days: int) -> None:
    if not 1 <= days <= MAX_PLAN_DAYS:
        raise ValueError(f"A plan must cover between 1 and {MAX_PLAN_DAYS} days, got {days}")


def weekly_day_labels(days: int) -> list[str]:
    """First `days` weekday names for a meal plan."""
    _check_days(days)
    return WEEK_DAYS[:days]


def workout_day_labels(days: int) -> list[str]:
    _check_days(days)
    return [f"Day {n}" for n in range(1, days + 1)]


def build_day_keyed_contract(day_labels: list[str], item_schema: types.Schema) -> types.Schema:
    """An object with one required property per day label, each shaped like `item_schema`."""
    return types.Schema(
        type=types.Type.OBJECT,
        properties={label: item_schema for label in day_labels},
        required=list(day_labels),
    )


RECIPE_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "recipe_name": types.Schema(type=types.Type.STRING, description="Name of the recipe."),
        "description": types.Schema(type=types.Type.STRING, description="Short description of the recipe."),
        "ingredients": types.Schema(
            type=types.Type.ARRAY,
            items=types.Schema(type=types.Type.STRING),
            description="Ingredients with quantities.",
        ),
        "instructions": types.Schema(
            type=types.Type.ARRAY,
            items=types.Schema(type=types.Type.STRING),
            description="Preparation steps. Clear, easy to follow and well explained.",
        ),
        "prep_time": types.Schema(type=types.Type.STRING, description="Total preparation time."),
    },
    required=["recipe_name", "description", "ingredients", "instructions", "prep_time"],
)

RECIPE_LIST_SCHEMA = types.Schema(type=types.Type.ARRAY, items=RECIPE_SCHEMA)

DAY_MEALS_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={slot: RECIPE_SCHEMA for slot in MEAL_SLOTS},
    required=list(MEAL_SLOTS),
)

MACROS_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "protein": types.Schema(type=types.Type.NUMBER, description="Grams of protein."),
        "carbs": types.Schema(type=types.Type.NUMBER, description="Grams of carbohydrates."),
        "fat": types.Schema(type=types.Type.NUMBER, description="Grams of fat."),
    },
    required=["protein", "carbs", "fat"],
)

FEEDBACK_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "composition_analysis": types.Schema(
            type=types.Type.STRING, description="Analysis of the overall composition of the meal."
        ),
        "recommendation": types.Schema(
            type=types.Type.STRING,
            description="Unified recommendation for the user's goal, based mainly on their health condition.",
        ),
        "is_recommended": types.Schema(
            type=types.Type.BOOLEAN, description="True if the meal is advisable for the user, False otherwise."
        ),
    },
    required=["composition_analysis", "recommendation", "is_recommended"],
)

FOOD_ANALYSIS_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "total_calories": types.Schema(type=types.Type.NUMBER, description="Total estimated kilocalories."),
        "macros": MACROS_SCHEMA,
        "identified_foods": types.Schema(
            type=types.Type.ARRAY,
            items=types.Schema(type=types.Type.STRING),
            description="Foods identified in the image with estimated weights, e.g. 'Chicken breast (150g)'.",
        ),
        "feedback": FEEDBACK_SCHEMA,
    },
    required=["total_calories", "macros", "identified_foods", "feedback"],
)

NUTRITION_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "total_calories": types.Schema(type=types.Type.NUMBER, description="Total estimated kilocalories."),
        "macros": MACROS_SCHEMA,
        "sugars": types.Schema(type=types.Type.NUMBER, description="Grams of total sugars."),
        "feedback": FEEDBACK_SCHEMA,
    },
    required=["total_calories", "macros", "sugars", "feedback"],
)

WORKOUT_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "name": types.Schema(type=types.Type.STRING, description="Name of the exercise."),
        "sets": types.Schema(type=types.Type.STRING, description="Number of sets, e.g. '3'."),
        "repetitions": types.Schema(
            type=types.Type.STRING, description="Repetitions or duration, e.g. '10-12' or '30 seconds'."
        ),
        "description": types.Schema(
            type=types.Type.STRING, description="Short description of how to perform the exercise correctly."
        ),
        "rest": types.Schema(type=types.Type.STRING, description="Rest between sets, e.g. '60 seconds'."),
    },
    required=["name", "sets", "repetitions", "description", "rest"],
)


def workout_plan_contract(day_labels: list[str]) -> types.Schema:
    workout_list = types.Schema(type=types.Type.ARRAY, items=WORKOUT_SCHEMA)
    return types.Schema(
        type=types.Type.OBJECT,
        properties={
            "plan_name": types.Schema(
                type=types.Type.STRING, description="A motivating name for the plan, e.g. 'Active Start Plan'."
            ),
            "focus": types.Schema(
                type=types.Type.STRING, description="Main focus of the plan, e.g. 'Low-impact strengthening'."
            ),
            "duration": types.Schema(
                type=types.Type.STRING, description=f"Duration of the plan in days, e.g. '{len(day_labels)} days'."
            ),
            "schedule": build_day_keyed_contract(day_labels, workout_list),
            "recommendations": types.Schema(
                type=types.Type.ARRAY,
                items=types.Schema(type=types.Type.STRING),
                description="Important safety recommendations.",
            ),
        },
        required=["plan_name", "focus", "duration", "schedule", "recommendations"],
    )
