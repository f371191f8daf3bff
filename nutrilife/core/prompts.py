from nutrilife.models.schemas import Gender, UserProfile

GENDER_LABELS = {
    Gender.MALE: "Male",
    Gender.FEMALE: "Female",
    Gender.OTHER: "Not specified",
}

SURPRISE_THEMES = [
    "a vegetarian dish full of flavour",
    "a creative recipe with chicken or turkey",
    "an innovative idea with legumes such as lentils or chickpeas",
    "a light white fish dish (such as hake or sea bass)",
    "a comforting meal with lean beef or pork",
    "a complete and nutritious salad that works as a single dish",
    "an exotic and healthy soup or cream",
    "a vegetable stir-fry with tofu or prawns",
]


def profile_details(profile: UserProfile) -> str:
    return f"""
- Age: {profile.age} years
- Gender: {GENDER_LABELS[profile.gender]}
- Weight: {profile.weight} kg
- Height: {profile.height} cm
- Activity level: {profile.activity_level.value}
- Health condition: {profile.condition.value}
- Main goal: {profile.goal}
"""


def chat_system_prompt(profile: UserProfile) -> str:
    return (
        f"You are NutriLife, a friendly AI assistant and nutrition expert. "
        f"You are helping {profile.name}, who has {profile.condition.value} and whose main goal is "
        f"\"{profile.goal}\". Be motivating and clear, and give safe, evidence-based advice that is "
        f"specifically relevant to {profile.name} and their conditions and goals."
    )


def recipes_prompt(request: str, count: int) -> str:
    noun = "recipes" if count > 1 else "recipe"
    return (
        f"Generate {count} {noun} based on this request: \"{request}\". "
        f"Aim for variety and do not limit yourself to common ingredients such as salmon. "
        f"Make sure they are suitable for people with diabetes and hypertension. "
        f"The instructions must be clear, easy to understand and well explained."
    )


def profile_recipe_request(profile: UserProfile, request: str, count: int = 2) -> str:
    return (
        f"Considering the user profile ({profile_details(profile)}), generate {count} "
        f"recipes that meet this request: \"{request}\""
    )


def surprise_recipe_request(profile: UserProfile, theme: str) -> str:
    return (
        f"Considering the user profile ({profile_details(profile)}), generate a healthy, creative "
        f"and surprising recipe based on the following idea: {theme}."
    )


def food_image_prompt(profile: UserProfile) -> str:
    return f"""
Analyze this image of food. You are a nutrition expert. Your answer MUST be JSON.
Identify the foods in the image with their estimated weights. Estimate the total calories and
the grams of macronutrients (protein, carbohydrates, fat).
Then give detailed feedback for a user with this profile:
- Health condition: {profile.condition.value}
- Goal: "{profile.goal}"
The feedback must include:
1) an analysis of the composition of the meal,
2) a unified and detailed recommendation,
3) a boolean 'is_recommended' that is true if the meal is generally advisable, or false if it is
   not or must be eaten with great caution.
"""


def nutrition_prompt(text: str, profile: UserProfile) -> str:
    return f"""
Calculate the nutritional information for the following: "{text}".
You are a nutrition expert. Your answer MUST be JSON.
Estimate the total calories, the grams of macronutrients (protein, carbohydrates, fat) and the
grams of sugars. Then give detailed feedback for a user with this profile:
- Health condition: {profile.condition.value}
- Goal: "{profile.goal}"
The feedback must include:
1) an analysis of the composition of the meal,
2) a detailed recommendation,
3) a boolean 'is_recommended' that is true if the meal is generally advisable, or false if it is
   not or must be eaten with great caution.
"""


def weekly_plan_prompt(profile: UserProfile, day_labels: list[str], preferences: str) -> str:
    preferences_line = (
        f"Take these preferences and allergies into account: \"{preferences}\"." if preferences else ""
    )
    return f"""
Create a {len(day_labels)}-day meal plan ({', '.join(day_labels)}) for a person with this profile:
{profile_details(profile)}
{preferences_line}
For each day provide 5 recipes: breakfast, morning_snack, lunch, afternoon_snack and dinner.
The snacks must be light and healthy. Each recipe MUST include a name, a description, the
ingredients, clear and easy to follow preparation steps, and the preparation time.
The plan must be simple, healthy and varied, and designed specifically for someone with the
health conditions above, focused on controlling glucose and sodium.
Avoid repeating main ingredients too often.
"""


def workout_plan_prompt(profile: UserProfile, focus: str, day_labels: list[str]) -> str:
    days = len(day_labels)
    condition = profile.condition.value
    return f"""
Create a {days}-day physical training plan for a user with this profile:
- Age: {profile.age}
- Health condition: {condition}
- Health goal: "{profile.goal}"
- Physical activity level: {profile.activity_level.value}

The main focus of the routine must be: "{focus}".

**CRITICAL SAFETY RULES:**
1. The plan MUST be safe for someone with {condition}. Prioritize low-impact exercises. Avoid
   high intensity exercise, heavy lifting or movements that can cause blood pressure spikes.
2. Always include a light warm-up before each session and gentle stretching at the end.
   Describe these as part of the routine.
3. The plan must be realistic for someone with a {profile.activity_level.value} activity level.
4. Create a plan for {days} different days. Name the days {', '.join(f'"{d}"' for d in day_labels)}.
5. For each day provide a list of 4 to 6 exercises.
6. Include a list of at least 3 important general safety recommendations specific to exercising
   with {condition}. For example "Measure your glucose before and after training" or
   "Always stay hydrated".
"""
