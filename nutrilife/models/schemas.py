from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field


class Condition(str, Enum):
    DIABETES = "diabetes"
    HYPERTENSION = "hypertension"
    BOTH = "both"


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class ActivityLevel(str, Enum):
    SEDENTARY = "sedentary"
    LIGHT = "light"
    MODERATE = "moderate"
    ACTIVE = "active"
    VERY_ACTIVE = "very_active"


class Plan(str, Enum):
    FREE = "free"
    PREMIUM = "premium"


# --- Profile ---

class ProfileCreate(BaseModel):
    """Profile data from the onboarding form (also used for profile edits)"""
    name: str = Field(min_length=1)
    condition: Condition
    goal: str
    gender: Gender
    age: int = Field(gt=0)
    weight: float = Field(gt=0)  # kg
    height: float = Field(gt=0)  # cm
    activity_level: ActivityLevel


class UserProfile(ProfileCreate):
    plan: Plan = Plan.FREE


# --- Habits ---

class Habit(BaseModel):
    id: int
    text: str
    completed: bool = False


class HabitCreate(BaseModel):
    text: str = Field(min_length=1)


# --- AI results ---

class Recipe(BaseModel):
    recipe_name: str
    description: str
    ingredients: list[str]
    instructions: list[str]
    prep_time: str


class DayMeals(BaseModel):
    breakfast: Recipe
    morning_snack: Recipe
    lunch: Recipe
    afternoon_snack: Recipe
    dinner: Recipe


class WeeklyPlan(BaseModel):
    days: dict[str, DayMeals]


class Workout(BaseModel):
    name: str
    sets: str
    repetitions: str
    description: str
    rest: str


class WorkoutPlan(BaseModel):
    plan_name: str
    focus: str
    duration: str
    schedule: dict[str, list[Workout]]
    recommendations: list[str]


class Macros(BaseModel):
    protein: float
    carbs: float
    fat: float


class Feedback(BaseModel):
    composition_analysis: str
    recommendation: str
    is_recommended: bool


class FoodAnalysis(BaseModel):
    total_calories: float
    macros: Macros
    identified_foods: list[str]
    feedback: Feedback


class NutritionalAnalysis(BaseModel):
    total_calories: float
    macros: Macros
    sugars: float
    feedback: Feedback


class ChatMessage(BaseModel):
    sender: Literal["user", "ai"]
    text: str


# --- Requests ---

class UserCreate(BaseModel):
    email: EmailStr
    password: str
    name: str


class Token(BaseModel):
    access_token: str
    token_type: str
    phase: str


class NoteUpdate(BaseModel):
    text: str


class CalculatorRequest(BaseModel):
    text: str = Field(min_length=1)


class RecipeRequest(BaseModel):
    prompt: str = Field(min_length=1)


class WeeklyPlanRequest(BaseModel):
    days: int = Field(default=7, ge=1, le=7)
    preferences: Optional[str] = ""


class WorkoutPlanRequest(BaseModel):
    focus: str = Field(default="Improve cardio and endurance", min_length=1)
    days: int = Field(default=3, ge=1, le=7)


class ChatRequest(BaseModel):
    message: str = Field(min_length=1)
