from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from nutrilife.models.schemas import Habit, Recipe, UserProfile


class SessionPhase(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    ONBOARDING = "onboarding"
    ACTIVE = "active"


class View(str, Enum):
    WELCOME = "welcome"
    ONBOARDING = "onboarding"
    PROFILE = "profile"
    MONITORING = "monitoring"
    HABITS = "habits"
    SCANNER = "scanner"
    CALCULATOR = "calculator"
    RECIPES = "recipes"
    MY_RECIPES = "my_recipes"
    WEEKLY_PLAN = "weekly_plan"
    COACH = "coach"
    CHAT = "chat"


# Views reachable through navigation once onboarding is done
NAVIGABLE_VIEWS = frozenset(View) - {View.WELCOME, View.ONBOARDING}


@dataclass(frozen=True)
class Identity:
    uid: str
    email: Optional[str] = None
    display_name: Optional[str] = None


@dataclass
class SessionState:
    """Everything the app knows about one signed-in user."""
    identity: Optional[Identity] = None
    identity_resolved: bool = False
    phase: SessionPhase = SessionPhase.UNAUTHENTICATED
    active_view: View = View.WELCOME
    profile: Optional[UserProfile] = None
    habits: list[Habit] = field(default_factory=list)
    stars: int = 0
    credits: int = 0
    recipes: list[Recipe] = field(default_factory=list)
    notes: dict[str, str] = field(default_factory=dict)

    def summary(self) -> dict:
        return {
            "phase": self.phase.value,
            "active_view": self.active_view.value,
            "uid": self.identity.uid if self.identity else None,
            "name": self.profile.name if self.profile else None,
            "plan": self.profile.plan.value if self.profile else None,
            "credits": self.credits,
            "stars": self.stars,
        }
