import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Union

from nutrilife.models.schemas import Plan, UserProfile
from nutrilife.models.session_state import SessionState

logger = logging.getLogger(__name__)

STARTING_CREDITS = 7


class Feature(str, Enum):
    SCAN = "scan"
    CALCULATOR = "calculator"
    RECIPE = "recipe"
    CHAT = "chat"
    WEEKLY_PLAN = "weekly_plan"
    WORKOUT_PLAN = "workout_plan"

    @property
    def cost(self) -> int:
        return FEATURE_COSTS[self]


FEATURE_COSTS = {
    Feature.SCAN: 1,
    Feature.CALCULATOR: 1,
    Feature.RECIPE: 1,
    Feature.CHAT: 1,
    Feature.WEEKLY_PLAN: 3,
    Feature.WORKOUT_PLAN: 3,
}


class CreditLedger:
    """Credit balance of one session. Premium plans are unlimited."""

    def __init__(self, state: SessionState):
        self.state = state

    @property
    def balance(self) -> int:
        return self.state.credits

    @property
    def is_unlimited(self) -> bool:
        return self.state.profile is not None and self.state.profile.plan == Plan.PREMIUM

    def has_sufficient(self, cost: int) -> bool:
        if self.is_unlimited:
            return True
        return self.state.credits >= cost

    def consume(self, cost: int) -> int:
        if not self.is_unlimited:
            self.state.credits = max(0, self.state.credits - cost)
        return self.state.credits


class DenialReason(str, Enum):
    INSUFFICIENT_CREDITS = "insufficient_credits"
    REQUEST_IN_FLIGHT = "request_in_flight"


@dataclass
class Allowed:
    feature: Feature
    cost: int
    _charge: Callable[[int], Any] = field(repr=False)
    committed: bool = False

    def commit(self) -> None:
        """Charge the feature cost. Call only after the AI call succeeded."""
        if not self.committed:
            self._charge(self.cost)
            self.committed = True


@dataclass(frozen=True)
class Denied:
    feature: Feature
    reason: DenialReason
    cost: int
    balance: int


GateResult = Union[Allowed, Denied]


def is_success(result: Any) -> bool:
    """Gateway flows return None, an error string or an empty list on failure."""
    if result is None or isinstance(result, str):
        return False
    if isinstance(result, list):
        return len(result) > 0
    return True


class FeatureGate:
    """Single entry point for every credit-metered AI feature of a session."""

    def __init__(self, ledger: CreditLedger, on_charge: Optional[Callable[[], None]] = None):
        self.ledger = ledger
        self.on_charge = on_charge
        self._in_flight: set[Feature] = set()

    def in_flight(self, feature: Feature) -> bool:
        return feature in self._in_flight

    def try_consume(self, feature: Feature, profile: Optional[UserProfile]) -> GateResult:
        cost = feature.cost
        if feature in self._in_flight:
            return Denied(feature, DenialReason.REQUEST_IN_FLIGHT, cost, self.ledger.balance)
        if profile is None or not self.ledger.has_sufficient(cost):
            return Denied(feature, DenialReason.INSUFFICIENT_CREDITS, cost, self.ledger.balance)
        return Allowed(feature, cost, self._charge)

    def _charge(self, cost: int) -> None:
        balance = self.ledger.consume(cost)
        logger.info(f"💳 Charged {cost} credit(s), balance now {balance}")
        if self.on_charge:
            self.on_charge()

    async def run(
        self,
        feature: Feature,
        profile: Optional[UserProfile],
        call: Callable[[], Awaitable[Any]],
    ) -> tuple[GateResult, Any]:
        """
        Gate, run and settle one AI call.

        Returns the gate decision and the call result (None when denied).
        Credit is charged only when the result is a success value.
        """
        decision = self.try_consume(feature, profile)
        if isinstance(decision, Denied):
            logger.info(f"⛔ {feature.value} denied: {decision.reason.value}")
            return decision, None

        self._in_flight.add(feature)
        try:
            result = await call()
        finally:
            self._in_flight.discard(feature)

        if is_success(result):
            decision.commit()
        else:
            logger.warning(f"⚠️ {feature.value} returned no usable result, no credit charged")
        return decision, result
