import asyncio

import pytest

from nutrilife.models.credit_ledger import (
    FEATURE_COSTS,
    STARTING_CREDITS,
    Allowed,
    CreditLedger,
    DenialReason,
    Denied,
    Feature,
    FeatureGate,
    is_success,
)
from nutrilife.models.schemas import ChatMessage, Plan, UserProfile
from nutrilife.models.session_state import SessionState

from conftest import PROFILE_FORM


def make_state(plan=Plan.FREE, credits=STARTING_CREDITS):
    return SessionState(profile=UserProfile(**PROFILE_FORM, plan=plan), credits=credits)


@pytest.mark.parametrize("start, costs", [
    (7, [1, 1, 1]),
    (7, [3, 3, 3]),
    (2, [1, 3, 1]),
    (0, [1]),
    (5, []),
    (1, [10, 1, 1]),
])
def test_free_plan_balance_is_clamped_running_total(start, costs):
    state = make_state(credits=start)
    ledger = CreditLedger(state)
    for cost in costs:
        assert ledger.consume(cost) >= 0
    assert ledger.balance == max(0, start - sum(costs))


@pytest.mark.parametrize("cost", [0, 1, 3, 100])
def test_premium_consume_is_a_no_op(cost):
    state = make_state(plan=Plan.PREMIUM, credits=2)
    ledger = CreditLedger(state)
    ledger.consume(cost)
    assert ledger.balance == 2
    assert ledger.has_sufficient(cost)


def test_has_sufficient_on_free_plan():
    ledger = CreditLedger(make_state(credits=2))
    assert ledger.has_sufficient(1)
    assert ledger.has_sufficient(2)
    assert not ledger.has_sufficient(3)


def test_feature_costs():
    assert FEATURE_COSTS == {
        Feature.SCAN: 1,
        Feature.CALCULATOR: 1,
        Feature.RECIPE: 1,
        Feature.CHAT: 1,
        Feature.WEEKLY_PLAN: 3,
        Feature.WORKOUT_PLAN: 3,
    }
    assert Feature.WEEKLY_PLAN.cost == 3


def test_try_consume_returns_tagged_results_and_commit_charges_once():
    state = make_state(credits=3)
    gate = FeatureGate(CreditLedger(state))

    decision = gate.try_consume(Feature.WEEKLY_PLAN, state.profile)
    assert isinstance(decision, Allowed)
    assert state.credits == 3

    decision.commit()
    decision.commit()
    assert state.credits == 0

    denied = gate.try_consume(Feature.CHAT, state.profile)
    assert isinstance(denied, Denied)
    assert denied.reason == DenialReason.INSUFFICIENT_CREDITS
    assert denied.balance == 0


def test_try_consume_without_profile_is_denied():
    state = SessionState(credits=7)
    gate = FeatureGate(CreditLedger(state))
    assert isinstance(gate.try_consume(Feature.SCAN, None), Denied)


@pytest.mark.parametrize("result, expected", [
    (None, False),
    ("Could not analyze the image.", False),
    ([], False),
    ([object()], True),
    (ChatMessage(sender="ai", text="Hello"), True),
])
def test_is_success(result, expected):
    assert is_success(result) is expected


def test_run_charges_only_on_success():
    state = make_state(credits=7)
    charges = []
    gate = FeatureGate(CreditLedger(state), on_charge=lambda: charges.append(state.credits))

    async def failing():
        return "error"

    async def succeeding():
        return ChatMessage(sender="ai", text="ok")

    decision, result = asyncio.run(gate.run(Feature.CHAT, state.profile, failing))
    assert isinstance(decision, Allowed)
    assert result == "error"
    assert state.credits == 7
    assert charges == []

    decision, result = asyncio.run(gate.run(Feature.CHAT, state.profile, succeeding))
    assert decision.committed
    assert state.credits == 6
    assert charges == [6]


def test_run_releases_slot_when_call_raises():
    state = make_state()
    gate = FeatureGate(CreditLedger(state))

    async def exploding():
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        asyncio.run(gate.run(Feature.SCAN, state.profile, exploding))
    assert not gate.in_flight(Feature.SCAN)
    assert state.credits == STARTING_CREDITS


def test_second_request_for_same_feature_is_denied_while_in_flight():
    state = make_state()
    gate = FeatureGate(CreditLedger(state))

    async def scenario():
        release = asyncio.Event()

        async def slow_chat():
            await release.wait()
            return ChatMessage(sender="ai", text="done")

        async def quick_scan():
            return object()

        first = asyncio.create_task(gate.run(Feature.CHAT, state.profile, slow_chat))
        await asyncio.sleep(0)
        assert gate.in_flight(Feature.CHAT)

        duplicate, duplicate_result = await gate.run(Feature.CHAT, state.profile, slow_chat)
        other, _ = await gate.run(Feature.SCAN, state.profile, quick_scan)

        release.set()
        first_decision, _ = await first
        return duplicate, duplicate_result, other, first_decision

    duplicate, duplicate_result, other, first_decision = asyncio.run(scenario())
    assert isinstance(duplicate, Denied)
    assert duplicate.reason == DenialReason.REQUEST_IN_FLIGHT
    assert duplicate_result is None
    assert isinstance(other, Allowed)
    assert first_decision.committed
    assert state.credits == STARTING_CREDITS - 2
