import pytest

from bot.subscription import (
    FREE_PLAN,
    UNLIMITED,
    UsageAction,
    get_plan,
    list_paid_plans,
    list_plans,
)


def test_catalog_contains_free_and_paid_plans():
    assert [plan.id for plan in list_plans()] == ["free", "basic", "pro", "premium"]
    assert [plan.id for plan in list_paid_plans()] == ["basic", "pro", "premium"]


@pytest.mark.parametrize(
    "plan_id, price, days",
    [("basic", 50, 7), ("pro", 150, 30), ("premium", 500, 365)],
)
def test_paid_plan_prices_and_durations(plan_id, price, days):
    plan = get_plan(plan_id)

    assert plan is not None
    assert plan.price == price
    assert plan.duration_days == days
    assert not plan.is_free


def test_free_plan_limits():
    assert FREE_PLAN.is_free
    assert FREE_PLAN.limit_for(UsageAction.DAILY_GENERATIONS) == 3
    assert FREE_PLAN.limit_for(UsageAction.IMAGE_GENERATIONS) == 1
    assert FREE_PLAN.limit_for(UsageAction.VOICE_ANALYSIS) == 2


def test_every_plan_defines_every_action():
    for plan in list_plans():
        assert set(plan.limits) == set(UsageAction)
        assert all(limit >= 0 for limit in plan.limits.values())


def test_top_plans_are_unlimited():
    for plan_id in ("pro", "premium"):
        plan = get_plan(plan_id)
        assert all(limit == UNLIMITED for limit in plan.limits.values())


def test_get_plan_lookup():
    assert get_plan("BASIC") is get_plan("basic")
    assert get_plan("enterprise") is None
    assert get_plan("") is None
    assert get_plan(None) is None


def test_plan_limits_are_read_only():
    with pytest.raises(TypeError):
        FREE_PLAN.limits[UsageAction.DAILY_GENERATIONS] = 100


def test_usage_action_rejects_unknown_values():
    assert UsageAction("voiceAnalysis") is UsageAction.VOICE_ANALYSIS
    with pytest.raises(ValueError):
        UsageAction("videoAnalysis")
