from datetime import datetime

from bot.localization import get_text, resolve_language
from bot.subscription import (
    FREE_PLAN,
    EntitlementDecision,
    SubscriptionInfo,
    UsageAction,
    UserSubscription,
    get_plan,
    list_paid_plans,
)
from bot.utils import (
    format_date,
    render_payment_success,
    render_plans,
    render_quota_exceeded,
    render_subscription_info,
    truncate,
)


def test_truncate():
    assert truncate("short", 10) == "short"
    assert truncate("a" * 60, 50) == "a" * 50 + "..."


def test_format_date_depends_on_language():
    moment = datetime(2024, 5, 17, 9, 30)

    assert format_date(moment, "ru") == "17.05.2024"
    assert format_date(moment, "en") == "2024-05-17"


def test_resolve_language():
    assert resolve_language(None) == "ru"
    assert resolve_language("ru") == "ru"
    assert resolve_language("en-US") == "en"
    assert resolve_language("de") == "en"


def test_get_text_falls_back_to_default_language():
    assert get_text("payment_thanks", "fr") == get_text("payment_thanks", "ru")


def test_plans_list_shows_every_paid_plan():
    text = render_plans(list_paid_plans(), "en")

    for plan in list_paid_plans():
        assert f"Price: {plan.price} Stars" in text
        assert f"Duration: {plan.duration_days} days" in text


def test_subscription_info_for_paid_plan():
    plan = get_plan("pro")
    subscription = UserSubscription(
        id=1,
        user_id=1,
        plan_id="pro",
        start_date=datetime(2024, 5, 1),
        end_date=datetime(2024, 5, 31),
        is_active=True,
        transaction_id="charge-1",
        created_at=datetime(2024, 5, 1),
    )
    info = SubscriptionInfo(
        plan=plan,
        subscription=subscription,
        days_left=21,
        usage={action: EntitlementDecision(True, plan.limit_for(action) - 4, plan.limit_for(action), 4) for action in UsageAction},
    )

    text = render_subscription_info(info, "en")

    assert "Days left: 21" in text
    assert "2024-05-31" in text
    assert "🖼️ Images: 4/∞" in text


def test_subscription_info_for_free_plan_has_no_expiry():
    usage = {
        action: EntitlementDecision(True, FREE_PLAN.limit_for(action), FREE_PLAN.limit_for(action), 0)
        for action in UsageAction
    }
    info = SubscriptionInfo(plan=FREE_PLAN, subscription=None, days_left=None, usage=usage)

    text = render_subscription_info(info, "en")

    assert "Days left" not in text
    assert "🎤 Voice: 0/2" in text


def test_quota_exceeded_mentions_plan_and_limit():
    text = render_quota_exceeded(FREE_PLAN, EntitlementDecision(False, 0, 3, 3), "en")

    assert FREE_PLAN.name in text
    assert "Limit: 3 per day" in text
    assert "/subscribe" in text


def test_payment_success_lists_features():
    plan = get_plan("basic")

    text = render_payment_success(plan, "ru")

    assert plan.name in text
    for feature in plan.features:
        assert feature in text
