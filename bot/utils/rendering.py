"""Text rendering for subscription, plan, quota and status messages."""

from __future__ import annotations

from datetime import datetime
from html import escape
from typing import Iterable

from bot.localization import LATENCY_GRADES, USAGE_ACTION_LABELS, get_label, get_text
from bot.subscription import UNLIMITED, EntitlementDecision, PlanDefinition, SubscriptionInfo
from db import QueryStatsSnapshot

# Upper bounds in milliseconds, checked in order
_LATENCY_GRADES = ((100, "excellent"), (300, "good"), (500, "medium"))


def truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return f"{text[:limit]}..."


def format_date(value: datetime, language: str) -> str:
    if language == "ru":
        return value.strftime("%d.%m.%Y")
    return value.strftime("%Y-%m-%d")


def format_datetime(value: datetime, language: str) -> str:
    if language == "ru":
        return value.strftime("%d.%m.%Y %H:%M")
    return value.strftime("%Y-%m-%d %H:%M")


def _features(plan: PlanDefinition, indent: str = "") -> str:
    return "\n".join(f"{indent}{escape(feature)}" for feature in plan.features)


def _usage_line(action: str, decision: EntitlementDecision, language: str) -> str:
    label = get_label(USAGE_ACTION_LABELS, action, language)
    key = "info_usage_unlimited" if decision.limit >= UNLIMITED else "info_usage_line"
    return get_text(
        key,
        language,
        label=label,
        used=str(decision.used),
        limit=str(decision.limit),
    )


def render_subscription_info(info: SubscriptionInfo, language: str) -> str:
    lines: list[str] = [
        get_text("info_title", language),
        "",
        get_text("info_plan", language, plan=escape(info.plan.name)),
        f"📝 {escape(info.plan.description)}",
    ]

    if info.subscription is not None and info.days_left is not None:
        lines.append("")
        lines.append(get_text("days_left", language, days=str(info.days_left)))
        lines.append(
            get_text(
                "info_expires",
                language,
                date=format_date(info.subscription.end_date, language),
            )
        )

    lines.append("")
    lines.append(get_text("info_features_header", language))
    lines.append(_features(info.plan))

    lines.append("")
    lines.append(get_text("info_usage_header", language))
    for action, decision in info.usage.items():
        lines.append(_usage_line(action.value, decision, language))
    return "\n".join(lines)


def render_plans(plans: Iterable[PlanDefinition], language: str) -> str:
    blocks: list[str] = [get_text("plans_title", language)]
    for plan in plans:
        blocks.append(
            get_text(
                "plan_block",
                language,
                name=escape(plan.name),
                price=str(plan.price),
                days=str(plan.duration_days),
                description=escape(plan.description),
                features=_features(plan, indent="  "),
            )
        )
    blocks.append(get_text("plans_how_to_pay", language))
    return "\n\n".join(blocks)


def render_quota_exceeded(plan: PlanDefinition, decision: EntitlementDecision, language: str) -> str:
    return get_text(
        "quota_exceeded",
        language,
        plan=escape(plan.name),
        limit=str(decision.limit),
    )


def render_payment_success(plan: PlanDefinition, language: str) -> str:
    return get_text(
        "payment_success",
        language,
        plan=escape(plan.name),
        days=str(plan.duration_days),
        features=_features(plan),
    )


def latency_grade(elapsed_ms: float, language: str) -> str:
    grade = next((name for bound, name in _LATENCY_GRADES if elapsed_ms < bound), "slow")
    return get_label(LATENCY_GRADES, grade, language)


def render_ping(elapsed_ms: int, now: datetime, language: str) -> str:
    return get_text("ping_result", language, ms=str(elapsed_ms), time=format_datetime(now, language))


def render_status(
    bot_ms: int,
    db_ms: int,
    total_ms: int,
    stats: QueryStatsSnapshot,
    now: datetime,
    language: str,
) -> str:
    min_ms = get_text("status_no_queries", language) if stats.min_ms is None else f"{stats.min_ms:.2f}ms"
    return get_text(
        "status_text",
        language,
        bot_ms=str(bot_ms),
        bot_grade=latency_grade(bot_ms, language),
        db_ms=str(db_ms),
        db_grade=latency_grade(db_ms, language),
        queries=str(stats.queries),
        avg_ms=f"{stats.avg_ms:.2f}",
        min_ms=min_ms,
        max_ms=f"{stats.max_ms:.2f}",
        total_ms=str(total_ms),
        total_grade=latency_grade(total_ms, language),
        time=format_datetime(now, language),
    )
