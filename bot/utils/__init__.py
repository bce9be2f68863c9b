from .rendering import (
    format_date,
    format_datetime,
    latency_grade,
    render_payment_success,
    render_ping,
    render_plans,
    render_quota_exceeded,
    render_status,
    render_subscription_info,
    truncate,
)

__all__ = [
    "format_date",
    "format_datetime",
    "latency_grade",
    "render_payment_success",
    "render_ping",
    "render_plans",
    "render_quota_exceeded",
    "render_status",
    "render_subscription_info",
    "truncate",
]
