"""Subscription plan definitions and helpers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple


class UsageAction(str, Enum):
    """Metered AI operations with a daily cap."""

    DAILY_GENERATIONS = "dailyGenerations"
    IMAGE_GENERATIONS = "imageGenerations"
    VOICE_ANALYSIS = "voiceAnalysis"


# Large enough to never be reached in a day.
UNLIMITED = 999999


def _limits(daily: int, image: int, voice: int) -> Mapping[UsageAction, int]:
    return MappingProxyType(
        {
            UsageAction.DAILY_GENERATIONS: daily,
            UsageAction.IMAGE_GENERATIONS: image,
            UsageAction.VOICE_ANALYSIS: voice,
        }
    )


@dataclass(frozen=True)
class PlanDefinition:
    id: str
    name: str
    description: str
    price: int  # Telegram Stars
    duration_days: int  # 0 means perpetual (free tier)
    features: Tuple[str, ...]
    limits: Mapping[UsageAction, int] = field(hash=False)

    @property
    def is_free(self) -> bool:
        return self.price == 0 and self.duration_days == 0

    def limit_for(self, action: UsageAction) -> int:
        return self.limits[action]


FREE_PLAN = PlanDefinition(
    id="free",
    name="🆓 Бесплатный",
    description="Базовые функции для теста",
    price=0,
    duration_days=0,
    features=(
        "✅ 3 генерации в день",
        "✅ Базовый AI анализ",
    ),
    limits=_limits(3, 1, 2),
)

_PLANS: Dict[str, PlanDefinition] = {
    "free": FREE_PLAN,
    "basic": PlanDefinition(
        id="basic",
        name="⭐ Базовый",
        description="Для регулярного использования",
        price=50,
        duration_days=7,
        features=(
            "✅ 50 генераций в день",
            "✅ Анализ фото и видео",
            "✅ Приоритетная обработка",
        ),
        limits=_limits(50, 20, 30),
    ),
    "pro": PlanDefinition(
        id="pro",
        name="💎 Pro",
        description="Для профессионалов",
        price=150,
        duration_days=30,
        features=(
            "✅ Безлимитные генерации",
            "✅ Все функции AI",
            "✅ Максимальный приоритет",
            "✅ Эксклюзивные модели",
        ),
        limits=_limits(UNLIMITED, UNLIMITED, UNLIMITED),
    ),
    "premium": PlanDefinition(
        id="premium",
        name="👑 Premium",
        description="Всё включено на целый год",
        price=500,
        duration_days=365,
        features=(
            "✅ Безлимитные генерации",
            "✅ Все функции AI",
            "✅ VIP поддержка",
            "✅ Ранний доступ к новым функциям",
            "✅ Эксклюзивные промпты",
        ),
        limits=_limits(UNLIMITED, UNLIMITED, UNLIMITED),
    ),
}

_PAID_ORDER: Tuple[str, ...] = ("basic", "pro", "premium")


def get_plan(plan_id: Optional[str]) -> Optional[PlanDefinition]:
    if not plan_id:
        return None
    return _PLANS.get(plan_id.lower())


def list_paid_plans() -> Tuple[PlanDefinition, ...]:
    return tuple(_PLANS[key] for key in _PAID_ORDER)


def list_plans() -> Tuple[PlanDefinition, ...]:
    return (FREE_PLAN, *list_paid_plans())
