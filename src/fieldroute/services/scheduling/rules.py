"""Pure revisit-cadence rules.

Everything here is deterministic and free of I/O so the same functions back
production scheduling and the unit tests.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from ...config import settings
from ...models.domain import TIERS, TierConfig


@dataclass(slots=True, frozen=True)
class RevisitDecision:
    priority: str
    days_until_revisit: int
    reason: str


def _coerce_days(value: Any) -> Optional[int]:
    """Accept ``{"revisit_days": 7}`` (stored shape) or a bare ``7``."""
    if isinstance(value, Mapping):
        value = value.get("revisit_days")
    if value is None or isinstance(value, bool):
        return None
    try:
        days = int(value)
    except (TypeError, ValueError):
        return None
    return days if days > 0 else None


def resolve_tier_config(raw: Optional[Mapping[str, Any]], defaults: Optional[Mapping[str, int]] = None) -> TierConfig:
    """Build a complete ``TierConfig`` from a company's stored config.

    Missing or invalid tiers fall back to ``defaults`` (the configured
    ``{A: 7, B: 14, C: 30}`` unless overridden) one tier at a time.
    """

    fallback = dict(defaults or settings.default_tier_revisit_days)
    resolved: dict[str, int] = {}
    for tier in TIERS:
        days = _coerce_days(raw.get(tier)) if raw else None
        resolved[tier] = days if days is not None else int(fallback[tier])
    return TierConfig(a_days=resolved["A"], b_days=resolved["B"], c_days=resolved["C"])


def resolve_store_tier(tier: Optional[str], default: Optional[str] = None) -> str:
    normalized = (tier or "").strip().upper()
    if normalized in TIERS:
        return normalized
    return default or settings.default_store_tier


def decide_revisit(stock_status: str, tier_days: int) -> RevisitDecision:
    """Apply the cadence table; the first matching row wins.

    ``out_of_stock`` -> high priority in ``oos_revisit_days`` (2);
    ``low_stock`` -> high priority in half the tier cadence, never sooner than
    ``low_stock_min_revisit_days`` (3); anything else -> the tier cadence.
    """

    if stock_status == "out_of_stock":
        return RevisitDecision("high", settings.oos_revisit_days, "oos_detected")
    if stock_status == "low_stock":
        return RevisitDecision("high", max(settings.low_stock_min_revisit_days, tier_days // 2), "low_stock")
    return RevisitDecision("normal", tier_days, "scheduled")
