"""Terminal rendering of the usage summary."""

from __future__ import annotations

import calendar
import enum
from dataclasses import dataclass
from datetime import date, timedelta

import click

from cursor_usage import constants
from cursor_usage.models import UsagePayload


class Tier(enum.Enum):
    NEUTRAL = "neutral"
    WARNING = "warning"
    CRITICAL = "critical"


_TIER_COLORS = {
    Tier.NEUTRAL: "cyan",
    Tier.WARNING: "yellow",
    Tier.CRITICAL: "red",
}


@dataclass
class UsageSummary:
    model: str
    num_requests: int
    max_requests: int | None
    percentage: float | None  # None when there is no usable cap
    remaining: int | None
    tier: Tier
    cycle_start: date | None = None
    cycle_end: date | None = None


def usage_percentage(num_requests: int, max_requests: int | None) -> float | None:
    if not max_requests:
        return None
    return num_requests / max_requests * 100


def usage_tier(percentage: float | None) -> Tier:
    if percentage is None or percentage < constants.WARNING_THRESHOLD_PCT:
        return Tier.NEUTRAL
    if percentage < constants.CRITICAL_THRESHOLD_PCT:
        return Tier.WARNING
    return Tier.CRITICAL


def progress_bar(percentage: float, width: int = constants.PROGRESS_BAR_WIDTH) -> str:
    filled = min(max(round(width * percentage / 100), 0), width)
    return "█" * filled + "░" * (width - filled)


def add_month(start: date) -> date:
    """Same day next month, clamped to that month's last day."""
    year, month = (start.year + 1, 1) if start.month == 12 else (start.year, start.month + 1)
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def billing_cycle(start: date) -> tuple[date, date]:
    return start, add_month(start) - timedelta(days=1)


def summarize(payload: UsagePayload, model: str = constants.DEFAULT_MODEL) -> UsageSummary:
    """Compute the numbers shown for *model*.

    A model missing from the payload is reported as zero requests with no cap.
    """
    usage = payload.for_model(model)
    num = usage.num_requests if usage else 0
    cap = usage.max_request_usage if usage else None
    pct = usage_percentage(num, cap)

    summary = UsageSummary(
        model=model,
        num_requests=num,
        max_requests=cap,
        percentage=pct,
        remaining=(cap - num) if cap is not None else None,
        tier=usage_tier(pct),
    )
    if payload.start_of_month is not None:
        summary.cycle_start, summary.cycle_end = billing_cycle(payload.start_of_month.date())
    return summary


def _fmt_date(d: date) -> str:
    return f"{d:%B} {d.day}, {d.year}"


def render_summary(summary: UsageSummary) -> str:
    """Return the colorized summary text."""
    color = _TIER_COLORS[summary.tier]
    lines: list[str] = []

    if summary.percentage is None:
        lines.append(
            f"{click.style(str(summary.num_requests), fg=color, bold=True)} requests "
            f"({summary.model}, no request limit)"
        )
    else:
        pct = f"{summary.percentage:.1f}%"
        lines.append(
            f"{click.style(str(summary.num_requests), fg=color, bold=True)} / "
            f"{click.style(str(summary.max_requests), fg='yellow', bold=True)} "
            f"({click.style(pct, fg=color, bold=True)})"
        )
        lines.append(f"Remaining: {click.style(str(summary.remaining), fg='green', bold=True)} requests")
        lines.append("")
        lines.append(f"[{progress_bar(summary.percentage)}] - {pct}")

    if summary.cycle_start and summary.cycle_end:
        lines.append("")
        lines.append(
            f"📅 Billing cycle: {_fmt_date(summary.cycle_start)} to {_fmt_date(summary.cycle_end)}"
        )
    return "\n".join(lines)


def display_summary(payload: UsagePayload, model: str = constants.DEFAULT_MODEL, clear: bool = True) -> None:
    if clear:
        click.clear()
    click.echo(render_summary(summarize(payload, model)))
