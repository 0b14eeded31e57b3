from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Callable, Iterable, Optional

PERIOD_LABELS = {
    "all": "All Time",
    "today": "Today",
    "yesterday": "Yesterday",
    "last7days": "Last 7 Days",
    "thisMonth": "This Month",
    "morning": "Morning (6 AM - 12 PM)",
    "evening": "Evening (6 PM - 12 AM)",
    "night": "Night (12 AM - 6 AM)",
}
PERIODS = tuple(PERIOD_LABELS)

# Faixas de horário [inicio, fim) em horas
_TIME_OF_DAY_HOURS = {
    "morning": (6, 12),
    "evening": (18, 24),
    "night": (0, 6),
}


def utc_now() -> datetime:
    """Relógio único das comparações: UTC sem tzinfo, como o func.now() do SQLite grava."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def to_datetime(value: Any) -> Optional[datetime]:
    """Normaliza date, datetime ou string ISO para datetime UTC sem tzinfo (None quando vazio)."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return as_naive_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if isinstance(value, str):
        raw = value.strip()
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        try:
            return as_naive_utc(datetime.fromisoformat(raw))
        except ValueError as exc:
            raise ValueError(f"Data inválida: {value}") from exc
    raise TypeError(f"Unsupported date value: {type(value).__name__}")


def _hour_in(value: datetime, bucket: str) -> bool:
    start, end = _TIME_OF_DAY_HOURS[bucket]
    return start <= value.hour < end


def in_period(value: Any, period: str, now: Optional[datetime] = None) -> bool:
    if period not in PERIOD_LABELS:
        raise ValueError(f"Período desconhecido: {period}")
    if period == "all":
        return True

    moment = to_datetime(value)
    if moment is None:
        return False

    if period in _TIME_OF_DAY_HOURS:
        return _hour_in(moment, period)

    today = as_naive_utc(now or utc_now()).date()
    day = moment.date()
    if period == "today":
        return day == today
    if period == "yesterday":
        return day == today - timedelta(days=1)
    if period == "last7days":
        return today - timedelta(days=6) <= day <= today
    # thisMonth
    return day.year == today.year and day.month == today.month


def period_label(period: str) -> str:
    try:
        return PERIOD_LABELS[period]
    except KeyError as exc:
        raise ValueError(f"Período desconhecido: {period}") from exc


def record_date(record: Any) -> Any:
    """created_at tem prioridade; depois date / order_date."""
    for field in ("created_at", "date", "order_date"):
        if isinstance(record, dict):
            value = record.get(field)
        else:
            value = getattr(record, field, None)
        if value:
            return value
    return None


def filter_by_period(
    records: Iterable[Any],
    period: str,
    now: Optional[datetime] = None,
    date_getter: Callable[[Any], Any] = record_date,
) -> list[Any]:
    if period == "all":
        return list(records)
    return [record for record in records if in_period(date_getter(record), period, now=now)]


def time_of_day_stats(values: Iterable[Any]) -> dict[str, int]:
    stats = {"total": 0, "morning": 0, "evening": 0, "night": 0}
    for value in values:
        stats["total"] += 1
        moment = to_datetime(value)
        if moment is None:
            continue
        for bucket in ("morning", "evening", "night"):
            if _hour_in(moment, bucket):
                stats[bucket] += 1
                break
    return stats
