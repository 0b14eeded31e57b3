"""Regras de negócio das assinaturas de leite.

O engine valida e deriva os campos antes de qualquer escrita; o store só
persiste. Campos derivados:

- total_amount = quantity * price_per_liter (recalculado a cada escrita);
- delivery_days = semana inteira se, e somente se, frequency == "daily".

Status e status de pagamento são dois eixos independentes. Hoje qualquer
transição é permitida; a checagem passa por ``TransitionPolicy`` para que uma
política mais restrita possa ser plugada sem mexer nos chamadores.
"""
from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from typing import Any, Iterable, Mapping, Optional, Protocol

from milk_ops.services.errors import SubscriptionValidationError

logger = logging.getLogger(__name__)
SUBSCRIPTIONS_PREFIX = "[SUBSCRIPTIONS]"

WEEK_DAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
FREQUENCIES = ("daily", "weekly", "monthly")
SUBSCRIPTION_STATUSES = ("active", "paused", "cancelled")
PAYMENT_TYPES = ("online", "offline")
PAYMENT_STATUSES = ("paid", "pending", "overdue", "failed")

EDITABLE_FIELDS = frozenset(
    {
        "customer_name",
        "customer_phone",
        "customer_address",
        "map_link",
        "quantity",
        "price_per_liter",
        "frequency",
        "delivery_days",
        "start_date",
        "end_date",
        "status",
        "payment_type",
        "payment_status",
        "auto_renew",
    }
)
# Campos que o chamador pode mandar mas que são sempre recalculados/gerenciados
IGNORED_FIELDS = frozenset({"id", "total_amount", "created_at", "updated_at"})


@dataclass
class SubscriptionRecord:
    customer_name: str
    customer_phone: str
    customer_address: str
    quantity: float
    price_per_liter: float
    total_amount: float
    frequency: str
    start_date: date
    delivery_days: list[str] = field(default_factory=list)
    map_link: Optional[str] = None
    end_date: Optional[date] = None
    status: str = "active"
    payment_type: str = "online"
    payment_status: str = "pending"
    auto_renew: bool = True
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def fields(self) -> dict[str, Any]:
        data = asdict(self)
        for key in IGNORED_FIELDS - {"total_amount"}:
            data.pop(key, None)
        return data


@dataclass
class SubscriptionStats:
    total: int = 0
    active: int = 0
    paused: int = 0
    cancelled: int = 0
    paid: int = 0
    pending: int = 0
    overdue: int = 0
    revenue: float = 0.0


class SubscriptionStore(Protocol):
    def create(self, record: SubscriptionRecord) -> SubscriptionRecord: ...

    def update(self, subscription_id: int, changes: Mapping[str, Any]) -> None: ...

    def remove(self, subscription_id: int) -> None: ...

    def get(self, subscription_id: int) -> SubscriptionRecord: ...

    def list(self) -> list[SubscriptionRecord]: ...


class TransitionPolicy:
    """Permite qualquer transição (inclusive cancelled -> active)."""

    def allows(self, axis: str, current: str, target: str) -> bool:
        return True


def _clean_text(data: Mapping[str, Any], key: str, label: str) -> str:
    value = data.get(key)
    text = str(value).strip() if value is not None else ""
    if not text:
        raise SubscriptionValidationError(f"{label} é obrigatório")
    return text


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _positive_number(value: Any, label: str) -> float:
    if value is None or isinstance(value, bool):
        raise SubscriptionValidationError(f"{label} é obrigatório")
    if isinstance(value, str):
        value = value.strip()
        if not value:
            raise SubscriptionValidationError(f"{label} é obrigatório")
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise SubscriptionValidationError(f"{label} inválido: {value!r}") from exc
    if not math.isfinite(number):
        raise SubscriptionValidationError(f"{label} inválido: {value!r}")
    if number <= 0:
        raise SubscriptionValidationError(f"{label} deve ser maior que zero")
    return number


def _parse_date(value: Any, label: str) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.fromisoformat(str(value).strip()).date()
    except ValueError as exc:
        raise SubscriptionValidationError(f"{label} inválida: {value!r}") from exc


def _choice(value: Any, allowed: tuple[str, ...], label: str, default: str) -> str:
    if value is None or value == "":
        return default
    normalized = str(value).strip().lower()
    if normalized not in allowed:
        raise SubscriptionValidationError(f"{label} inválido: {value!r}")
    return normalized


def _flag(value: Any, default: bool = True) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def derive_delivery_days(frequency: str, requested: Optional[Iterable[str]]) -> list[str]:
    if frequency == "daily":
        return list(WEEK_DAYS)

    by_lower = {day.lower(): day for day in WEEK_DAYS}
    chosen = set()
    for raw in requested or []:
        day = by_lower.get(str(raw).strip().lower())
        if day is None:
            raise SubscriptionValidationError(f"Dia de entrega inválido: {raw!r}")
        chosen.add(day)

    if not chosen:
        raise SubscriptionValidationError("Informe os dias de entrega")
    if len(chosen) == len(WEEK_DAYS):
        raise SubscriptionValidationError("Entrega em todos os dias exige frequência diária")
    return [day for day in WEEK_DAYS if day in chosen]


def build_subscription(data: Mapping[str, Any]) -> SubscriptionRecord:
    """Valida os dados de entrada e devolve o registro com campos derivados."""
    customer_name = _clean_text(data, "customer_name", "Nome do cliente")
    customer_phone = _clean_text(data, "customer_phone", "Telefone")
    customer_address = _clean_text(data, "customer_address", "Endereço")
    quantity = _positive_number(data.get("quantity"), "Quantidade")
    price_per_liter = _positive_number(data.get("price_per_liter"), "Preço por litro")

    start_date = _parse_date(data.get("start_date"), "Data de início")
    if start_date is None:
        raise SubscriptionValidationError("Data de início é obrigatória")
    end_date = _parse_date(data.get("end_date"), "Data de término")
    if end_date is not None and end_date < start_date:
        raise SubscriptionValidationError("Data de término não pode ser anterior à data de início")

    frequency = _choice(data.get("frequency"), FREQUENCIES, "Frequência", "daily")

    return SubscriptionRecord(
        customer_name=customer_name,
        customer_phone=customer_phone,
        customer_address=customer_address,
        map_link=_optional_text(data.get("map_link")),
        quantity=quantity,
        price_per_liter=price_per_liter,
        total_amount=quantity * price_per_liter,
        frequency=frequency,
        delivery_days=derive_delivery_days(frequency, data.get("delivery_days")),
        start_date=start_date,
        end_date=end_date,
        status=_choice(data.get("status"), SUBSCRIPTION_STATUSES, "Status", "active"),
        payment_type=_choice(data.get("payment_type"), PAYMENT_TYPES, "Tipo de pagamento", "online"),
        payment_status=_choice(data.get("payment_status"), PAYMENT_STATUSES, "Status de pagamento", "pending"),
        auto_renew=_flag(data.get("auto_renew")),
    )


def summarize_subscriptions(subscriptions: Iterable[SubscriptionRecord]) -> SubscriptionStats:
    stats = SubscriptionStats()
    for subscription in subscriptions:
        stats.total += 1
        if subscription.status in SUBSCRIPTION_STATUSES:
            setattr(stats, subscription.status, getattr(stats, subscription.status) + 1)
        if subscription.payment_status in ("paid", "pending", "overdue"):
            setattr(stats, subscription.payment_status, getattr(stats, subscription.payment_status) + 1)
        # Receita considera apenas assinaturas ativas
        if subscription.status == "active":
            stats.revenue += float(subscription.total_amount or 0)
    return stats


class SubscriptionEngine:
    def __init__(self, store: SubscriptionStore, policy: Optional[TransitionPolicy] = None) -> None:
        self._store = store
        self._policy = policy or TransitionPolicy()

    def list(self) -> list[SubscriptionRecord]:
        return self._store.list()

    def get(self, subscription_id: int) -> SubscriptionRecord:
        return self._store.get(subscription_id)

    def create(self, data: Mapping[str, Any]) -> SubscriptionRecord:
        record = build_subscription(data)
        stored = self._store.create(record)
        logger.info(
            "%s created id=%s phone=%s frequency=%s total_amount=%s",
            SUBSCRIPTIONS_PREFIX,
            stored.id,
            stored.customer_phone,
            stored.frequency,
            stored.total_amount,
        )
        return stored

    def update(self, subscription_id: int, partial: Mapping[str, Any]) -> SubscriptionRecord:
        unknown = set(partial) - EDITABLE_FIELDS - IGNORED_FIELDS
        if unknown:
            raise SubscriptionValidationError(f"Campos não editáveis: {', '.join(sorted(unknown))}")

        current = self._store.get(subscription_id)
        leaving_daily = str(partial.get("frequency") or "").strip().lower() not in ("", "daily")
        if current.frequency == "daily" and leaving_daily and not partial.get("delivery_days"):
            raise SubscriptionValidationError("Informe os dias de entrega ao sair da frequência diária")

        merged = current.fields()
        merged.update({key: value for key, value in partial.items() if key in EDITABLE_FIELDS})
        rebuilt = build_subscription(merged)

        previous_fields = current.fields()
        changes = {key: value for key, value in rebuilt.fields().items() if previous_fields.get(key) != value}
        if not changes:
            return current
        for axis in ("status", "payment_status"):
            if axis in changes:
                self._check_policy(axis, previous_fields[axis], changes[axis])

        self._store.update(subscription_id, changes)
        logger.info(
            "%s updated id=%s fields=%s",
            SUBSCRIPTIONS_PREFIX,
            subscription_id,
            ",".join(sorted(changes)),
        )
        return self._store.get(subscription_id)

    def set_status(self, subscription_id: int, new_status: str) -> SubscriptionRecord:
        return self._transition(subscription_id, "status", SUBSCRIPTION_STATUSES, new_status)

    def set_payment_status(self, subscription_id: int, new_status: str) -> SubscriptionRecord:
        return self._transition(subscription_id, "payment_status", PAYMENT_STATUSES, new_status)

    def remove(self, subscription_id: int) -> None:
        self._store.remove(subscription_id)
        logger.info("%s removed id=%s", SUBSCRIPTIONS_PREFIX, subscription_id)

    def _check_policy(self, axis: str, current: str, target: str) -> None:
        if not self._policy.allows(axis, current, target):
            raise SubscriptionValidationError(f"Transição não permitida: {current} -> {target}")

    def _transition(
        self,
        subscription_id: int,
        axis: str,
        allowed: tuple[str, ...],
        target: str,
    ) -> SubscriptionRecord:
        normalized = str(target or "").strip().lower()
        if normalized not in allowed:
            raise SubscriptionValidationError(f"Valor inválido para {axis}: {target!r}")

        current = self._store.get(subscription_id)
        previous = getattr(current, axis)
        self._check_policy(axis, previous, normalized)

        if previous != normalized:
            self._store.update(subscription_id, {axis: normalized})
        logger.info(
            "%s transition id=%s axis=%s from=%s to=%s",
            SUBSCRIPTIONS_PREFIX,
            subscription_id,
            axis,
            previous,
            normalized,
        )
        return self._store.get(subscription_id)
