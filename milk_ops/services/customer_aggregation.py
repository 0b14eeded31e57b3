"""Visão de clientes derivada de pedidos + perfis de usuário.

Não existe tabela de clientes: o telefone é a única chave que liga um pedido
a um perfil. A projeção é recalculada inteira a cada chamada, a partir de
snapshots imutáveis, em duas passadas:

1. pedidos -> totais, primeira/última compra e status;
2. perfis -> sobrescreve email e (pelo endereço padrão) endereço/localização.

Um telefone que só aparece nos perfis nunca gera cliente.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, Optional, Sequence

from milk_ops.core.config import CUSTOMER_ACTIVE_WINDOW_DAYS
from milk_ops.services.time_periods import as_naive_utc, to_datetime, utc_now

CUSTOMER_STATUSES = ("active", "inactive")
STATUS_FILTERS = ("all",) + CUSTOMER_STATUSES
SORT_KEYS = ("name", "totalSpent", "totalOrders", "lastOrder")


@dataclass(frozen=True)
class OrderRecord:
    customer_phone: str
    customer_name: str
    customer_address: str
    order_date: date | str
    total_amount: float
    status: str
    location_link: Optional[str] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class ProfileAddress:
    address: str = ""
    is_default: bool = False
    lat: Optional[float] = None
    lng: Optional[float] = None
    live_location_link: Optional[str] = None


@dataclass(frozen=True)
class ProfileRecord:
    phone: str
    email: Optional[str] = None
    addresses: tuple[ProfileAddress, ...] = ()


@dataclass
class CustomerLocation:
    lat: Optional[float] = None
    lng: Optional[float] = None
    link: Optional[str] = None


@dataclass
class Customer:
    phone: str
    name: str
    address: str
    join_date: date
    last_order_date: Optional[date] = None
    email: Optional[str] = None
    total_orders: int = 0
    total_spent: float = 0.0
    average_order_value: float = 0.0
    status: str = "inactive"
    location: Optional[CustomerLocation] = None

    @property
    def id(self) -> str:
        return self.phone


@dataclass
class CustomerOverview:
    total_customers: int = 0
    active_customers: int = 0
    inactive_customers: int = 0
    total_revenue: float = 0.0
    total_orders: int = 0
    average_revenue_per_customer: float = 0.0
    active_rate_percent: int = 0


def _as_date(value: date | str) -> date:
    moment = to_datetime(value)
    if moment is None:
        raise ValueError("Pedido sem data")
    return moment.date()


def _seed_customer(order: OrderRecord, order_date: date) -> Customer:
    return Customer(
        phone=order.customer_phone,
        name=order.customer_name,
        address=order.customer_address or "",
        join_date=order_date,
        location=CustomerLocation(link=order.location_link) if order.location_link else None,
    )


def average_order_value(total_spent: float, total_orders: int) -> float:
    if total_orders <= 0:
        return 0.0
    return total_spent / total_orders


def is_active(last_order_date: Optional[date], now: datetime, window_days: int = CUSTOMER_ACTIVE_WINDOW_DAYS) -> bool:
    if last_order_date is None:
        return False
    threshold = as_naive_utc(now) - timedelta(days=window_days)
    return to_datetime(last_order_date) > threshold


def _default_address(profile: ProfileRecord) -> Optional[ProfileAddress]:
    if not profile.addresses:
        return None
    for address in profile.addresses:
        if address.is_default:
            return address
    return profile.addresses[0]


def _overlay_profile(customer: Customer, profile: ProfileRecord) -> None:
    customer.email = profile.email

    chosen = _default_address(profile)
    if chosen is None:
        return
    if chosen.address:
        customer.address = chosen.address
    if chosen.lat is not None or chosen.lng is not None or chosen.live_location_link:
        customer.location = CustomerLocation(
            lat=chosen.lat,
            lng=chosen.lng,
            link=chosen.live_location_link,
        )


def aggregate_customers(
    orders: Iterable[OrderRecord],
    profiles: Iterable[ProfileRecord] = (),
    now: Optional[datetime] = None,
    window_days: int = CUSTOMER_ACTIVE_WINDOW_DAYS,
) -> list[Customer]:
    reference = now or utc_now()
    by_phone: dict[str, Customer] = {}

    for order in orders:
        order_date = _as_date(order.order_date)
        customer = by_phone.get(order.customer_phone)
        if customer is None:
            customer = _seed_customer(order, order_date)
            by_phone[order.customer_phone] = customer

        customer.total_orders += 1
        if order.status == "completed":
            customer.total_spent += float(order.total_amount or 0)
        if customer.last_order_date is None or order_date > customer.last_order_date:
            customer.last_order_date = order_date
        if order_date < customer.join_date:
            customer.join_date = order_date

    for customer in by_phone.values():
        customer.average_order_value = average_order_value(customer.total_spent, customer.total_orders)
        customer.status = "active" if is_active(customer.last_order_date, reference, window_days) else "inactive"

    for profile in profiles:
        if not profile.phone:
            continue
        customer = by_phone.get(profile.phone)
        if customer is not None:
            _overlay_profile(customer, profile)

    return list(by_phone.values())


def _matches_search(customer: Customer, term: str) -> bool:
    return (
        term in (customer.name or "").lower()
        or term in (customer.phone or "").lower()
        or term in (customer.address or "").lower()
    )


def filter_customers(
    customers: Sequence[Customer],
    search: Optional[str] = None,
    status: str = "all",
    sort_by: str = "name",
) -> list[Customer]:
    if status not in STATUS_FILTERS:
        raise ValueError(f"Filtro de status inválido: {status}")
    if sort_by not in SORT_KEYS:
        raise ValueError(f"Ordenação inválida: {sort_by}")

    filtered = list(customers)
    term = (search or "").strip().lower()
    if term:
        filtered = [customer for customer in filtered if _matches_search(customer, term)]
    if status != "all":
        filtered = [customer for customer in filtered if customer.status == status]

    if sort_by == "name":
        return sorted(filtered, key=lambda customer: (customer.name or "").casefold())
    if sort_by == "totalSpent":
        return sorted(filtered, key=lambda customer: customer.total_spent, reverse=True)
    if sort_by == "totalOrders":
        return sorted(filtered, key=lambda customer: customer.total_orders, reverse=True)
    # lastOrder: clientes sem data vão para o fim
    return sorted(
        filtered,
        key=lambda customer: customer.last_order_date or date.min,
        reverse=True,
    )


def summarize_customers(customers: Sequence[Customer]) -> CustomerOverview:
    total_customers = len(customers)
    active_customers = sum(1 for customer in customers if customer.status == "active")
    total_revenue = sum(customer.total_spent for customer in customers)
    total_orders = sum(customer.total_orders for customer in customers)
    return CustomerOverview(
        total_customers=total_customers,
        active_customers=active_customers,
        inactive_customers=total_customers - active_customers,
        total_revenue=total_revenue,
        total_orders=total_orders,
        average_revenue_per_customer=total_revenue / total_customers if total_customers else 0.0,
        active_rate_percent=round(active_customers / total_customers * 100) if total_customers else 0,
    )

