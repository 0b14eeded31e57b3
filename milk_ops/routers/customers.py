from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import Response
from pydantic import BaseModel, ConfigDict
from sqlalchemy.orm import Session

from milk_ops.core.database import get_db
from milk_ops.services.customer_aggregation import (
    Customer,
    aggregate_customers,
    filter_customers,
    summarize_customers,
)
from milk_ops.services.customer_export import customers_to_csv, export_filename
from milk_ops.services.customer_sources import load_orders, load_profiles
from milk_ops.services.errors import PersistenceError
from milk_ops.services.time_periods import PERIODS, filter_by_period, period_label

router = APIRouter(prefix="/api/customers", tags=["customers"])


class CustomerLocationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    lat: float | None = None
    lng: float | None = None
    link: str | None = None


class CustomerRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    phone: str
    email: str | None
    address: str
    total_orders: int
    total_spent: float
    average_order_value: float
    last_order_date: date | None
    join_date: date
    status: str
    location: CustomerLocationRead | None


class CustomerOverviewRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_customers: int
    active_customers: int
    inactive_customers: int
    total_revenue: float
    total_orders: int
    average_revenue_per_customer: float
    active_rate_percent: int


class CustomerListResponse(BaseModel):
    items: list[CustomerRead]
    total: int
    overview: CustomerOverviewRead
    period: str
    period_label: str


def _load_customers(db: Session, period: str) -> list[Customer]:
    if period not in PERIODS:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Período inválido")
    try:
        orders = load_orders(db)
        profiles = load_profiles(db)
    except PersistenceError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Erro ao carregar clientes") from exc
    orders = filter_by_period(orders, period)
    return aggregate_customers(orders, profiles)


@router.get("", response_model=CustomerListResponse)
def list_customers(
    search: Optional[str] = Query(default=None),
    status_filter: str = Query(default="all", alias="status", pattern="^(all|active|inactive)$"),
    sort_by: str = Query(default="name", pattern="^(name|totalSpent|totalOrders|lastOrder)$"),
    period: str = Query(default="all"),
    db: Session = Depends(get_db),
):
    customers = _load_customers(db, period)
    items = filter_customers(customers, search=search, status=status_filter, sort_by=sort_by)
    return {
        "items": [CustomerRead.model_validate(customer) for customer in items],
        "total": len(items),
        "overview": CustomerOverviewRead.model_validate(summarize_customers(customers)),
        "period": period,
        "period_label": period_label(period),
    }


@router.get("/stats", response_model=CustomerOverviewRead)
def customer_stats(
    period: str = Query(default="all"),
    db: Session = Depends(get_db),
):
    return CustomerOverviewRead.model_validate(summarize_customers(_load_customers(db, period)))


@router.get("/export")
def export_customers(
    search: Optional[str] = Query(default=None),
    status_filter: str = Query(default="all", alias="status", pattern="^(all|active|inactive)$"),
    sort_by: str = Query(default="name", pattern="^(name|totalSpent|totalOrders|lastOrder)$"),
    period: str = Query(default="all"),
    db: Session = Depends(get_db),
):
    customers = filter_customers(
        _load_customers(db, period),
        search=search,
        status=status_filter,
        sort_by=sort_by,
    )
    filename = export_filename(date.today())
    return Response(
        content=customers_to_csv(customers).encode("utf-8"),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
