from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from milk_ops.core.database import get_db
from milk_ops.schemas.subscription import (
    PaymentStatusUpdate,
    StatusUpdate,
    SubscriptionCreate,
    SubscriptionRead,
    SubscriptionStatsRead,
    SubscriptionUpdate,
)
from milk_ops.services.errors import PersistenceError, SubscriptionNotFoundError, SubscriptionValidationError
from milk_ops.services.subscription_store import SqlAlchemySubscriptionStore
from milk_ops.services.subscriptions import SubscriptionEngine, summarize_subscriptions
from milk_ops.services.time_periods import PERIODS, filter_by_period, period_label, record_date, time_of_day_stats

router = APIRouter(prefix="/api/subscriptions", tags=["subscriptions"])


def get_subscription_engine(db: Session = Depends(get_db)) -> SubscriptionEngine:
    return SubscriptionEngine(SqlAlchemySubscriptionStore(db))


def _to_http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, SubscriptionValidationError):
        return HTTPException(status_code=422, detail=str(exc))
    if isinstance(exc, SubscriptionNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Assinatura não encontrada")
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Erro ao salvar assinatura")


ENGINE_ERRORS = (SubscriptionValidationError, SubscriptionNotFoundError, PersistenceError)


def _check_period(period: str) -> None:
    if period not in PERIODS:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Período inválido")


def _list_for_period(engine: SubscriptionEngine, period: str):
    _check_period(period)
    try:
        records = engine.list()
    except PersistenceError as exc:
        raise _to_http_error(exc) from exc
    return filter_by_period(records, period)


@router.get("")
def list_subscriptions(
    period: str = Query(default="all"),
    engine: SubscriptionEngine = Depends(get_subscription_engine),
):
    records = _list_for_period(engine, period)
    return {
        "items": [SubscriptionRead.model_validate(record) for record in records],
        "total": len(records),
        "period": period,
        "period_label": period_label(period),
    }


@router.get("/stats", response_model=SubscriptionStatsRead)
def subscription_stats(
    period: str = Query(default="all"),
    engine: SubscriptionEngine = Depends(get_subscription_engine),
):
    records = _list_for_period(engine, period)
    stats = summarize_subscriptions(records)
    return {
        **asdict(stats),
        "time_of_day": time_of_day_stats(record_date(record) for record in records),
    }


@router.post("", response_model=SubscriptionRead, status_code=status.HTTP_201_CREATED)
def create_subscription(
    payload: SubscriptionCreate,
    engine: SubscriptionEngine = Depends(get_subscription_engine),
):
    try:
        return engine.create(payload.model_dump())
    except ENGINE_ERRORS as exc:
        raise _to_http_error(exc) from exc


@router.get("/{subscription_id}", response_model=SubscriptionRead)
def get_subscription(
    subscription_id: int,
    engine: SubscriptionEngine = Depends(get_subscription_engine),
):
    try:
        return engine.get(subscription_id)
    except ENGINE_ERRORS as exc:
        raise _to_http_error(exc) from exc


@router.patch("/{subscription_id}", response_model=SubscriptionRead)
def update_subscription(
    subscription_id: int,
    payload: SubscriptionUpdate,
    engine: SubscriptionEngine = Depends(get_subscription_engine),
):
    try:
        return engine.update(subscription_id, payload.model_dump(exclude_unset=True))
    except ENGINE_ERRORS as exc:
        raise _to_http_error(exc) from exc


@router.patch("/{subscription_id}/status", response_model=SubscriptionRead)
def update_subscription_status(
    subscription_id: int,
    body: StatusUpdate,
    engine: SubscriptionEngine = Depends(get_subscription_engine),
):
    try:
        return engine.set_status(subscription_id, body.status)
    except ENGINE_ERRORS as exc:
        raise _to_http_error(exc) from exc


@router.patch("/{subscription_id}/payment-status", response_model=SubscriptionRead)
def update_subscription_payment_status(
    subscription_id: int,
    body: PaymentStatusUpdate,
    engine: SubscriptionEngine = Depends(get_subscription_engine),
):
    try:
        return engine.set_payment_status(subscription_id, body.payment_status)
    except ENGINE_ERRORS as exc:
        raise _to_http_error(exc) from exc


@router.delete("/{subscription_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_subscription(
    subscription_id: int,
    confirm: bool = Query(default=False),
    engine: SubscriptionEngine = Depends(get_subscription_engine),
):
    if not confirm:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Confirme a exclusão com confirm=true")
    try:
        engine.remove(subscription_id)
    except ENGINE_ERRORS as exc:
        raise _to_http_error(exc) from exc
