from __future__ import annotations

import logging
from typing import Any, Mapping

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from milk_ops.models.subscription import Subscription
from milk_ops.services.errors import PersistenceError, SubscriptionNotFoundError
from milk_ops.services.subscriptions import SubscriptionRecord

logger = logging.getLogger(__name__)
STORE_PREFIX = "[SUBSCRIPTION_STORE]"

_COLUMNS = (
    "customer_name",
    "customer_phone",
    "customer_address",
    "map_link",
    "quantity",
    "price_per_liter",
    "total_amount",
    "frequency",
    "delivery_days",
    "start_date",
    "end_date",
    "status",
    "payment_type",
    "payment_status",
    "auto_renew",
)


def record_from_model(row: Subscription) -> SubscriptionRecord:
    return SubscriptionRecord(
        id=row.id,
        customer_name=row.customer_name,
        customer_phone=row.customer_phone,
        customer_address=row.customer_address,
        map_link=row.map_link,
        quantity=float(row.quantity),
        price_per_liter=float(row.price_per_liter),
        total_amount=float(row.total_amount),
        frequency=row.frequency,
        delivery_days=list(row.delivery_days or []),
        start_date=row.start_date,
        end_date=row.end_date,
        status=row.status,
        payment_type=row.payment_type,
        payment_status=row.payment_status,
        auto_renew=bool(row.auto_renew),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class SqlAlchemySubscriptionStore:
    """Persistência das assinaturas; toda falha vira PersistenceError."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def _get_row(self, subscription_id: int) -> Subscription:
        try:
            row = self._db.query(Subscription).filter(Subscription.id == subscription_id).first()
        except SQLAlchemyError as exc:
            logger.exception("%s read failed id=%s", STORE_PREFIX, subscription_id)
            raise PersistenceError("Falha ao ler assinatura") from exc
        if row is None:
            raise SubscriptionNotFoundError(subscription_id)
        return row

    def _commit(self, action: str, subscription_id: int | None) -> None:
        try:
            self._db.commit()
        except SQLAlchemyError as exc:
            self._db.rollback()
            logger.exception("%s %s failed id=%s", STORE_PREFIX, action, subscription_id)
            raise PersistenceError(f"Falha ao salvar assinatura ({action})") from exc

    def create(self, record: SubscriptionRecord) -> SubscriptionRecord:
        row = Subscription(**{column: getattr(record, column) for column in _COLUMNS})
        self._db.add(row)
        self._commit("create", None)
        self._db.refresh(row)
        return record_from_model(row)

    def update(self, subscription_id: int, changes: Mapping[str, Any]) -> None:
        row = self._get_row(subscription_id)
        for key, value in changes.items():
            if key not in _COLUMNS:
                raise ValueError(f"Unknown subscription column: {key}")
            setattr(row, key, value)
        self._commit("update", subscription_id)

    def remove(self, subscription_id: int) -> None:
        row = self._get_row(subscription_id)
        self._db.delete(row)
        self._commit("remove", subscription_id)

    def get(self, subscription_id: int) -> SubscriptionRecord:
        return record_from_model(self._get_row(subscription_id))

    def list(self) -> list[SubscriptionRecord]:
        try:
            rows = self._db.query(Subscription).order_by(Subscription.created_at.desc(), Subscription.id.desc()).all()
        except SQLAlchemyError as exc:
            logger.exception("%s list failed", STORE_PREFIX)
            raise PersistenceError("Falha ao listar assinaturas") from exc
        return [record_from_model(row) for row in rows]
