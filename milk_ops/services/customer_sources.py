from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from milk_ops.models.order import Order
from milk_ops.models.user_profile import UserProfile
from milk_ops.services.customer_aggregation import OrderRecord, ProfileAddress, ProfileRecord
from milk_ops.services.errors import PersistenceError

logger = logging.getLogger(__name__)


def order_record_from_model(order: Order) -> OrderRecord:
    return OrderRecord(
        id=order.id,
        customer_phone=order.customer_phone,
        customer_name=order.customer_name or "",
        customer_address=order.customer_address or "",
        order_date=order.order_date,
        total_amount=float(order.total_amount or 0),
        status=order.status,
        location_link=order.location_link or None,
        created_at=order.created_at,
    )


def profile_record_from_model(profile: UserProfile) -> ProfileRecord:
    return ProfileRecord(
        phone=profile.phone,
        email=profile.email,
        addresses=tuple(
            ProfileAddress(
                address=address.address or "",
                is_default=bool(address.is_default),
                lat=address.lat,
                lng=address.lng,
                live_location_link=address.live_location_link,
            )
            for address in profile.addresses
        ),
    )


def load_orders(db: Session) -> list[OrderRecord]:
    try:
        rows = db.query(Order).order_by(Order.created_at.desc(), Order.id.desc()).all()
    except SQLAlchemyError as exc:
        logger.exception("[CUSTOMERS] failed to read orders")
        raise PersistenceError("Falha ao ler pedidos") from exc
    return [order_record_from_model(row) for row in rows]


def load_profiles(db: Session) -> list[ProfileRecord]:
    try:
        rows = db.query(UserProfile).options(selectinload(UserProfile.addresses)).order_by(UserProfile.id.asc()).all()
    except SQLAlchemyError as exc:
        logger.exception("[CUSTOMERS] failed to read user profiles")
        raise PersistenceError("Falha ao ler perfis de usuário") from exc
    return [profile_record_from_model(row) for row in rows]
