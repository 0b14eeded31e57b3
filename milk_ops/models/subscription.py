import sqlalchemy as sa
from sqlalchemy import Boolean, Column, Date, DateTime, Float, Integer, String, Text, func

from milk_ops.core.database import Base


class Subscription(Base):
    __tablename__ = "subscriptions"

    id = Column(Integer, primary_key=True)

    customer_name = Column(String(120), nullable=False)
    customer_phone = Column(String(30), index=True, nullable=False)
    customer_address = Column(Text, nullable=False)
    map_link = Column(String(500), nullable=True)

    # Litros por entrega; total_amount = quantity * price_per_liter
    quantity = Column(Float, nullable=False)
    price_per_liter = Column(Float, nullable=False)
    total_amount = Column(Float, nullable=False)

    frequency = Column(String(20), default="daily", nullable=False)  # daily / weekly / monthly
    delivery_days = Column(sa.JSON(), default=list, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)

    status = Column(String(20), default="active", index=True, nullable=False)  # active / paused / cancelled
    payment_type = Column(String(20), default="online", nullable=False)  # online / offline
    payment_status = Column(String(20), default="pending", nullable=False)  # paid / pending / overdue / failed
    auto_renew = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
