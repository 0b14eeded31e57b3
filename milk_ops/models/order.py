from sqlalchemy import Column, Date, DateTime, Float, Integer, String, Text, func

from milk_ops.core.database import Base


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)

    # Identificação do cliente (telefone é a chave de junção com user_profiles)
    customer_name = Column(String(120), default="", nullable=False)
    customer_phone = Column(String(30), index=True, nullable=False)
    customer_address = Column(Text, default="", nullable=False)
    location_link = Column(String(500), nullable=True)

    order_date = Column(Date, index=True, nullable=False)
    quantity = Column(Float, default=0, nullable=False)
    price_per_liter = Column(Float, default=0, nullable=False)
    total_amount = Column(Float, default=0, nullable=False)
    status = Column(String(20), default="pending", nullable=False)  # pending / completed / cancelled
    payment_type = Column(String(20), default="offline", nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
