from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import relationship

from milk_ops.core.database import Base


class UserProfile(Base):
    __tablename__ = "user_profiles"

    id = Column(Integer, primary_key=True)
    phone = Column(String(30), index=True, nullable=False)
    email = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    addresses = relationship(
        "UserAddress",
        back_populates="profile",
        cascade="all, delete-orphan",
        order_by="UserAddress.position",
    )


class UserAddress(Base):
    __tablename__ = "user_addresses"

    id = Column(Integer, primary_key=True)
    profile_id = Column(Integer, ForeignKey("user_profiles.id"), nullable=False, index=True)
    position = Column(Integer, default=0, nullable=False)
    address = Column(Text, default="", nullable=False)
    is_default = Column(Boolean, default=False, nullable=False)
    lat = Column(Float, nullable=True)
    lng = Column(Float, nullable=True)
    live_location_link = Column(String(500), nullable=True)

    profile = relationship("UserProfile", back_populates="addresses")
