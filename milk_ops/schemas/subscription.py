from datetime import date, datetime
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from milk_ops.core.config import DEFAULT_PRICE_PER_LITER

# Números e datas chegam como vieram do formulário; o engine valida e converte.
NumberInput = Union[float, str]
DateInput = Union[date, str]


class SubscriptionCreate(BaseModel):
    customer_name: str = ""
    customer_phone: str = ""
    customer_address: str = ""
    map_link: Optional[str] = None
    quantity: Optional[NumberInput] = None
    price_per_liter: Optional[NumberInput] = DEFAULT_PRICE_PER_LITER
    frequency: str = "daily"
    delivery_days: List[str] = Field(default_factory=list)
    start_date: Optional[DateInput] = Field(default_factory=date.today)
    end_date: Optional[DateInput] = None
    status: str = "active"
    payment_type: str = "online"
    payment_status: str = "pending"
    auto_renew: bool = True


class SubscriptionUpdate(BaseModel):
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    customer_address: Optional[str] = None
    map_link: Optional[str] = None
    quantity: Optional[NumberInput] = None
    price_per_liter: Optional[NumberInput] = None
    frequency: Optional[str] = None
    delivery_days: Optional[List[str]] = None
    start_date: Optional[DateInput] = None
    end_date: Optional[DateInput] = None
    status: Optional[str] = None
    payment_type: Optional[str] = None
    payment_status: Optional[str] = None
    auto_renew: Optional[bool] = None


class StatusUpdate(BaseModel):
    status: str


class PaymentStatusUpdate(BaseModel):
    payment_status: str


class SubscriptionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    customer_name: str
    customer_phone: str
    customer_address: str
    map_link: Optional[str] = None
    quantity: float
    price_per_liter: float
    total_amount: float
    frequency: str
    delivery_days: List[str]
    start_date: date
    end_date: Optional[date] = None
    status: str
    payment_type: str
    payment_status: str
    auto_renew: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TimeOfDayStatsRead(BaseModel):
    total: int = 0
    morning: int = 0
    evening: int = 0
    night: int = 0


class SubscriptionStatsRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total: int
    active: int
    paused: int
    cancelled: int
    paid: int
    pending: int
    overdue: int
    revenue: float
    time_of_day: TimeOfDayStatsRead = Field(default_factory=TimeOfDayStatsRead)
