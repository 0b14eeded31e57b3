"""Conjunto de dados reutilizável para cenários de teste backend."""
from datetime import datetime

REFERENCE_NOW = datetime(2024, 1, 20, 12, 0, 0)

TWO_ORDERS_SAME_PHONE = [
    {
        "customer_phone": "555",
        "customer_name": "Asha",
        "customer_address": "12 Dairy Lane",
        "order_date": "2024-01-01",
        "total_amount": 100,
        "status": "completed",
    },
    {
        "customer_phone": "555",
        "customer_name": "Asha",
        "customer_address": "12 Dairy Lane",
        "order_date": "2024-01-10",
        "total_amount": 50,
        "status": "pending",
    },
]

HAPPY_PATH_SUBSCRIPTION_PAYLOAD = {
    "customer_name": "Ravi Kumar",
    "customer_phone": "9876543210",
    "customer_address": "Flat 4B, Green Towers",
    "map_link": "https://maps.example.com/?q=green-towers",
    "quantity": "2",
    "price_per_liter": "50",
    "frequency": "daily",
    "delivery_days": ["Monday"],
    "start_date": "2024-01-01",
    "status": "active",
    "payment_type": "online",
    "payment_status": "pending",
    "auto_renew": True,
}

WEEKLY_SUBSCRIPTION_PAYLOAD = {
    "customer_name": "Meera",
    "customer_phone": "9000000001",
    "customer_address": "7 Temple Road",
    "quantity": 1.5,
    "price_per_liter": 60,
    "frequency": "weekly",
    "delivery_days": ["saturday", "Monday", "Monday"],
    "start_date": "2024-02-01",
    "end_date": "2024-06-30",
    "payment_type": "offline",
}
