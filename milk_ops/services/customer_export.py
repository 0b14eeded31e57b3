from __future__ import annotations

import csv
import io
from datetime import date
from typing import Iterable

from milk_ops.services.customer_aggregation import Customer

CSV_HEADERS = [
    "Name",
    "Phone",
    "Email",
    "Address",
    "Total Orders",
    "Total Spent",
    "Avg Order Value",
    "Last Order",
    "Status",
    "Join Date",
]


def _format_money(value: float) -> str:
    return f"{float(value or 0):.2f}"


def _format_date(value: date | None) -> str:
    return value.isoformat() if value else ""


def customer_row(customer: Customer) -> list[str]:
    return [
        customer.name or "",
        customer.phone or "",
        customer.email or "",
        customer.address or "",
        str(customer.total_orders),
        _format_money(customer.total_spent),
        _format_money(customer.average_order_value),
        _format_date(customer.last_order_date),
        customer.status,
        _format_date(customer.join_date),
    ]


def customers_to_csv(customers: Iterable[Customer]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for customer in customers:
        writer.writerow(customer_row(customer))
    return buffer.getvalue()


def export_filename(today: date | None = None) -> str:
    return f"customers-{(today or date.today()).isoformat()}.csv"
