from datetime import date, datetime, timedelta, timezone

import pytest

from milk_ops.services.customer_aggregation import (
    CustomerLocation,
    OrderRecord,
    ProfileAddress,
    ProfileRecord,
    aggregate_customers,
    average_order_value,
    filter_customers,
    is_active,
    summarize_customers,
)
from milk_ops.services.time_periods import filter_by_period
from tests.fixtures_data import REFERENCE_NOW, TWO_ORDERS_SAME_PHONE


def _order(phone, order_date, amount, status="completed", name=None, address="", link=None):
    return OrderRecord(
        customer_phone=phone,
        customer_name=name or f"Cliente {phone}",
        customer_address=address,
        order_date=order_date,
        total_amount=amount,
        status=status,
        location_link=link,
    )


def _mixed_orders():
    return [
        _order("111", "2024-01-18", 120, name="Bina", address="1 Hill St"),
        _order("222", "2023-11-02", 80, name="arun", address="22 Lake Rd"),
        _order("111", "2023-12-01", 60, status="cancelled", name="Bina"),
        _order("333", "2024-01-05", 300, name="Chitra", address="3 Fort Ave"),
        _order("222", "2023-10-01", 40, status="pending", name="arun"),
        _order("333", "2024-01-06", 200, name="Chitra"),
    ]


def test_two_orders_same_phone_scenario():
    orders = [OrderRecord(**order) for order in TWO_ORDERS_SAME_PHONE]

    customers = aggregate_customers(orders, [], now=REFERENCE_NOW)

    assert len(customers) == 1
    customer = customers[0]
    assert customer.phone == "555"
    assert customer.id == "555"
    assert customer.total_orders == 2
    assert customer.total_spent == 100
    assert customer.average_order_value == 50
    assert customer.join_date == date(2024, 1, 1)
    assert customer.last_order_date == date(2024, 1, 10)


def test_order_count_is_preserved_across_customers():
    orders = _mixed_orders()

    customers = aggregate_customers(orders, [], now=REFERENCE_NOW)

    assert sum(customer.total_orders for customer in customers) == len(orders)
    assert len({customer.phone for customer in customers}) == len(customers) == 3


def test_total_spent_counts_only_completed_orders():
    orders = _mixed_orders()

    customers = {customer.phone: customer for customer in aggregate_customers(orders, [], now=REFERENCE_NOW)}

    for phone, customer in customers.items():
        expected = sum(
            order.total_amount for order in orders if order.customer_phone == phone and order.status == "completed"
        )
        assert customer.total_spent == expected
    assert customers["111"].total_spent == 120
    assert customers["222"].total_spent == 80


def test_join_and_last_order_dates_ignore_processing_order():
    orders = _mixed_orders()

    forward = {customer.phone: customer for customer in aggregate_customers(orders, [], now=REFERENCE_NOW)}
    backward = {customer.phone: customer for customer in aggregate_customers(list(reversed(orders)), [], now=REFERENCE_NOW)}

    for phone in forward:
        assert forward[phone].join_date == backward[phone].join_date
        assert forward[phone].last_order_date == backward[phone].last_order_date
    assert forward["111"].join_date == date(2023, 12, 1)
    assert forward["111"].last_order_date == date(2024, 1, 18)


def test_customer_is_seeded_from_first_processed_order():
    orders = [
        _order("777", "2024-01-02", 10, name="Primeiro", address="Rua A", link="https://maps.example.com/a"),
        _order("777", "2024-01-03", 10, name="Segundo", address="Rua B"),
    ]

    customer = aggregate_customers(orders, [], now=REFERENCE_NOW)[0]

    assert customer.name == "Primeiro"
    assert customer.address == "Rua A"
    assert customer.location == CustomerLocation(link="https://maps.example.com/a")


def test_average_order_value_guards_zero_orders():
    assert average_order_value(0.0, 0) == 0.0
    assert average_order_value(150.0, 3) == 50.0


@pytest.mark.parametrize(
    "last_order,expected",
    [
        (date(2024, 1, 19), True),
        (date(2023, 12, 22), True),
        (date(2023, 12, 21), False),
        (date(2023, 6, 1), False),
        (None, False),
    ],
)
def test_status_uses_thirty_day_window(last_order, expected):
    # REFERENCE_NOW = 2024-01-20 12:00 -> limite 2023-12-21 12:00
    assert is_active(last_order, REFERENCE_NOW) is expected


def test_status_is_derived_for_each_customer():
    customers = {customer.phone: customer for customer in aggregate_customers(_mixed_orders(), [], now=REFERENCE_NOW)}

    assert customers["111"].status == "active"
    assert customers["333"].status == "active"
    assert customers["222"].status == "inactive"


def test_profile_overlay_uses_default_address():
    orders = [_order("111", "2024-01-18", 120, address="Endereço do pedido")]
    profiles = [
        ProfileRecord(
            phone="111",
            email="bina@example.com",
            addresses=(
                ProfileAddress(address="Casa antiga"),
                ProfileAddress(
                    address="Casa nova",
                    is_default=True,
                    lat=12.97,
                    lng=77.59,
                    live_location_link="https://maps.example.com/live",
                ),
            ),
        )
    ]

    customer = aggregate_customers(orders, profiles, now=REFERENCE_NOW)[0]

    assert customer.email == "bina@example.com"
    assert customer.address == "Casa nova"
    assert customer.location == CustomerLocation(lat=12.97, lng=77.59, link="https://maps.example.com/live")


def test_profile_overlay_falls_back_to_first_address():
    orders = [_order("111", "2024-01-18", 120, address="Endereço do pedido")]
    profiles = [ProfileRecord(phone="111", addresses=(ProfileAddress(address="Primeiro"), ProfileAddress(address="Segundo")))]

    customer = aggregate_customers(orders, profiles, now=REFERENCE_NOW)[0]

    assert customer.address == "Primeiro"


def test_profile_without_addresses_never_touches_address_or_location():
    orders = [_order("111", "2024-01-18", 120, address="Rua do Pedido", link="https://maps.example.com/pedido")]
    profiles = [ProfileRecord(phone="111", email="novo@example.com", addresses=())]

    customer = aggregate_customers(orders, profiles, now=REFERENCE_NOW)[0]

    assert customer.email == "novo@example.com"
    assert customer.address == "Rua do Pedido"
    assert customer.location == CustomerLocation(link="https://maps.example.com/pedido")


def test_profile_default_address_with_empty_text_keeps_order_address():
    orders = [_order("111", "2024-01-18", 120, address="Rua do Pedido")]
    profiles = [ProfileRecord(phone="111", addresses=(ProfileAddress(address="", is_default=True),))]

    customer = aggregate_customers(orders, profiles, now=REFERENCE_NOW)[0]

    assert customer.address == "Rua do Pedido"
    assert customer.location is None


def test_profile_phone_without_orders_is_ignored():
    orders = [_order("111", "2024-01-18", 120)]
    profiles = [ProfileRecord(phone="999", email="ghost@example.com", addresses=(ProfileAddress(address="Lugar"),))]

    customers = aggregate_customers(orders, profiles, now=REFERENCE_NOW)

    assert [customer.phone for customer in customers] == ["111"]
    assert customers[0].email is None


def test_filter_search_is_case_insensitive_across_fields():
    customers = aggregate_customers(_mixed_orders(), [], now=REFERENCE_NOW)

    by_name = filter_customers(customers, search="BINA")
    by_phone = filter_customers(customers, search="22")
    by_address = filter_customers(customers, search="fort")

    assert [customer.phone for customer in by_name] == ["111"]
    assert [customer.phone for customer in by_phone] == ["222"]
    assert [customer.phone for customer in by_address] == ["333"]


def test_filter_then_sort_returns_new_sequence():
    customers = aggregate_customers(_mixed_orders(), [], now=REFERENCE_NOW)
    snapshot = list(customers)

    active_by_spent = filter_customers(customers, status="active", sort_by="totalSpent")

    assert [customer.phone for customer in active_by_spent] == ["333", "111"]
    assert customers == snapshot
    assert active_by_spent is not customers


@pytest.mark.parametrize(
    "sort_by,expected",
    [
        ("name", ["222", "111", "333"]),
        ("totalSpent", ["333", "111", "222"]),
        ("totalOrders", ["111", "222", "333"]),
        ("lastOrder", ["111", "333", "222"]),
    ],
)
def test_sort_keys(sort_by, expected):
    customers = aggregate_customers(_mixed_orders(), [], now=REFERENCE_NOW)

    assert [customer.phone for customer in filter_customers(customers, sort_by=sort_by)] == expected


def test_invalid_filter_values_are_rejected():
    with pytest.raises(ValueError):
        filter_customers([], status="vip")
    with pytest.raises(ValueError):
        filter_customers([], sort_by="email")


def test_summarize_customers():
    customers = aggregate_customers(_mixed_orders(), [], now=REFERENCE_NOW)

    overview = summarize_customers(customers)

    assert overview.total_customers == 3
    assert overview.active_customers == 2
    assert overview.inactive_customers == 1
    assert overview.total_revenue == 700
    assert overview.total_orders == 6
    assert overview.average_revenue_per_customer == pytest.approx(700 / 3)
    assert overview.active_rate_percent == 67


def test_summarize_empty_collection():
    overview = summarize_customers([])

    assert overview.total_customers == 0
    assert overview.average_revenue_per_customer == 0.0
    assert overview.active_rate_percent == 0


def test_now_defaults_to_current_time():
    recent = datetime.now().date().isoformat()

    customer = aggregate_customers([_order("1", recent, 10)], [])[0]

    assert customer.status == "active"


def test_timezone_aware_reference_time_is_accepted():
    aware_now = datetime(2024, 1, 20, 12, 0, tzinfo=timezone.utc)

    customers = {customer.phone: customer for customer in aggregate_customers(_mixed_orders(), [], now=aware_now)}

    assert customers["111"].status == "active"
    assert customers["222"].status == "inactive"
    assert is_active(date(2023, 12, 22), datetime(2024, 1, 20, 9, 0, tzinfo=timezone(timedelta(hours=-3)))) is True


def test_period_filter_uses_order_creation_time_when_present():
    morning = OrderRecord(
        customer_phone="111",
        customer_name="Bina",
        customer_address="",
        order_date=date(2024, 1, 18),
        total_amount=10,
        status="completed",
        created_at=datetime(2024, 1, 18, 7, 15),
    )
    evening = OrderRecord(
        customer_phone="222",
        customer_name="Arun",
        customer_address="",
        order_date=date(2024, 1, 18),
        total_amount=10,
        status="completed",
        created_at=datetime(2024, 1, 18, 19, 40),
    )

    assert filter_by_period([morning, evening], "morning") == [morning]
    assert filter_by_period([morning, evening], "evening") == [evening]
    assert filter_by_period([morning, evening], "night") == []
