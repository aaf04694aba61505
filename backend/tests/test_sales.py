# Overview: Pytest coverage for sales recording and its inventory effects.

"""
Sales Recording Tests

A sale removes full cylinders, adds the empties received with it and
records customer loans without touching inventory. Any failure leaves no
trace.
"""

from datetime import date

import pytest

from gasflow.errors import InactiveError, InsufficientStockError, NotFoundError, ValidationError
from gasflow.models import CustomerCylinderLoan, DailySales, SalesItem
from gasflow.services import customer_service, inventory_service, sales_service, staff_service


@pytest.fixture
def stocked(tenant_a, hp_domestic, hp_commercial):
    """Tenant A with 20 domestic and 5 commercial full cylinders."""
    inventory_service.opening_stock(
        tenant_id=tenant_a.id,
        items=[
            {"cylinder_type_id": hp_domestic.id, "full_cylinders": 20, "empty_cylinders": 0},
            {"cylinder_type_id": hp_commercial.id, "full_cylinders": 5, "empty_cylinders": 0},
        ],
    )


def _balance(tenant, cylinder_type):
    return inventory_service.get_balance(tenant_id=tenant.id, cylinder_type_id=cylinder_type.id)


class TestCreateSale:
    """Sales and their inventory effects."""

    def test_items_decrement_full(self, db_session, tenant_a, staff_a, hp_domestic, stocked):
        sale = sales_service.create_sale(
            tenant_id=tenant_a.id,
            staff_id=staff_a.id,
            sales_date="2026-03-10",
            items=[{"cylinder_type_id": hp_domestic.id, "quantity_sold": 6, "selling_price_per_cylinder_cents": 95000}],
        )

        assert sale.total_revenue_cents == 6 * 95000
        assert sale.total_cylinders_sold == 6
        assert _balance(tenant_a, hp_domestic) == {"full": 14, "empty": 0}

    def test_empties_received_create_row_lazily(self, db_session, tenant_a, staff_a, hp_domestic, io_domestic, stocked):
        sales_service.create_sale(
            tenant_id=tenant_a.id,
            staff_id=staff_a.id,
            sales_date="2026-03-10",
            items=[{"cylinder_type_id": hp_domestic.id, "quantity_sold": 2, "selling_price_per_cylinder_cents": 95000}],
            empties_received=[{"cylinder_type_id": io_domestic.id, "quantity_received": 3}],
        )

        assert _balance(tenant_a, io_domestic) == {"full": 0, "empty": 3}

    def test_loans_do_not_touch_inventory(self, db_session, tenant_a, staff_a, customer_a, hp_domestic, stocked):
        sale = sales_service.create_sale(
            tenant_id=tenant_a.id,
            staff_id=staff_a.id,
            sales_date="2026-03-10",
            items=[{"cylinder_type_id": hp_domestic.id, "quantity_sold": 4, "selling_price_per_cylinder_cents": 95000}],
            customer_loans=[
                {"customer_id": customer_a.id, "cylinder_type_id": hp_domestic.id, "quantity_loaned": 2},
            ],
        )

        assert _balance(tenant_a, hp_domestic) == {"full": 16, "empty": 0}
        loan = db_session.query(CustomerCylinderLoan).one()
        assert loan.sales_id == sale.id
        assert loan.quantity_loaned == 2

    def test_insufficient_stock_rolls_back(self, db_session, tenant_a, staff_a, hp_domestic, hp_commercial, stocked):
        with pytest.raises(InsufficientStockError) as exc:
            sales_service.create_sale(
                tenant_id=tenant_a.id,
                staff_id=staff_a.id,
                sales_date="2026-03-10",
                items=[
                    {"cylinder_type_id": hp_domestic.id, "quantity_sold": 3, "selling_price_per_cylinder_cents": 95000},
                    {"cylinder_type_id": hp_commercial.id, "quantity_sold": 8, "selling_price_per_cylinder_cents": 180000},
                ],
            )

        assert exc.value.available == 5
        assert exc.value.requested == 8
        assert exc.value.shortfall == 3
        assert "Available: 5, Requested: 8" in exc.value.message

        assert db_session.query(DailySales).count() == 0
        assert db_session.query(SalesItem).count() == 0
        assert _balance(tenant_a, hp_domestic) == {"full": 20, "empty": 0}

    def test_no_inventory_row_is_insufficient(self, db_session, tenant_a, staff_a, io_domestic):
        with pytest.raises(InsufficientStockError) as exc:
            sales_service.create_sale(
                tenant_id=tenant_a.id,
                staff_id=staff_a.id,
                sales_date="2026-03-10",
                items=[{"cylinder_type_id": io_domestic.id, "quantity_sold": 1, "selling_price_per_cylinder_cents": 50000}],
            )
        assert exc.value.available == 0

    def test_inactive_staff_rejected(self, db_session, tenant_a, staff_a, hp_domestic, stocked):
        staff_service.deactivate_staff(tenant_id=tenant_a.id, staff_id=staff_a.id)

        with pytest.raises(InactiveError):
            sales_service.create_sale(
                tenant_id=tenant_a.id,
                staff_id=staff_a.id,
                sales_date="2026-03-10",
                items=[{"cylinder_type_id": hp_domestic.id, "quantity_sold": 1, "selling_price_per_cylinder_cents": 95000}],
            )

    def test_foreign_customer_loan_rolls_back(self, db_session, tenant_a, tenant_b, staff_a, hp_domestic, stocked):
        foreign = customer_service.create_customer(
            tenant_id=tenant_b.id,
            payload={"customer_name": "Other Shop", "phone_number": "9000000001"},
        )

        with pytest.raises(NotFoundError):
            sales_service.create_sale(
                tenant_id=tenant_a.id,
                staff_id=staff_a.id,
                sales_date="2026-03-10",
                items=[{"cylinder_type_id": hp_domestic.id, "quantity_sold": 1, "selling_price_per_cylinder_cents": 95000}],
                customer_loans=[
                    {"customer_id": foreign.id, "cylinder_type_id": hp_domestic.id, "quantity_loaned": 1},
                ],
            )
        assert _balance(tenant_a, hp_domestic) == {"full": 20, "empty": 0}

    def test_foreign_staff_not_found(self, db_session, tenant_b, staff_a, hp_domestic):
        with pytest.raises(NotFoundError):
            sales_service.create_sale(
                tenant_id=tenant_b.id,
                staff_id=staff_a.id,
                sales_date="2026-03-10",
                items=[{"cylinder_type_id": hp_domestic.id, "quantity_sold": 1, "selling_price_per_cylinder_cents": 95000}],
            )


class TestSalesReads:
    """Listing, totals and per-date views."""

    def test_list_totals(self, db_session, tenant_a, staff_a, hp_domestic, stocked):
        for day, qty in (("2026-03-10", 2), ("2026-03-11", 3)):
            sales_service.create_sale(
                tenant_id=tenant_a.id,
                staff_id=staff_a.id,
                sales_date=day,
                items=[{"cylinder_type_id": hp_domestic.id, "quantity_sold": qty, "selling_price_per_cylinder_cents": 1000}],
            )

        summary = sales_service.get_sales_summary(tenant_id=tenant_a.id)
        assert summary["total"]["total_revenue_cents"] == 5000
        assert summary["total"]["total_cylinders_sold"] == 5
        assert summary["by_staff"][0]["sales_count"] == 2

    def test_performance_counts_days(self, db_session, tenant_a, staff_a, hp_domestic, stocked):
        sales_service.create_sale(
            tenant_id=tenant_a.id,
            staff_id=staff_a.id,
            sales_date="2026-03-10",
            items=[{"cylinder_type_id": hp_domestic.id, "quantity_sold": 2, "selling_price_per_cylinder_cents": 1000}],
        )

        performance = staff_service.staff_performance(tenant_id=tenant_a.id, staff_id=staff_a.id)
        assert performance["total_sales_days"] == 1
        assert performance["total_revenue_cents"] == 2000
        assert performance["first_sale_date"] == "2026-03-10"

    def test_summary_window_and_staff_ranking(self, db_session, tenant_a, staff_a, hp_domestic, stocked):
        other = staff_service.create_staff(
            tenant_id=tenant_a.id,
            payload={"staff_name": "Anil Desai", "mobile_number": "9123456781"},
        )
        for staff, day, qty in ((staff_a, "2026-03-10", 1), (other, "2026-03-11", 4), (staff_a, "2026-04-02", 6)):
            sales_service.create_sale(
                tenant_id=tenant_a.id,
                staff_id=staff.id,
                sales_date=day,
                items=[{"cylinder_type_id": hp_domestic.id, "quantity_sold": qty, "selling_price_per_cylinder_cents": 1000}],
            )

        summary = sales_service.get_sales_summary(
            tenant_id=tenant_a.id, start=date(2026, 3, 1), end=date(2026, 3, 31)
        )
        assert summary["total"]["sales_records"] == 2
        assert summary["total"]["total_revenue_cents"] == 5000
        assert [row["staff_id"] for row in summary["by_staff"]] == [other.id, staff_a.id]
        assert summary["by_staff"][0]["revenue_cents"] == 4000

    def test_analytics_average_prices(self, db_session, tenant_a, staff_a, hp_domestic, hp_commercial, stocked):
        sales_service.create_sale(
            tenant_id=tenant_a.id,
            staff_id=staff_a.id,
            sales_date="2026-03-10",
            items=[
                {"cylinder_type_id": hp_domestic.id, "quantity_sold": 2, "selling_price_per_cylinder_cents": 1000},
                {"cylinder_type_id": hp_commercial.id, "quantity_sold": 1, "selling_price_per_cylinder_cents": 1000},
            ],
        )
        sales_service.create_sale(
            tenant_id=tenant_a.id,
            staff_id=staff_a.id,
            sales_date="2026-03-11",
            items=[
                {"cylinder_type_id": hp_domestic.id, "quantity_sold": 1, "selling_price_per_cylinder_cents": 1001},
                {"cylinder_type_id": hp_commercial.id, "quantity_sold": 2, "selling_price_per_cylinder_cents": 1001},
            ],
        )

        analytics = sales_service.get_sales_analytics(tenant_id=tenant_a.id)

        # 3002 / 3 and 3001 / 3, rounded to the nearest cent
        averages = {row["cylinder_type"]["id"]: row["average_price_cents"] for row in analytics["average_prices"]}
        assert averages == {hp_commercial.id: 1001, hp_domestic.id: 1000}
        assert [row["cylinder_type"]["id"] for row in analytics["by_cylinder_type"]] == [hp_commercial.id, hp_domestic.id]
        assert analytics["by_company"] == [{"company": "HPCL", "quantity_sold": 6, "revenue_cents": 6003}]

    def test_by_date_orders_staff_by_name(self, db_session, tenant_a, staff_a, hp_domestic, io_domestic, stocked):
        other = staff_service.create_staff(
            tenant_id=tenant_a.id,
            payload={"staff_name": "Anil Desai", "mobile_number": "9123456781"},
        )
        sales_service.create_sale(
            tenant_id=tenant_a.id,
            staff_id=staff_a.id,
            sales_date="2026-03-10",
            items=[{"cylinder_type_id": hp_domestic.id, "quantity_sold": 2, "selling_price_per_cylinder_cents": 1000}],
            empties_received=[{"cylinder_type_id": io_domestic.id, "quantity_received": 1}],
        )
        sales_service.create_sale(
            tenant_id=tenant_a.id,
            staff_id=other.id,
            sales_date="2026-03-10",
            items=[{"cylinder_type_id": hp_domestic.id, "quantity_sold": 3, "selling_price_per_cylinder_cents": 1000}],
        )
        sales_service.create_sale(
            tenant_id=tenant_a.id,
            staff_id=staff_a.id,
            sales_date="2026-03-11",
            items=[{"cylinder_type_id": hp_domestic.id, "quantity_sold": 1, "selling_price_per_cylinder_cents": 1000}],
        )

        result = sales_service.get_sales_by_date(tenant_id=tenant_a.id, sales_date=date(2026, 3, 10))
        assert result["date"] == "2026-03-10"
        assert [sale["staff_id"] for sale in result["sales"]] == [other.id, staff_a.id]
        assert result["summary"] == {
            "total_revenue_cents": 5000,
            "total_cylinders_sold": 5,
            "total_empties_received": 1,
            "sales_count": 2,
        }


class TestSalesLimits:

    def test_oversized_quantity_rejected(self, db_session, tenant_a, staff_a, hp_domestic, stocked):
        with pytest.raises(ValidationError) as exc:
            sales_service.create_sale(
                tenant_id=tenant_a.id,
                staff_id=staff_a.id,
                sales_date="2026-03-10",
                items=[{"cylinder_type_id": hp_domestic.id, "quantity_sold": 10 ** 18,
                        "selling_price_per_cylinder_cents": 95000}],
            )
        assert "items[0].quantity_sold" in exc.value.errors
        assert db_session.query(DailySales).count() == 0
