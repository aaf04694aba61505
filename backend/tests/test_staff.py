# Overview: Pytest coverage for staff records and performance rollups.

import pytest

from gasflow.errors import ConflictError, NotFoundError, ValidationError
from gasflow.services import inventory_service, sales_service, staff_service


def _sell(tenant, staff, cylinder_type, quantity, price, sales_date="2026-03-10"):
    return sales_service.create_sale(
        tenant_id=tenant.id,
        staff_id=staff.id,
        sales_date=sales_date,
        items=[{"cylinder_type_id": cylinder_type.id, "quantity_sold": quantity, "selling_price_per_cylinder_cents": price}],
    )


@pytest.fixture
def staff_b(tenant_a):
    return staff_service.create_staff(
        tenant_id=tenant_a.id,
        payload={"staff_name": "Anil Desai", "mobile_number": "9123456781"},
    )


@pytest.fixture
def stocked(tenant_a, hp_domestic):
    inventory_service.opening_stock(
        tenant_id=tenant_a.id,
        items=[{"cylinder_type_id": hp_domestic.id, "full_cylinders": 50, "empty_cylinders": 0}],
    )


class TestStaffRecords:

    def test_duplicate_mobile_conflicts_on_create(self, db_session, tenant_a, staff_a):
        with pytest.raises(ConflictError):
            staff_service.create_staff(
                tenant_id=tenant_a.id,
                payload={"staff_name": "Someone Else", "mobile_number": "9123456780"},
            )

    def test_same_mobile_allowed_across_tenants(self, db_session, tenant_b, staff_a):
        other = staff_service.create_staff(
            tenant_id=tenant_b.id,
            payload={"staff_name": "Ravi Kumar", "mobile_number": "9123456780"},
        )
        assert other.tenant_id == tenant_b.id

    def test_duplicate_mobile_conflicts_on_update(self, db_session, tenant_a, staff_a, staff_b):
        with pytest.raises(ConflictError):
            staff_service.update_staff(
                tenant_id=tenant_a.id,
                staff_id=staff_b.id,
                payload={"mobile_number": staff_a.mobile_number},
            )

    def test_update_keeping_own_mobile(self, db_session, tenant_a, staff_a):
        updated = staff_service.update_staff(
            tenant_id=tenant_a.id,
            staff_id=staff_a.id,
            payload={"staff_name": "Ravi K.", "mobile_number": "9123456780"},
        )
        assert updated.staff_name == "Ravi K."

    def test_deactivate_then_activate(self, db_session, tenant_a, staff_a):
        staff_service.deactivate_staff(tenant_id=tenant_a.id, staff_id=staff_a.id)
        with pytest.raises(ValidationError):
            staff_service.deactivate_staff(tenant_id=tenant_a.id, staff_id=staff_a.id)

        staff = staff_service.activate_staff(tenant_id=tenant_a.id, staff_id=staff_a.id)
        assert staff.is_active is True
        with pytest.raises(ValidationError):
            staff_service.activate_staff(tenant_id=tenant_a.id, staff_id=staff_a.id)

    def test_foreign_staff_not_found(self, db_session, tenant_b, staff_a):
        with pytest.raises(NotFoundError):
            staff_service.get_staff(tenant_id=tenant_b.id, staff_id=staff_a.id)


class TestStaffPerformance:

    def test_summary_combines_record_and_performance(self, db_session, tenant_a, staff_a, hp_domestic, stocked):
        _sell(tenant_a, staff_a, hp_domestic, 2, 1000, "2026-03-10")
        _sell(tenant_a, staff_a, hp_domestic, 1, 1002, "2026-03-12")

        summary = staff_service.staff_summary(tenant_id=tenant_a.id, staff_id=staff_a.id)
        assert summary["staff"]["staff_name"] == "Ravi Kumar"

        performance = summary["performance"]
        assert performance["total_sales_days"] == 2
        assert performance["total_revenue_cents"] == 3002
        assert performance["total_cylinders_sold"] == 3
        assert performance["average_revenue_per_day_cents"] == 1501
        assert performance["last_sale_date"] == "2026-03-12"

    def test_summary_without_sales(self, db_session, tenant_a, staff_a):
        performance = staff_service.staff_summary(tenant_id=tenant_a.id, staff_id=staff_a.id)["performance"]
        assert performance["total_sales_days"] == 0
        assert performance["average_revenue_per_day_cents"] == 0
        assert performance["first_sale_date"] is None

    def test_top_performers_ranked_by_revenue(self, db_session, tenant_a, staff_a, staff_b, hp_domestic, stocked):
        _sell(tenant_a, staff_a, hp_domestic, 2, 1000)
        _sell(tenant_a, staff_b, hp_domestic, 5, 1000)

        ranking = staff_service.top_performers(tenant_id=tenant_a.id)
        assert [row["staff_id"] for row in ranking] == [staff_b.id, staff_a.id]
        assert ranking[0]["total_revenue_cents"] == 5000

        assert len(staff_service.top_performers(tenant_id=tenant_a.id, limit=1)) == 1

    def test_top_performers_skip_inactive_staff(self, db_session, tenant_a, staff_a, staff_b, hp_domestic, stocked):
        _sell(tenant_a, staff_b, hp_domestic, 5, 1000)
        staff_service.deactivate_staff(tenant_id=tenant_a.id, staff_id=staff_b.id)

        ranking = staff_service.top_performers(tenant_id=tenant_a.id)
        assert [row["staff_id"] for row in ranking] == [staff_a.id]
