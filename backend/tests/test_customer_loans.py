# Overview: Pytest coverage for customers and their cylinder loans.

import pytest

from gasflow.errors import ConflictError, InactiveError, NotFoundError, ValidationError
from gasflow.models import LoanCylinderReturn
from gasflow.services import customer_service, inventory_service, sales_service


@pytest.fixture
def loaned(tenant_a, staff_a, customer_a, hp_domestic):
    """Customer A holds 3 loaned domestic cylinders."""
    inventory_service.opening_stock(
        tenant_id=tenant_a.id,
        items=[{"cylinder_type_id": hp_domestic.id, "full_cylinders": 10, "empty_cylinders": 0}],
    )
    return sales_service.create_sale(
        tenant_id=tenant_a.id,
        staff_id=staff_a.id,
        sales_date="2026-03-10",
        items=[{"cylinder_type_id": hp_domestic.id, "quantity_sold": 3, "selling_price_per_cylinder_cents": 95000}],
        customer_loans=[{"customer_id": customer_a.id, "cylinder_type_id": hp_domestic.id, "quantity_loaned": 3}],
    )


class TestCustomers:

    def test_duplicate_name_and_phone(self, db_session, tenant_a, customer_a):
        with pytest.raises(ConflictError):
            customer_service.create_customer(
                tenant_id=tenant_a.id,
                payload={"customer_name": "Hotel Sagar", "phone_number": "9988776655"},
            )

    def test_search_by_name(self, db_session, tenant_a, customer_a):
        customer_service.create_customer(
            tenant_id=tenant_a.id,
            payload={"customer_name": "Cafe Blue", "phone_number": "9000011111"},
        )
        rows, total = customer_service.list_customers(tenant_id=tenant_a.id, search="sagar")
        assert total == 1
        assert rows[0].id == customer_a.id

    def test_inactive_customer_cannot_borrow(self, db_session, tenant_a, staff_a, customer_a, hp_domestic):
        inventory_service.opening_stock(
            tenant_id=tenant_a.id,
            items=[{"cylinder_type_id": hp_domestic.id, "full_cylinders": 10, "empty_cylinders": 0}],
        )
        customer_service.deactivate_customer(tenant_id=tenant_a.id, customer_id=customer_a.id)

        with pytest.raises(InactiveError):
            sales_service.create_sale(
                tenant_id=tenant_a.id,
                staff_id=staff_a.id,
                sales_date="2026-03-10",
                items=[{"cylinder_type_id": hp_domestic.id, "quantity_sold": 1, "selling_price_per_cylinder_cents": 95000}],
                customer_loans=[{"customer_id": customer_a.id, "cylinder_type_id": hp_domestic.id, "quantity_loaned": 1}],
            )


class TestLoanReturns:
    """Pending balances and returns against them."""

    def test_pending_after_loan(self, db_session, tenant_a, customer_a, hp_domestic, loaned):
        pending = customer_service.pending_returns(tenant_id=tenant_a.id, customer_id=customer_a.id)
        assert len(pending) == 1
        assert pending[0]["cylinder_type"]["id"] == hp_domestic.id
        assert pending[0]["pending_return"] == 3

    def test_partial_then_full_return(self, db_session, tenant_a, customer_a, hp_domestic, loaned):
        customer_service.record_loan_return(
            tenant_id=tenant_a.id, customer_id=customer_a.id, cylinder_type_id=hp_domestic.id, quantity=2
        )
        pending = customer_service.pending_returns(tenant_id=tenant_a.id, customer_id=customer_a.id)
        assert pending[0]["total_returned"] == 2
        assert pending[0]["pending_return"] == 1

        customer_service.record_loan_return(
            tenant_id=tenant_a.id, customer_id=customer_a.id, cylinder_type_id=hp_domestic.id, quantity=1
        )
        assert customer_service.pending_returns(tenant_id=tenant_a.id, customer_id=customer_a.id) == []

    def test_over_return_rejected(self, db_session, tenant_a, customer_a, hp_domestic, loaned):
        with pytest.raises(ValidationError) as exc:
            customer_service.record_loan_return(
                tenant_id=tenant_a.id, customer_id=customer_a.id, cylinder_type_id=hp_domestic.id, quantity=4
            )
        assert "quantity_returned" in exc.value.errors
        assert db_session.query(LoanCylinderReturn).count() == 0

    def test_return_of_never_loaned_type(self, db_session, tenant_a, customer_a, io_domestic, loaned):
        with pytest.raises(ValidationError):
            customer_service.record_loan_return(
                tenant_id=tenant_a.id, customer_id=customer_a.id, cylinder_type_id=io_domestic.id, quantity=1
            )

    def test_returns_do_not_touch_inventory(self, db_session, tenant_a, customer_a, hp_domestic, loaned):
        before = inventory_service.get_balance(tenant_id=tenant_a.id, cylinder_type_id=hp_domestic.id)
        customer_service.record_loan_return(
            tenant_id=tenant_a.id, customer_id=customer_a.id, cylinder_type_id=hp_domestic.id, quantity=3
        )
        assert inventory_service.get_balance(
            tenant_id=tenant_a.id, cylinder_type_id=hp_domestic.id
        ) == before

    def test_foreign_customer_not_found(self, db_session, tenant_b, customer_a, hp_domestic, loaned):
        with pytest.raises(NotFoundError):
            customer_service.record_loan_return(
                tenant_id=tenant_b.id, customer_id=customer_a.id, cylinder_type_id=hp_domestic.id, quantity=1
            )

    def test_loan_history(self, db_session, tenant_a, customer_a, loaned):
        loans = customer_service.list_loans(tenant_id=tenant_a.id, customer_id=customer_a.id)
        assert [loan.sales_id for loan in loans] == [loaned.id]
