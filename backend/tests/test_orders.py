# Overview: Pytest coverage for order intake and its inventory effects.

"""
Order Intake Tests

An order adds full cylinders and removes the empties handed back with it,
all-or-nothing. Orders are scoped to the tenant that placed them.
"""

from datetime import date

import pytest

from gasflow.errors import InactiveError, InsufficientStockError, NotFoundError, ValidationError
from gasflow.models import CylinderReturn, Inventory, Order
from gasflow.services import distributor_service, inventory_service, order_service


def _order(tenant, distributor, items, returns=None, order_date="2026-03-10"):
    return order_service.create_order(
        tenant_id=tenant.id,
        distributor_id=distributor.id,
        order_date=order_date,
        delivery_person="Suresh Patil",
        items=items,
        returns=returns,
    )


class TestCreateOrder:
    """Order creation and inventory effects."""

    def test_total_is_frozen_from_items(self, db_session, tenant_a, distributor_a, hp_domestic, hp_commercial):
        order = _order(tenant_a, distributor_a, [
            {"cylinder_type_id": hp_domestic.id, "quantity": 10, "price_per_cylinder_cents": 85000},
            {"cylinder_type_id": hp_commercial.id, "quantity": 2, "price_per_cylinder_cents": 150050},
        ])

        assert order.total_amount_cents == 10 * 85000 + 2 * 150050
        assert len(order.items) == 2

    def test_items_increment_full(self, db_session, tenant_a, distributor_a, hp_domestic):
        _order(tenant_a, distributor_a, [
            {"cylinder_type_id": hp_domestic.id, "quantity": 12, "price_per_cylinder_cents": 85000},
        ])

        assert inventory_service.get_balance(
            tenant_id=tenant_a.id, cylinder_type_id=hp_domestic.id
        ) == {"full": 12, "empty": 0}

    def test_returns_decrement_empty(self, db_session, tenant_a, distributor_a, hp_domestic):
        inventory_service.opening_stock(
            tenant_id=tenant_a.id,
            items=[{"cylinder_type_id": hp_domestic.id, "full_cylinders": 0, "empty_cylinders": 8}],
        )

        order = _order(
            tenant_a, distributor_a,
            items=[{"cylinder_type_id": hp_domestic.id, "quantity": 10, "price_per_cylinder_cents": 85000}],
            returns=[{"cylinder_type_id": hp_domestic.id, "quantity": 8}],
        )

        assert inventory_service.get_balance(
            tenant_id=tenant_a.id, cylinder_type_id=hp_domestic.id
        ) == {"full": 10, "empty": 0}
        returns = db_session.query(CylinderReturn).filter_by(order_id=order.id).all()
        assert [r.quantity for r in returns] == [8]

    def test_insufficient_empties_rolls_back_everything(self, db_session, tenant_a, distributor_a, hp_domestic):
        inventory_service.opening_stock(
            tenant_id=tenant_a.id,
            items=[{"cylinder_type_id": hp_domestic.id, "full_cylinders": 4, "empty_cylinders": 3}],
        )

        with pytest.raises(InsufficientStockError) as exc:
            _order(
                tenant_a, distributor_a,
                items=[{"cylinder_type_id": hp_domestic.id, "quantity": 10, "price_per_cylinder_cents": 85000}],
                returns=[{"cylinder_type_id": hp_domestic.id, "quantity": 5}],
            )
        assert exc.value.available == 3
        assert exc.value.requested == 5

        assert db_session.query(Order).count() == 0
        assert db_session.query(CylinderReturn).count() == 0
        assert inventory_service.get_balance(
            tenant_id=tenant_a.id, cylinder_type_id=hp_domestic.id
        ) == {"full": 4, "empty": 3}

    def test_return_without_inventory_row(self, db_session, tenant_a, distributor_a, hp_domestic, io_domestic):
        with pytest.raises(InsufficientStockError):
            _order(
                tenant_a, distributor_a,
                items=[{"cylinder_type_id": hp_domestic.id, "quantity": 1, "price_per_cylinder_cents": 85000}],
                returns=[{"cylinder_type_id": io_domestic.id, "quantity": 1}],
            )
        assert db_session.query(Inventory).count() == 0

    def test_inactive_distributor_rejected(self, db_session, tenant_a, distributor_a, hp_domestic):
        distributor_service.deactivate_distributor(tenant_id=tenant_a.id, distributor_id=distributor_a.id)

        with pytest.raises(InactiveError):
            _order(tenant_a, distributor_a, [
                {"cylinder_type_id": hp_domestic.id, "quantity": 1, "price_per_cylinder_cents": 85000},
            ])

    def test_unknown_cylinder_type(self, db_session, tenant_a, distributor_a, catalog):
        with pytest.raises(NotFoundError):
            _order(tenant_a, distributor_a, [
                {"cylinder_type_id": 99999, "quantity": 1, "price_per_cylinder_cents": 85000},
            ])
        assert db_session.query(Order).count() == 0

    def test_empty_items_rejected(self, db_session, tenant_a, distributor_a, catalog):
        with pytest.raises(ValidationError) as exc:
            _order(tenant_a, distributor_a, [])
        assert "items" in exc.value.errors

    def test_line_errors_are_keyed_by_index(self, db_session, tenant_a, distributor_a, hp_domestic):
        with pytest.raises(ValidationError) as exc:
            _order(tenant_a, distributor_a, [
                {"cylinder_type_id": hp_domestic.id, "quantity": 1, "price_per_cylinder_cents": 85000},
                {"cylinder_type_id": hp_domestic.id, "quantity": 0, "price_per_cylinder_cents": 85000},
            ])
        assert "items[1].quantity" in exc.value.errors

    def test_decimal_quantity_rejected(self, db_session, tenant_a, distributor_a, hp_domestic):
        with pytest.raises(ValidationError):
            _order(tenant_a, distributor_a, [
                {"cylinder_type_id": hp_domestic.id, "quantity": 1.5, "price_per_cylinder_cents": 85000},
            ])

    def test_short_delivery_person_rejected(self, db_session, tenant_a, distributor_a, hp_domestic):
        with pytest.raises(ValidationError):
            order_service.create_order(
                tenant_id=tenant_a.id,
                distributor_id=distributor_a.id,
                order_date="2026-03-10",
                delivery_person="S",
                items=[{"cylinder_type_id": hp_domestic.id, "quantity": 1, "price_per_cylinder_cents": 1}],
            )


class TestOrderIsolation:
    """Orders and distributors never cross tenants."""

    def test_foreign_distributor_not_found(self, db_session, tenant_a, tenant_b, distributor_a, hp_domestic):
        with pytest.raises(NotFoundError):
            _order(tenant_b, distributor_a, [
                {"cylinder_type_id": hp_domestic.id, "quantity": 1, "price_per_cylinder_cents": 85000},
            ])

    def test_foreign_order_not_found(self, db_session, tenant_a, tenant_b, distributor_a, hp_domestic):
        order = _order(tenant_a, distributor_a, [
            {"cylinder_type_id": hp_domestic.id, "quantity": 1, "price_per_cylinder_cents": 85000},
        ])

        with pytest.raises(NotFoundError):
            order_service.get_order(tenant_id=tenant_b.id, order_id=order.id)

    def test_list_orders_filters_by_date(self, db_session, tenant_a, distributor_a, hp_domestic):
        line = [{"cylinder_type_id": hp_domestic.id, "quantity": 1, "price_per_cylinder_cents": 85000}]
        _order(tenant_a, distributor_a, line, order_date="2026-03-01")
        _order(tenant_a, distributor_a, line, order_date="2026-03-15")

        rows, total = order_service.list_orders(
            tenant_id=tenant_a.id, start=date(2026, 3, 10), end=date(2026, 3, 31)
        )
        assert total == 1
