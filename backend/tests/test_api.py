# Overview: Pytest coverage for the HTTP surface: auth, envelopes and tenant isolation.

"""
API Tests

Exercises the Flask routes end to end through the test client:
1. Login / me / logout lifecycle
2. 401 without a session, 403 on the wrong role
3. {success, data, message} envelope, pagination and error shapes
4. A tenant never sees another tenant's rows (404, not 403)
"""

from conftest import auth_headers, login


class TestAuthEndpoints:

    def test_login_me_logout(self, client, db_session, tenant_a):
        response = client.post('/api/auth/login', json={"email": "gupta@example.com", "password": "Password123!"})
        body = response.get_json()
        assert response.status_code == 200
        assert body["success"] is True
        assert body["message"] == "Login successful"
        assert body["data"]["user"]["email"] == "gupta@example.com"
        assert "password_hash" not in body["data"]["user"]
        assert body["data"]["expires_at"].endswith("Z")

        headers = auth_headers(body["data"]["token"])
        me = client.get('/api/auth/me', headers=headers)
        assert me.status_code == 200
        assert me.get_json()["data"]["id"] == tenant_a.id

        assert client.post('/api/auth/logout', headers=headers).status_code == 200
        assert client.get('/api/auth/me', headers=headers).status_code == 401

    def test_bad_credentials(self, client, db_session, tenant_a):
        response = client.post('/api/auth/login', json={"email": "gupta@example.com", "password": "Nope1234!"})
        assert response.status_code == 401
        assert response.get_json() == {"success": False, "message": "Invalid email or password"}

    def test_missing_credentials(self, client, db_session):
        response = client.post('/api/auth/login', json={})
        assert response.status_code == 400
        assert response.get_json()["success"] is False

    def test_no_token(self, client, db_session):
        response = client.get('/api/inventory')
        assert response.status_code == 401
        assert response.get_json()["message"] == "Authentication required"

    def test_garbage_token(self, client, db_session):
        response = client.get('/api/inventory', headers=auth_headers("deadbeef"))
        assert response.status_code == 401
        assert response.get_json()["message"] == "Invalid or expired token"


class TestRoleGates:

    def test_admin_cannot_use_retailer_endpoints(self, client, db_session, admin_user):
        token = login(client, "admin@example.com")
        response = client.get('/api/inventory', headers=auth_headers(token))
        assert response.status_code == 403
        assert response.get_json()["message"] == "Retailer access required"

    def test_retailer_cannot_use_admin_endpoints(self, client, db_session, tenant_a):
        token = login(client, "gupta@example.com")
        response = client.get('/api/admin/users', headers=auth_headers(token))
        assert response.status_code == 403

    def test_admin_registers_retailer(self, client, db_session, admin_user):
        token = login(client, "admin@example.com")
        response = client.post('/api/admin/users', headers=auth_headers(token), json={
            "name": "New Retailer",
            "email": "new@example.com",
            "password": "Password123!",
            "mobile_number": "9876501234",
        })
        assert response.status_code == 201
        assert response.get_json()["data"]["role"] == "USER"

        # the new retailer can log in straight away
        assert login(client, "new@example.com")

    def test_weak_password_reports_field(self, client, db_session, admin_user):
        token = login(client, "admin@example.com")
        response = client.post('/api/admin/users', headers=auth_headers(token), json={
            "name": "New Retailer",
            "email": "new@example.com",
            "password": "weak",
        })
        assert response.status_code == 400
        assert "password" in response.get_json()["errors"]

    def test_deactivated_retailer_session_is_rejected(self, client, db_session, admin_user, tenant_a):
        admin_token = login(client, "admin@example.com")
        user_token = login(client, "gupta@example.com")

        response = client.patch(f'/api/admin/users/{tenant_a.id}/deactivate', headers=auth_headers(admin_token))
        assert response.status_code == 200

        assert client.get('/api/auth/me', headers=auth_headers(user_token)).status_code == 401


class TestEnvelopes:

    def test_unknown_route(self, client, db_session):
        response = client.get('/api/nothing-here')
        assert response.status_code == 404
        assert response.get_json() == {"success": False, "message": "Route /api/nothing-here not found"}

    def test_health(self, client, db_session):
        response = client.get('/health')
        body = response.get_json()
        assert response.status_code == 200
        assert body["data"]["checks"]["database"]["status"] == "healthy"

    def test_cylinder_catalog(self, client, db_session, catalog, tenant_a):
        token = login(client, "gupta@example.com")
        response = client.get('/api/cylinder-types?company=HPCL', headers=auth_headers(token))
        data = response.get_json()["data"]
        assert response.status_code == 200
        assert len(data) == 4
        assert {row["company"] for row in data} == {"HPCL"}

    def test_pagination_block(self, client, db_session, tenant_a):
        token = login(client, "gupta@example.com")
        for i in range(3):
            response = client.post('/api/distributors', headers=auth_headers(token), json={
                "distributor_name": f"Distributor {i}",
                "contact_number": f"900000000{i}",
                "address": "Industrial Area",
            })
            assert response.status_code == 201

        response = client.get('/api/distributors?page=2&limit=2', headers=auth_headers(token))
        body = response.get_json()
        assert body["pagination"] == {"page": 2, "limit": 2, "total": 3, "total_pages": 2}
        assert len(body["data"]) == 1

    def test_validation_errors_are_field_keyed(self, client, db_session, tenant_a, hp_domestic):
        token = login(client, "gupta@example.com")
        response = client.post('/api/inventory/opening-stock', headers=auth_headers(token), json={
            "items": [{"cylinder_type_id": hp_domestic.id, "full_cylinders": -3, "empty_cylinders": 0}],
        })
        body = response.get_json()
        assert response.status_code == 400
        assert body["success"] is False
        assert "items[0].full_cylinders" in body["errors"]

    def test_opening_stock_twice_conflicts(self, client, db_session, tenant_a, hp_domestic):
        token = login(client, "gupta@example.com")
        payload = {"items": [{"cylinder_type_id": hp_domestic.id, "full_cylinders": 3, "empty_cylinders": 0}]}

        assert client.post('/api/inventory/opening-stock', headers=auth_headers(token), json=payload).status_code == 201
        response = client.post('/api/inventory/opening-stock', headers=auth_headers(token), json=payload)
        assert response.status_code == 409
        assert response.get_json()["message"] == "Opening stock already set. Use adjustments to modify inventory."

    def test_adjustment_returns_new_balance(self, client, db_session, tenant_a, hp_domestic):
        token = login(client, "gupta@example.com")
        response = client.post('/api/inventory/adjustment', headers=auth_headers(token), json={
            "cylinder_type_id": hp_domestic.id,
            "full_cylinder_change": 4,
            "empty_cylinder_change": 1,
            "reason": "Physical count",
        })
        assert response.status_code == 201
        assert response.get_json()["data"]["inventory"] == {"full": 4, "empty": 1}

    def test_oversized_order_quantity_is_a_validation_error(self, client, db_session, tenant_a, distributor_a, hp_domestic):
        token = login(client, "gupta@example.com")
        response = client.post('/api/orders', headers=auth_headers(token), json={
            "distributor_id": distributor_a.id,
            "order_date": "2026-03-10",
            "delivery_person": "Suresh Patil",
            "items": [{"cylinder_type_id": hp_domestic.id, "quantity": 10 ** 18, "price_per_cylinder_cents": 100}],
        })
        body = response.get_json()
        assert response.status_code == 400
        assert "items[0].quantity" in body["errors"]

    def test_oversized_adjustment_is_a_validation_error(self, client, db_session, tenant_a, hp_domestic):
        token = login(client, "gupta@example.com")
        response = client.post('/api/inventory/adjustment', headers=auth_headers(token), json={
            "cylinder_type_id": hp_domestic.id,
            "full_cylinder_change": 10 ** 19,
            "reason": "Physical count",
        })
        assert response.status_code == 400
        assert "full_cylinder_change" in response.get_json()["errors"]

    def test_out_of_range_id_is_a_validation_error(self, client, db_session, tenant_a, catalog):
        token = login(client, "gupta@example.com")
        response = client.post('/api/inventory/adjustment', headers=auth_headers(token), json={
            "cylinder_type_id": 10 ** 19,
            "full_cylinder_change": 1,
            "reason": "Physical count",
        })
        assert response.status_code == 400
        assert "cylinder_type_id" in response.get_json()["errors"]

    def test_negative_movement_limit_rejected(self, client, db_session, tenant_a):
        token = login(client, "gupta@example.com")
        response = client.get('/api/inventory/movements?limit=-1', headers=auth_headers(token))
        assert response.status_code == 400
        assert "limit" in response.get_json()["errors"]

    def test_report_requires_dates(self, client, db_session, tenant_a):
        token = login(client, "gupta@example.com")
        response = client.get('/api/reports/financial/profit-loss', headers=auth_headers(token))
        assert response.status_code == 400
        assert "start_date" in response.get_json()["errors"]


class TestTenantIsolationOverHttp:

    def test_foreign_distributor_is_not_found(self, client, db_session, tenant_a, tenant_b, distributor_a):
        token = login(client, "sharma@example.com")
        response = client.get(f'/api/distributors/{distributor_a.id}', headers=auth_headers(token))
        assert response.status_code == 404
        assert response.get_json()["message"] == "Distributor not found"

    def test_listing_only_shows_own_rows(self, client, db_session, tenant_a, tenant_b, distributor_a):
        token = login(client, "sharma@example.com")
        response = client.get('/api/distributors', headers=auth_headers(token))
        assert response.get_json()["pagination"]["total"] == 0

    def test_order_and_sale_flow(self, client, db_session, tenant_a, tenant_b, distributor_a, staff_a, hp_domestic):
        token = login(client, "gupta@example.com")
        order = client.post('/api/orders', headers=auth_headers(token), json={
            "distributor_id": distributor_a.id,
            "order_date": "2026-03-10",
            "delivery_person": "Suresh Patil",
            "items": [{"cylinder_type_id": hp_domestic.id, "quantity": 10, "price_per_cylinder_cents": 85000}],
        })
        assert order.status_code == 201
        order_id = order.get_json()["data"]["id"]

        sale = client.post('/api/sales', headers=auth_headers(token), json={
            "staff_id": staff_a.id,
            "sales_date": "2026-03-11",
            "items": [{"cylinder_type_id": hp_domestic.id, "quantity_sold": 12, "selling_price_per_cylinder_cents": 95000}],
        })
        assert sale.status_code == 400
        assert "Available: 10, Requested: 12" in sale.get_json()["message"]

        other = login(client, "sharma@example.com")
        assert client.get(f'/api/orders/{order_id}', headers=auth_headers(other)).status_code == 404

        balance = client.get(
            f'/api/distributors/{distributor_a.id}/balance/financial', headers=auth_headers(token)
        ).get_json()["data"]
        assert balance["balance_cents"] == 850000
        assert balance["status"] == "owed"
