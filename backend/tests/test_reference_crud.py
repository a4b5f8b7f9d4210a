"""
Catalog and staff management: products, outlets, suppliers, users, settings.
"""

import pytest

from pharmapos.models import InventoryHistory, Product, Setting, Supplier, User
from pharmapos.services import inventory_service, products_service


class TestProducts:

    def test_pagination_and_search(self, client, make_product, cashier_headers):
        for i in range(12):
            make_product(name=f"Obat {i:02d}", category="Analgesic" if i % 4 == 0 else "Vitamin")

        first = client.get("/api/products", headers=cashier_headers).json
        assert len(first["data"]) == 10
        assert first["pagination"] == {"total": 12, "page": 1, "limit": 10, "totalPages": 2}
        assert first["data"][0]["name"] == "Obat 00"

        second = client.get("/api/products?page=2", headers=cashier_headers).json
        assert [p["name"] for p in second["data"]] == ["Obat 10", "Obat 11"]

        found = client.get("/api/products?search=analgesic&limit=100", headers=cashier_headers).json
        assert [p["name"] for p in found["data"]] == ["Obat 00", "Obat 04", "Obat 08"]

    def test_limit_is_capped(self, client, cashier_headers):
        body = client.get("/api/products?limit=1000", headers=cashier_headers).json
        assert body["pagination"]["limit"] == 100
        assert body["pagination"]["totalPages"] == 1

    def test_create_product(self, client, admin_headers, db_session):
        resp = client.post("/api/products", headers=admin_headers, json={
            "name": "Amoxicillin 500mg",
            "stock": 40,
            "cost_price": "2500",
            "selling_price": 3200.5,
            "unit": "strip",
            "category": "Antibiotic",
            "expired_date": "2027-06-30",
        })

        assert resp.status_code == 201
        body = resp.json
        assert body["stock"] == 40
        assert body["selling_price"] == 3200.5
        assert body["expired_date"] == "2027-06-30"
        # Initial stock is not a ledger event
        assert db_session.query(InventoryHistory).count() == 0

    @pytest.mark.parametrize("payload", [
        {"cost_price": "1000", "selling_price": "1500"},
        {"name": "X", "cost_price": "-1", "selling_price": "1500"},
        {"name": "X", "cost_price": "abc", "selling_price": "1500"},
        {"name": "X", "cost_price": "1000", "selling_price": "1500", "stock": -3},
        {"name": "X", "cost_price": "1000", "selling_price": "1500", "stock": 2.5},
        {"name": "X", "cost_price": "1000", "selling_price": "1500", "expired_date": "soon"},
        {"name": "X", "cost_price": "1000", "selling_price": "1500", "id": 99},
    ])
    def test_create_rejects_invalid_payload(self, client, admin_headers, payload):
        resp = client.post("/api/products", headers=admin_headers, json=payload)
        assert resp.status_code == 400
        assert resp.json["message"]

    def test_stock_edit_is_logged(self, client, make_product, admin_headers, db_session):
        product = make_product(stock=10)

        resp = client.put(f"/api/products/{product.id}", headers=admin_headers, json={
            "stock": 25,
            "selling_price": "1750",
        })

        assert resp.status_code == 200
        assert resp.json["stock"] == 25
        assert resp.json["selling_price"] == 1750.0

        row = db_session.query(InventoryHistory).one()
        assert (row.type, row.previous_stock, row.new_stock, row.quantity_change) == ("adjustment", 10, 25, 15)
        assert row.note == "Product edit"

    def test_edit_without_stock_change_is_not_logged(self, client, make_product, admin_headers, db_session):
        product = make_product(stock=10)

        resp = client.put(f"/api/products/{product.id}", headers=admin_headers, json={"stock": 10, "unit": "box"})

        assert resp.status_code == 200
        assert db_session.query(InventoryHistory).count() == 0

    def test_stock_edit_reads_current_row(self, db_session, make_product):
        product = make_product(stock=10)
        assert product.stock == 10

        # A sale decrement lands without refreshing the loaded product
        inventory_service.apply_stock_delta(product.id, -6, allow_negative=True)

        products_service.update_product(product_id=product.id, patch={"stock": 20})

        row = db_session.query(InventoryHistory).one()
        assert (row.previous_stock, row.new_stock, row.quantity_change) == (4, 20, 16)
        db_session.expire_all()
        assert db_session.get(Product, product.id).stock == 20

    def test_delete_product(self, client, make_product, admin_headers, db_session):
        product = make_product()

        resp = client.delete(f"/api/products/{product.id}", headers=admin_headers)

        assert resp.status_code == 200
        assert db_session.query(Product).count() == 0
        assert client.get(f"/api/products/{product.id}", headers=admin_headers).status_code == 404

    def test_delete_refused_once_sold(self, client, make_product, admin_headers):
        product = make_product(stock=10)
        client.post("/api/transactions", headers=admin_headers, json={
            "items": [{"id": product.id, "quantity": 1, "price": 1500}],
        })

        resp = client.delete(f"/api/products/{product.id}", headers=admin_headers)
        assert resp.status_code == 409

    def test_cashier_cannot_create(self, client, cashier_headers):
        resp = client.post("/api/products", headers=cashier_headers, json={
            "name": "X", "cost_price": "1", "selling_price": "2",
        })
        assert resp.status_code == 403


class TestOutlets:

    def test_crud(self, client, admin_headers):
        created = client.post("/api/outlets", headers=admin_headers, json={
            "name": "Apotek Sehat Barat", "location": "Jl. Barat 9",
        })
        assert created.status_code == 201
        assert created.json["status"] == "Active"
        outlet_id = created.json["id"]

        updated = client.put(f"/api/outlets/{outlet_id}", headers=admin_headers, json={"status": "Inactive"})
        assert updated.status_code == 200
        assert updated.json["status"] == "Inactive"

        listed = client.get("/api/outlets", headers=admin_headers).json
        assert [o["name"] for o in listed] == ["Apotek Sehat Barat"]

        assert client.delete(f"/api/outlets/{outlet_id}", headers=admin_headers).status_code == 200
        assert client.get("/api/outlets", headers=admin_headers).json == []

    def test_invalid_status(self, client, admin_headers):
        resp = client.post("/api/outlets", headers=admin_headers, json={
            "name": "X", "location": "Y", "status": "Closed",
        })
        assert resp.status_code == 400

    def test_delete_refused_while_staffed(self, client, make_outlet, make_user, admin_headers):
        outlet = make_outlet()
        make_user("kasir9", "Cashier", outlet_id=outlet.id)

        resp = client.delete(f"/api/outlets/{outlet.id}", headers=admin_headers)

        assert resp.status_code == 409
        assert "1 user(s)" in resp.json["message"]

    def test_missing_outlet(self, client, admin_headers):
        resp = client.put("/api/outlets/999", headers=admin_headers, json={"name": "X"})
        assert resp.status_code == 404


class TestSuppliers:

    def test_crud(self, client, admin_headers, db_session):
        created = client.post("/api/suppliers", headers=admin_headers, json={
            "name": "PT Kimia Farma", "contact_person": "Budi", "phone": "021-555",
        })
        assert created.status_code == 201
        supplier_id = created.json["id"]

        client.post("/api/suppliers", headers=admin_headers, json={"name": "PT Anugrah Argon"})

        listed = client.get("/api/suppliers?search=budi", headers=admin_headers).json
        assert [s["name"] for s in listed["data"]] == ["PT Kimia Farma"]

        updated = client.put(f"/api/suppliers/{supplier_id}", headers=admin_headers, json={"address": "Jakarta"})
        assert updated.json["address"] == "Jakarta"

        assert client.delete(f"/api/suppliers/{supplier_id}", headers=admin_headers).status_code == 200
        assert db_session.query(Supplier).count() == 1

    def test_name_required(self, client, admin_headers):
        resp = client.post("/api/suppliers", headers=admin_headers, json={"phone": "021"})
        assert resp.status_code == 400

    def test_cashier_has_no_access(self, client, cashier_headers):
        assert client.get("/api/suppliers", headers=cashier_headers).status_code == 403


class TestUsers:

    def test_create_and_login(self, client, make_outlet, admin_headers, login):
        outlet = make_outlet()

        resp = client.post("/api/users", headers=admin_headers, json={
            "username": "kasir5", "password": "Rahasia123", "role": "Cashier", "outlet_id": outlet.id,
        })

        assert resp.status_code == 201
        assert resp.json["outlet_name"] == "Apotek Sehat Pusat"
        assert "password_hash" not in resp.json
        assert login("kasir5", "Rahasia123")

    def test_duplicate_username(self, client, admin_headers):
        resp = client.post("/api/users", headers=admin_headers, json={
            "username": "admin1", "password": "Rahasia123", "role": "Cashier",
        })
        assert resp.status_code == 409

    def test_unknown_role_and_outlet(self, client, admin_headers):
        assert client.post("/api/users", headers=admin_headers, json={
            "username": "x1", "password": "Rahasia123", "role": "Pharmacist",
        }).status_code == 400
        assert client.post("/api/users", headers=admin_headers, json={
            "username": "x2", "password": "Rahasia123", "role": "Cashier", "outlet_id": 999,
        }).status_code == 404
        assert client.post("/api/users", headers=admin_headers, json={
            "username": "x3", "password": "Rahasia123", "role": "Cashier", "outlet_id": 10**20,
        }).status_code == 400

    def test_blank_password_keeps_current(self, client, make_user, admin_headers, login, db_session):
        user = make_user("kasir6", "Cashier")

        resp = client.put(f"/api/users/{user.id}", headers=admin_headers, json={"password": "", "status": "inactive"})

        assert resp.status_code == 200
        assert resp.json["status"] == "inactive"
        db_session.expire_all()
        client.put(f"/api/users/{user.id}", headers=admin_headers, json={"status": "active"})
        assert login("kasir6")

    def test_admin_cannot_touch_superadmin(self, client, make_user, admin_headers, db_session):
        root = make_user("root", "superadmin")

        assert client.post("/api/users", headers=admin_headers, json={
            "username": "root2", "password": "Rahasia123", "role": "superadmin",
        }).status_code == 403
        assert client.put(f"/api/users/{root.id}", headers=admin_headers, json={"status": "inactive"}).status_code == 403
        assert client.delete(f"/api/users/{root.id}", headers=admin_headers).status_code == 403
        assert db_session.get(User, root.id) is not None

    def test_admin_cannot_promote_to_superadmin(self, client, make_user, admin_headers):
        user = make_user("kasir7", "Cashier")
        resp = client.put(f"/api/users/{user.id}", headers=admin_headers, json={"role": "superadmin"})
        assert resp.status_code == 403

    def test_superadmin_manages_superadmins(self, client, superadmin_headers):
        resp = client.post("/api/users", headers=superadmin_headers, json={
            "username": "root2", "password": "Rahasia123", "role": "superadmin",
        })
        assert resp.status_code == 201

        assert client.delete(f"/api/users/{resp.json['id']}", headers=superadmin_headers).status_code == 200

    def test_cannot_delete_self(self, client, admin_headers, db_session):
        admin = db_session.query(User).filter_by(username="admin1").one()

        resp = client.delete(f"/api/users/{admin.id}", headers=admin_headers)

        assert resp.status_code == 403

    def test_list_users(self, client, make_user, admin_headers):
        make_user("kasir8", "Cashier")

        body = client.get("/api/users?search=kasir", headers=admin_headers).json

        assert [u["username"] for u in body["data"]] == ["kasir8"]
        assert body["pagination"]["total"] == 1


class TestSettings:

    def test_defaults(self, client, cashier_headers):
        resp = client.get("/api/settings", headers=cashier_headers)
        assert resp.status_code == 200
        assert resp.json == {"ppn_rate": 0.0, "discount_rate": 0.0}

    def test_update(self, client, admin_headers, db_session):
        resp = client.put("/api/settings", headers=admin_headers, json={"ppn_rate": 11})

        assert resp.status_code == 200
        assert resp.json == {"ppn_rate": 11.0, "discount_rate": 0.0}
        assert db_session.get(Setting, "ppn_rate").value == "11.00"

        resp = client.put("/api/settings", headers=admin_headers, json={"ppn_rate": "12.5", "discount_rate": 5})
        assert resp.json == {"ppn_rate": 12.5, "discount_rate": 5.0}

    @pytest.mark.parametrize("payload", [{"ppn_rate": 101}, {"ppn_rate": -1}, {"tax": 5}])
    def test_invalid_update(self, client, admin_headers, payload):
        assert client.put("/api/settings", headers=admin_headers, json=payload).status_code == 400

    def test_cashier_cannot_update(self, client, cashier_headers):
        assert client.put("/api/settings", headers=cashier_headers, json={"ppn_rate": 11}).status_code == 403
