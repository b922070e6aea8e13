"""
Integration tests for the vending machine endpoints

Covers public browsing, owner management with list replacement and the
admin overview.
"""

import pytest

from vending_info.db.models.machine import MachinePaymentMethod, MachineProduct, VendingMachine
from vending_info.db.models.product import Product
from vending_info.db.models.review import Review
from tests.utils.factories import MachineFactory, ProductFactory, ReviewFactory
from tests.utils.helpers import error_fields

# Mark all tests in this module as integration tests
pytestmark = [pytest.mark.integration, pytest.mark.api]


class TestBrowsing:
    """Public read endpoints"""

    def test_list_active_machines_by_name(self, client, db_session, owner_user):
        MachineFactory.create(db_session, owner_user, name="Zeta")
        MachineFactory.create(db_session, owner_user, name="Alpha")
        MachineFactory.create(db_session, owner_user, name="Hidden", is_active=False)

        response = client.get("/api/machines")

        assert response.status_code == 200
        assert [m["name"] for m in response.json()] == ["Alpha", "Zeta"]

    def test_detail(self, client, machine, product):
        response = client.get(f"/api/machines/{machine.id}")

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Snack Corner"
        assert data["owner"]["name"] == "Owner One"
        assert [p["product"]["name"] for p in data["products"]] == ["Cola"]
        assert data["products"][0]["price"] == 1.5
        assert [m["type"] for m in data["payment_methods"]] == ["COIN", "CREDIT_CARD"]
        assert data["photos"] == []
        assert data["reviews"] == []

    def test_inactive_machine_is_not_found(self, client, db_session, owner_user):
        machine = MachineFactory.create(db_session, owner_user, is_active=False)

        assert client.get(f"/api/machines/{machine.id}").status_code == 404
        assert client.get("/api/machines/9999").status_code == 404

    def test_products_sorted_by_name(self, client, db_session, owner_user):
        products = [ProductFactory.create(db_session, name=name) for name in ["water", "Cola", "apple"]]
        machine = MachineFactory.create(db_session, owner_user, products=products)

        data = client.get(f"/api/machines/{machine.id}").json()

        assert [p["product"]["name"] for p in data["products"]] == ["apple", "Cola", "water"]


class TestCreateMachine:

    def test_owner_creates_machine(self, client, db_session, owner_user, owner_headers, product):
        payload = MachineFactory.payload(
            products=[{"product_id": product.id, "price": 2.0, "slot_code": "A1"}],
            payment_methods=["credit_card", "COIN"],
        )

        response = client.post("/api/machines", json=payload, headers=owner_headers)

        assert response.status_code == 201
        data = response.json()
        assert data["owner_id"] == owner_user.id
        assert data["coordinates"] == "52.52,13.405"
        assert data["is_active"] is True
        assert data["products"][0]["price"] == 2.0
        assert data["products"][0]["slot_code"] == "A1"
        assert [m["type"] for m in data["payment_methods"]] == ["COIN", "CREDIT_CARD"]

    def test_requires_authentication(self, client):
        assert client.post("/api/machines", json=MachineFactory.payload()).status_code == 401

    def test_coordinates_are_normalized(self, client, owner_headers):
        payload = MachineFactory.payload(coordinates=" 52.5200 , 13.4050 ")

        response = client.post("/api/machines", json=payload, headers=owner_headers)

        assert response.json()["coordinates"] == "52.52,13.405"

    @pytest.mark.parametrize("field", ["name", "location"])
    def test_whitespace_text_rejected(self, client, db_session, owner_headers, field):
        payload = MachineFactory.payload(**{field: "   "})

        response = client.post("/api/machines", json=payload, headers=owner_headers)

        assert response.status_code == 400
        assert field in error_fields(response.json())
        assert db_session.query(VendingMachine).count() == 0

    def test_name_is_trimmed(self, client, owner_headers):
        payload = MachineFactory.payload(name="  Lobby  ")

        response = client.post("/api/machines", json=payload, headers=owner_headers)

        assert response.json()["name"] == "Lobby"

    @pytest.mark.parametrize("extra", [
        {"products": [{"product_id": 9999}]},
        {"payment_methods": ["BITCOIN"]},
    ])
    def test_unknown_references_create_nothing(self, client, db_session, owner_headers, extra):
        response = client.post(
            "/api/machines", json=MachineFactory.payload(**extra), headers=owner_headers
        )

        assert response.status_code == 400
        assert db_session.query(VendingMachine).count() == 0

    def test_duplicate_product_rejected(self, client, owner_headers, product):
        payload = MachineFactory.payload(
            products=[{"product_id": product.id}, {"product_id": product.id}]
        )

        response = client.post("/api/machines", json=payload, headers=owner_headers)

        assert response.status_code == 400
        assert response.json()["detail"] == "Each product can only be listed once per machine"

    def test_admin_assigns_owner(self, client, owner_user, admin_headers):
        response = client.post(
            "/api/machines",
            json=MachineFactory.payload(owner_id=owner_user.id),
            headers=admin_headers,
        )

        assert response.status_code == 201
        assert response.json()["owner_id"] == owner_user.id

    def test_admin_assigns_unknown_owner(self, client, admin_headers):
        response = client.post(
            "/api/machines", json=MachineFactory.payload(owner_id=9999), headers=admin_headers
        )

        assert response.status_code == 400

    def test_owner_may_name_themselves(self, client, owner_user, owner_headers):
        response = client.post(
            "/api/machines",
            json=MachineFactory.payload(owner_id=owner_user.id),
            headers=owner_headers,
        )

        assert response.status_code == 201


class TestUpdateMachine:

    def test_partial_update_keeps_lists(self, client, machine, owner_headers):
        response = client.put(
            f"/api/machines/{machine.id}",
            json={"description": "Near the entrance"},
            headers=owner_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["description"] == "Near the entrance"
        assert data["name"] == "Snack Corner"
        assert len(data["products"]) == 1
        assert len(data["payment_methods"]) == 2

    def test_lists_are_replaced(self, client, db_session, machine, product, owner_headers):
        water = ProductFactory.create(db_session, name="Water", price=1.0)

        response = client.put(
            f"/api/machines/{machine.id}",
            json={
                "products": [
                    {"product_id": product.id, "price": 1.7},
                    {"product_id": water.id, "is_available": False},
                ],
                "payment_methods": ["GIROCARD"],
            },
            headers=owner_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert [(p["product"]["name"], p["price"]) for p in data["products"]] == [
            ("Cola", 1.7),
            ("Water", None),
        ]
        assert data["products"][1]["is_available"] is False
        assert [m["type"] for m in data["payment_methods"]] == ["GIROCARD"]
        assert db_session.query(MachineProduct).filter_by(machine_id=machine.id).count() == 2

    def test_empty_lists_clear(self, client, db_session, machine, owner_headers):
        response = client.put(
            f"/api/machines/{machine.id}",
            json={"products": [], "payment_methods": []},
            headers=owner_headers,
        )

        assert response.json()["products"] == []
        assert response.json()["payment_methods"] == []
        assert db_session.query(MachinePaymentMethod).count() == 0

    def test_null_required_fields_are_ignored(self, client, machine, owner_headers):
        response = client.put(
            f"/api/machines/{machine.id}",
            json={"name": None, "location": None, "is_active": None, "description": None},
            headers=owner_headers,
        )

        assert response.status_code == 200
        assert response.json()["name"] == "Snack Corner"
        assert response.json()["is_active"] is True
        assert response.json()["description"] is None

    def test_blank_name_update_rejected(self, client, db_session, machine, owner_headers):
        response = client.put(
            f"/api/machines/{machine.id}", json={"name": "  "}, headers=owner_headers
        )

        assert response.status_code == 400
        assert "name" in error_fields(response.json())
        db_session.expire_all()
        assert db_session.get(VendingMachine, machine.id).name == "Snack Corner"

    def test_invalid_list_rolls_back_field_changes(self, client, db_session, machine, owner_headers):
        response = client.put(
            f"/api/machines/{machine.id}",
            json={"name": "Renamed", "payment_methods": ["BITCOIN"]},
            headers=owner_headers,
        )

        assert response.status_code == 400
        db_session.expire_all()
        stored = db_session.get(VendingMachine, machine.id)
        assert stored.name == "Snack Corner"
        assert len(stored.payment_methods) == 2

    def test_deactivate_hides_from_public(self, client, machine, owner_headers):
        client.put(f"/api/machines/{machine.id}", json={"is_active": False}, headers=owner_headers)

        assert client.get(f"/api/machines/{machine.id}").status_code == 404
        assert client.get("/api/machines").json() == []

    def test_admin_update_missing_machine(self, client, admin_headers):
        response = client.put("/api/machines/9999", json={"name": "x"}, headers=admin_headers)
        assert response.status_code == 404


class TestDeleteMachine:

    def test_delete_cascades(self, client, db_session, machine, product, owner_user, owner_headers):
        ReviewFactory.create(db_session, machine, owner_user)
        machine_id, product_id = machine.id, product.id

        response = client.delete(f"/api/machines/{machine_id}", headers=owner_headers)

        assert response.status_code == 200
        assert response.json()["message"] == "Machine deleted successfully"
        db_session.expire_all()
        assert db_session.get(VendingMachine, machine_id) is None
        assert db_session.query(MachineProduct).count() == 0
        assert db_session.query(MachinePaymentMethod).count() == 0
        assert db_session.query(Review).count() == 0
        assert db_session.get(Product, product_id) is not None

    def test_admin_deletes_any_machine(self, client, machine, admin_headers):
        url = f"/api/machines/{machine.id}"
        assert client.delete(url, headers=admin_headers).status_code == 200
        assert client.delete(url, headers=admin_headers).status_code == 404


class TestOwnerAndAdminListings:

    def test_my_machines(self, client, db_session, owner_user, other_owner, owner_headers):
        MachineFactory.create(db_session, owner_user, name="Mine")
        MachineFactory.create(db_session, owner_user, name="Mine inactive", is_active=False)
        MachineFactory.create(db_session, other_owner, name="Theirs")

        response = client.get("/api/my-machines", headers=owner_headers)

        assert response.status_code == 200
        assert sorted(m["name"] for m in response.json()) == ["Mine", "Mine inactive"]

    def test_my_machines_requires_authentication(self, client):
        assert client.get("/api/my-machines").status_code == 401

    def test_admin_sees_everything(self, client, db_session, machine, owner_user, other_owner, admin_headers):
        MachineFactory.create(db_session, other_owner, name="Inactive", is_active=False)
        ReviewFactory.create(db_session, machine, owner_user, is_approved=False)

        response = client.get("/api/admin/machines", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert len(data) == 2
        by_name = {m["name"]: m for m in data}
        assert by_name["Snack Corner"]["owner"]["email"] == "owner@example.com"
        assert len(by_name["Snack Corner"]["reviews"]) == 1
        assert by_name["Inactive"]["is_active"] is False
