"""
Inventory ledger tests: procurement, updates, lookups and out-of-stock alerts.
"""

from agrotrade.extensions import db
from agrotrade.models import Produce

from conftest import auth_headers


def procurement_body(**overrides):
    body = {
        "name": "Beans",
        "type": "Legume",
        "stock": 100,
        "cost": 1000,
        "salePrice": 1500,
        "dealerName": "Kato Dealers",
        "contact": "0709876543",
        "branch": "branch1",
    }
    body.update(overrides)
    return body


class TestRecordProcurement:

    def test_create_returns_lot(self, client, manager1):
        resp = client.post("/api/procurement", json=procurement_body(), headers=auth_headers(manager1))
        assert resp.status_code == 201
        produce = resp.json["produce"]
        assert produce["stock"] == 100
        assert produce["salePrice"] == 1500
        assert produce["dealerName"] == "Kato Dealers"
        assert produce["recordedBy"] == {"id": manager1.id, "name": "Mona Manager", "email": "manager1@agro.co"}

    def test_numeric_strings_accepted(self, client, manager1):
        resp = client.post("/api/procurement", json=procurement_body(stock="12.5", cost="900"),
                           headers=auth_headers(manager1))
        assert resp.status_code == 201
        assert resp.json["produce"]["stock"] == 12.5

    def test_zero_stock_allowed(self, client, manager1):
        resp = client.post("/api/procurement", json=procurement_body(stock=0), headers=auth_headers(manager1))
        assert resp.status_code == 201

    def test_each_procurement_is_a_new_lot(self, client, manager1):
        client.post("/api/procurement", json=procurement_body(), headers=auth_headers(manager1))
        client.post("/api/procurement", json=procurement_body(stock=20), headers=auth_headers(manager1))
        lots = db.session.query(Produce).filter_by(name="Beans").all()
        assert sorted(lot.stock_kg for lot in lots) == [20000, 100000]

    def test_invalid_payload(self, client, manager1):
        resp = client.post("/api/procurement", json=procurement_body(
            stock=-1, cost=0, salePrice="abc", contact="123", name="B",
        ), headers=auth_headers(manager1))
        assert resp.status_code == 400
        errors = resp.json["errors"]
        assert "Stock must be a non-negative number" in errors
        assert "Cost must be a positive number" in errors
        assert "Sale price must be a number" in errors
        assert "Produce name must be at least 2 characters" in errors
        assert len(errors) == 5
        assert db.session.query(Produce).count() == 0

    def test_boolean_is_not_a_number(self, client, manager1):
        resp = client.post("/api/procurement", json=procurement_body(stock=True), headers=auth_headers(manager1))
        assert resp.status_code == 400

    def test_stock_in_kilograms_and_price_in_cents(self, client, manager1):
        resp = client.post("/api/procurement", json=procurement_body(stock=2.125, cost=999.99),
                           headers=auth_headers(manager1))
        assert resp.status_code == 201
        lot = db.session.get(Produce, resp.json["produce"]["id"])
        assert lot.stock_kg == 2125
        assert lot.cost_cents == 99999
        assert resp.json["produce"]["stock"] == 2.125
        assert resp.json["produce"]["cost"] == 999.99

    def test_sub_unit_precision_rejected(self, client, manager1):
        resp = client.post("/api/procurement", json=procurement_body(stock=1.0005, cost=10.001),
                           headers=auth_headers(manager1))
        assert resp.status_code == 400
        assert "Stock supports at most 3 decimal places" in resp.json["errors"]
        assert "Cost supports at most 2 decimal places" in resp.json["errors"]


class TestUpdateProcurement:

    def test_partial_update(self, client, manager1, make_produce):
        lot = make_produce()
        resp = client.put(f"/api/procurement/{lot.id}", json={"salePrice": 1800, "dealerName": "New Dealer"},
                          headers=auth_headers(manager1))
        assert resp.status_code == 200
        assert resp.json["produce"]["salePrice"] == 1800
        assert resp.json["produce"]["dealerName"] == "New Dealer"
        assert resp.json["produce"]["stock"] == 100
        assert resp.json["produce"]["cost"] == 1000

    def test_stock_and_branch_are_fixed(self, client, manager1, make_produce):
        lot = make_produce()
        resp = client.put(f"/api/procurement/{lot.id}", json={"stock": 5000, "branch": "branch2"},
                          headers=auth_headers(manager1))
        assert resp.status_code == 400
        assert "stock cannot be changed after procurement" in resp.json["errors"]
        assert "branch cannot be changed after procurement" in resp.json["errors"]
        db.session.expire_all()
        assert db.session.get(Produce, lot.id).stock_kg == 100000

    def test_empty_update(self, client, manager1, make_produce):
        lot = make_produce()
        resp = client.put(f"/api/procurement/{lot.id}", json={}, headers=auth_headers(manager1))
        assert resp.status_code == 400
        assert resp.json["errors"] == ["No updatable fields provided"]

    def test_missing_lot(self, client, manager1):
        resp = client.put("/api/procurement/999", json={"cost": 10}, headers=auth_headers(manager1))
        assert resp.status_code == 404


class TestReadInventory:

    def test_sale_reflected_in_get(self, client, manager1, agent1):
        created = client.post("/api/procurement", json=procurement_body(), headers=auth_headers(manager1))
        produce_id = created.json["produce"]["id"]

        sold = client.post("/api/sales", json={
            "produceName": "Beans", "tonnage": 30, "amountPaid": 45000,
            "buyerName": "Okello", "branch": "branch1",
        }, headers=auth_headers(agent1))
        assert sold.status_code == 201
        assert sold.json["remainingStock"] == 70

        resp = client.get(f"/api/procurement/{produce_id}", headers=auth_headers(agent1))
        assert resp.status_code == 200
        assert resp.json["stock"] == 70
        assert resp.json["recordedBy"]["id"] == manager1.id

    def test_listing_newest_first(self, client, manager1, make_produce):
        make_produce(name="Beans")
        make_produce(name="Maize")
        resp = client.get("/api/procurement", headers=auth_headers(manager1))
        assert [p["name"] for p in resp.json["produces"]] == ["Maize", "Beans"]

    def test_missing_produce(self, client, manager1):
        resp = client.get("/api/procurement/4242", headers=auth_headers(manager1))
        assert resp.status_code == 404
        assert resp.json["error"] == "Produce not found"


class TestOutOfStockAlert:

    def test_lists_only_empty_lots(self, client, manager1, make_produce):
        make_produce(name="Beans", stock=0)
        make_produce(name="Maize", stock=3)
        resp = client.get("/api/procurement/alerts/out-of-stock", headers=auth_headers(manager1))
        assert resp.status_code == 200
        assert resp.json["count"] == 1
        assert resp.json["items"][0]["name"] == "Beans"
        assert resp.json["message"] == "1 items out of stock"

    def test_all_in_stock(self, client, manager1, make_produce):
        make_produce(stock=50)
        resp = client.get("/api/procurement/alerts/out-of-stock", headers=auth_headers(manager1))
        assert resp.json["count"] == 0
        assert resp.json["message"] == "All items in stock"
