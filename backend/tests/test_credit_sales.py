"""
Credit sale tests: recording, status changes and overdue alerts.
"""

from datetime import timedelta

from agrotrade.extensions import db
from agrotrade.models import CreditSale, Produce
from agrotrade.time_utils import utcnow
from agrotrade.units import units_to_cents

from conftest import auth_headers


def credit_body(**overrides):
    body = {
        "buyerName": "Akello Stores",
        "nin": "CM9001234",
        "location": "Lira",
        "contact": "0783000222",
        "amountDue": 60000,
        "produceName": "Beans",
        "tonnage": 20,
        "dueDate": (utcnow() + timedelta(days=14)).date().isoformat(),
        "branch": "branch1",
    }
    body.update(overrides)
    return body


def insert_credit_sale(agent, lot, *, due_in_days, status="pending", amount_due=1000):
    now = utcnow()
    credit_sale = CreditSale(
        buyer_name="Direct Buyer", nin="CM0000001", location="Mbale", contact="0701234567",
        amount_due_cents=units_to_cents(amount_due), produce_id=lot.id, produce_name=lot.name, tonnage_kg=1000,
        sales_agent_id=agent.id, sales_agent_name=agent.name,
        due_date=now + timedelta(days=due_in_days), dispatch_date=now,
        branch=lot.branch, status=status,
    )
    db.session.add(credit_sale)
    db.session.commit()
    return credit_sale


class TestRecordCreditSale:

    def test_credit_sale_decrements_stock(self, client, agent1, make_produce):
        lot = make_produce(stock=100)
        resp = client.post("/api/credit-sales", json=credit_body(), headers=auth_headers(agent1))
        assert resp.status_code == 201
        assert resp.json["message"] == "Credit sale recorded successfully"
        assert resp.json["remainingStock"] == 80
        credit_sale = resp.json["creditSale"]
        assert credit_sale["status"] == "pending"
        assert credit_sale["saleType"] == "credit"
        assert credit_sale["produce"] == lot.id
        assert credit_sale["salesAgentName"] == "Alex Agent"
        assert credit_sale["dispatchDate"]
        db.session.expire_all()
        assert db.session.get(Produce, lot.id).stock_kg == 80000

    def test_insufficient_stock_writes_nothing(self, client, agent1, make_produce):
        lot = make_produce(stock=10)
        resp = client.post("/api/credit-sales", json=credit_body(tonnage=11), headers=auth_headers(agent1))
        assert resp.status_code == 400
        assert resp.json["available"] == 10
        db.session.expire_all()
        assert db.session.get(Produce, lot.id).stock_kg == 10000
        assert db.session.query(CreditSale).count() == 0

    def test_due_date_must_be_future(self, client, agent1, make_produce):
        make_produce()
        yesterday = (utcnow() - timedelta(days=1)).isoformat()
        resp = client.post("/api/credit-sales", json=credit_body(dueDate=yesterday), headers=auth_headers(agent1))
        assert resp.status_code == 400
        assert "Due date must be in the future" in resp.json["errors"]

    def test_invalid_payload(self, client, agent1):
        resp = client.post("/api/credit-sales", json=credit_body(
            nin="123", location="A", amountDue=0, dueDate="next week",
        ), headers=auth_headers(agent1))
        assert resp.status_code == 400
        errors = resp.json["errors"]
        assert "NIN must be at least 6 characters" in errors
        assert "Due date must be an ISO-8601 date" in errors
        assert len(errors) == 4


class TestStatusUpdate:

    def test_any_transition_allowed(self, client, agent1, make_produce):
        lot = make_produce()
        credit_sale = insert_credit_sale(agent1, lot, due_in_days=5)
        for status in ("paid", "pending", "overdue", "paid"):
            resp = client.put(f"/api/credit-sales/{credit_sale.id}/status", json={"status": status},
                              headers=auth_headers(agent1))
            assert resp.status_code == 200
            assert resp.json["creditSale"]["status"] == status
            assert resp.json["message"] == f"Credit sale marked as {status}"

    def test_invalid_status(self, client, agent1, make_produce):
        lot = make_produce()
        credit_sale = insert_credit_sale(agent1, lot, due_in_days=5)
        resp = client.put(f"/api/credit-sales/{credit_sale.id}/status", json={"status": "forgiven"},
                          headers=auth_headers(agent1))
        assert resp.status_code == 400
        assert resp.json["error"] == "Invalid status"
        assert resp.json["allowed"] == ["pending", "paid", "overdue"]

    def test_missing_credit_sale(self, client, agent1):
        resp = client.put("/api/credit-sales/404/status", json={"status": "paid"}, headers=auth_headers(agent1))
        assert resp.status_code == 404

    def test_director_updates_any_branch(self, client, director, agent2, make_produce):
        lot = make_produce(branch="branch2")
        credit_sale = insert_credit_sale(agent2, lot, due_in_days=5)
        resp = client.put(f"/api/credit-sales/{credit_sale.id}/status", json={"status": "paid"},
                          headers=auth_headers(director))
        assert resp.status_code == 200


class TestListing:

    def test_totals_by_status(self, client, manager1, agent1, make_produce):
        lot = make_produce()
        insert_credit_sale(agent1, lot, due_in_days=5, amount_due=100)
        insert_credit_sale(agent1, lot, due_in_days=5, amount_due=200, status="overdue")
        insert_credit_sale(agent1, lot, due_in_days=5, amount_due=400, status="paid")
        resp = client.get("/api/credit-sales", headers=auth_headers(manager1))
        assert resp.json["count"] == 3
        assert resp.json["totalPending"] == 100
        assert resp.json["totalOverdue"] == 200
        assert resp.json["totalDue"] == 700

        resp = client.get("/api/credit-sales?status=paid", headers=auth_headers(manager1))
        assert resp.json["count"] == 1
        assert client.get("/api/credit-sales?status=late", headers=auth_headers(manager1)).status_code == 400

    def test_agent_listing(self, client, manager1, agent1, make_produce):
        lot = make_produce()
        insert_credit_sale(agent1, lot, due_in_days=5, amount_due=250)
        insert_credit_sale(manager1, lot, due_in_days=5, amount_due=750)
        resp = client.get(f"/api/credit-sales/agent/{agent1.id}", headers=auth_headers(manager1))
        assert resp.json["count"] == 1
        assert resp.json["totalDue"] == 250


class TestOverdueAlert:

    def test_past_due_pending_is_reported_without_status_change(self, client, manager1, agent1, make_produce):
        lot = make_produce()
        late = insert_credit_sale(agent1, lot, due_in_days=-3, amount_due=500)
        insert_credit_sale(agent1, lot, due_in_days=4, amount_due=900)

        resp = client.get("/api/credit-sales/alerts/overdue", headers=auth_headers(manager1))
        assert resp.status_code == 200
        assert resp.json["count"] == 1
        assert resp.json["totalOverdue"] == 500
        assert resp.json["overdue"][0]["id"] == late.id
        assert resp.json["overdue"][0]["status"] == "pending"

        db.session.expire_all()
        assert db.session.get(CreditSale, late.id).status == "pending"

    def test_paid_records_never_overdue(self, client, manager1, agent1, make_produce):
        lot = make_produce()
        insert_credit_sale(agent1, lot, due_in_days=-3, status="paid")
        resp = client.get("/api/credit-sales/alerts/overdue", headers=auth_headers(manager1))
        assert resp.json["count"] == 0

    def test_sorted_by_due_date(self, client, director, agent1, agent2, make_produce):
        lot1 = make_produce(branch="branch1")
        lot2 = make_produce(branch="branch2")
        recent = insert_credit_sale(agent1, lot1, due_in_days=-1)
        oldest = insert_credit_sale(agent2, lot2, due_in_days=-10, status="overdue")
        resp = client.get("/api/credit-sales/alerts/overdue", headers=auth_headers(director))
        assert [cs["id"] for cs in resp.json["overdue"]] == [oldest.id, recent.id]

    def test_manager_sees_own_branch_only(self, client, manager2, agent1, make_produce):
        lot = make_produce(branch="branch1")
        insert_credit_sale(agent1, lot, due_in_days=-2)
        resp = client.get("/api/credit-sales/alerts/overdue", headers=auth_headers(manager2))
        assert resp.json["count"] == 0
