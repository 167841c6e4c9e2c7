from decimal import Decimal

import pytest
from sqlalchemy.exc import SQLAlchemyError

from coffee_ops.core.errors import BadRequestError
from coffee_ops.models.member import Member, MemberTransaction
from coffee_ops.services import members as member_service
from tests.fixtures_data import MEMBER_PAYLOAD


def _balance(session, member_id=10):
    session.expire_all()
    return session.query(Member.balance).filter(Member.id == member_id).scalar()


def test_register_member_normalizes_email(client):
    response = client.post("/api/members", json=MEMBER_PAYLOAD)

    assert response.status_code == 201
    body = response.json()
    assert body["email"] == "bruno@example.com"
    assert body["membership_level"] == "Bronze"
    assert body["balance"] == 0.0
    assert body["points"] == 0


def test_register_member_rejects_duplicate_contact(client):
    client.post("/api/members", json=MEMBER_PAYLOAD)

    response = client.post("/api/members", json={**MEMBER_PAYLOAD, "email": "other@example.com"})

    assert response.status_code == 409
    assert response.json() == {"error": "Member with this email or phone already exists"}


def test_register_member_requires_name_and_email(client):
    response = client.post("/api/members", json={"phone": "555"})

    assert response.status_code == 400
    assert response.json()["error"] == "Name and email are required"


def test_lookup_member_by_email_or_id(client, member):
    by_email = client.get("/api/members", params={"email": "ANA@example.com"})
    by_id = client.get("/api/members/10")
    missing = client.get("/api/members/11")

    assert by_email.json()["id"] == 10
    assert by_id.json()["balance"] == 50.0
    assert missing.status_code == 404
    assert missing.json() == {"error": "Member not found"}


def test_update_member_validates_level(client, member):
    ok = client.put("/api/members/10", json={"membershipLevel": "Gold"})
    bad = client.put("/api/members/10", json={"membership_level": "Diamond"})

    assert ok.json()["membership_level"] == "Gold"
    assert bad.status_code == 400


def test_top_up_updates_balance_and_writes_one_ledger_entry(client, session):
    session.add(Member(id=10, name="Ana", email="ana@example.com", balance=Decimal("45.50")))
    session.commit()

    response = client.post("/api/members/topup", json={"memberId": 10, "amount": 25})

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "newBalance": 70.5,
        "message": "Successfully added $25.00 to your account",
    }
    assert _balance(session) == Decimal("70.50")
    entries = session.query(MemberTransaction).all()
    assert len(entries) == 1
    assert entries[0].transaction_type == "topup"
    assert entries[0].amount == Decimal("25.00")
    assert entries[0].balance_after == Decimal("70.50")
    assert entries[0].description == "Balance top-up"


def test_top_up_rolls_back_balance_when_ledger_write_fails(client, session, member, monkeypatch):
    def _fail(*args, **kwargs):
        raise SQLAlchemyError("ledger unavailable")

    monkeypatch.setattr(member_service, "record_ledger_entry", _fail)

    response = client.post("/api/members/topup", json={"memberId": 10, "amount": 20})

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}
    assert _balance(session) == Decimal("50.00")
    assert session.query(MemberTransaction).count() == 0


def test_top_up_rejects_non_positive_amount(client, member):
    response = client.post("/api/members/topup", json={"memberId": 10, "amount": 0})

    assert response.status_code == 400
    assert response.json()["error"] == "Member ID and positive amount are required"


def test_top_up_unknown_member(client):
    response = client.post("/api/members/topup", json={"memberId": 999, "amount": 5})

    assert response.status_code == 404
    assert response.json() == {"error": "Member not found"}


def test_member_transactions_are_listed_newest_first(client, member):
    client.post("/api/members/topup", json={"memberId": 10, "amount": 5, "description": "first"})
    client.post("/api/members/topup", json={"memberId": 10, "amount": 7, "description": "second"})

    response = client.get("/api/members/transactions", params={"memberId": 10})
    missing_id = client.get("/api/members/transactions")

    assert [entry["description"] for entry in response.json()] == ["second", "first"]
    assert response.json()[0]["balance_after"] == 62.0
    assert missing_id.status_code == 400


def test_top_up_below_one_cent_is_rejected(client, session, member):
    response = client.post("/api/members/topup", json={"memberId": 10, "amount": 0.004})

    assert response.status_code == 400
    assert response.json()["error"] == "Member ID and positive amount are required"
    assert _balance(session) == Decimal("50.00")
    assert session.query(MemberTransaction).count() == 0


def test_top_up_service_rejects_amount_that_rounds_to_zero(session, member):
    with pytest.raises(BadRequestError, match="at least 0.01"):
        member_service.top_up(session, member_id=10, amount=Decimal("0.004"))
