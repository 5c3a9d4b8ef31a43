"""
Internal Transfer Tests.

Covers balance conservation, paired ledger entries, rejection paths that
must leave state untouched, and the ledger history endpoint.
"""

import logging
import pytest
from decimal import Decimal
from sqlalchemy import select

from backend.app.models.ledger_entry import LedgerEntry
from backend.app.models.wallet_enums import LedgerOperationType, LedgerEntryStatus

SENDER = "9000000001"
RECIPIENT = "9000000002"


@pytest.fixture
async def sender_headers(make_account, auth_headers):
    await make_account(SENDER, "1000.00")
    await make_account(RECIPIENT, "1000.00")
    return await auth_headers(SENDER)


@pytest.mark.asyncio
async def test_full_balance_transfer(client, sender_headers, balance_of, db_session):
    """A (1000.00) sends 1000.00 to B (1000.00): A ends at 0.00, B at 2000.00."""
    response = await client.post(
        "/transfer-internal",
        json={"recipient_mobile": RECIPIENT, "amount": "1000.00"},
        headers=sender_headers
    )
    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Internal transfer successful!"
    assert data["new_balance"] == "0.00"
    
    assert await balance_of(SENDER) == Decimal("0.00")
    assert await balance_of(RECIPIENT) == Decimal("2000.00")
    
    result = await db_session.execute(select(LedgerEntry).order_by(LedgerEntry.id))
    entries = result.scalars().all()
    assert len(entries) == 2
    debit, credit = entries
    assert debit.amount == Decimal("-1000.00")
    assert credit.amount == Decimal("1000.00")
    assert debit.amount + credit.amount == 0
    assert debit.transfer_id == credit.transfer_id == data["transfer_id"]
    assert debit.counterparty_id == credit.account_id
    assert credit.counterparty_id == debit.account_id
    assert debit.counterparty_mobile == RECIPIENT
    assert credit.counterparty_mobile == SENDER
    for entry in entries:
        assert entry.operation_type == LedgerOperationType.INTERNAL_TRANSFER
        assert entry.status == LedgerEntryStatus.COMPLETED


@pytest.mark.asyncio
async def test_partial_transfer_conserves_money(client, sender_headers, balance_of):
    response = await client.post(
        "/transfer-internal",
        json={"recipient_mobile": RECIPIENT, "amount": 250.5},
        headers=sender_headers
    )
    assert response.status_code == 200
    assert response.json()["new_balance"] == "749.50"
    
    sender_after = await balance_of(SENDER)
    recipient_after = await balance_of(RECIPIENT)
    assert sender_after + Decimal("250.50") == Decimal("1000.00")
    assert recipient_after - Decimal("250.50") == Decimal("1000.00")


@pytest.mark.asyncio
async def test_unknown_recipient(client, sender_headers, balance_of, ledger_count):
    """A (1000.00) sends 250.00 to an unknown mobile: 404, balance unchanged."""
    response = await client.post(
        "/transfer-internal",
        json={"recipient_mobile": "9123456789", "amount": "250.00"},
        headers=sender_headers
    )
    assert response.status_code == 404
    assert response.json()["message"] == "Recipient mobile number not found in the system."
    assert await balance_of(SENDER) == Decimal("1000.00")
    assert await ledger_count() == 0


@pytest.mark.asyncio
async def test_insufficient_balance(client, make_account, auth_headers, balance_of, ledger_count):
    """A (100.00) sends 150.00 to B: 400, both balances unchanged."""
    await make_account(SENDER, "100.00")
    await make_account(RECIPIENT, "1000.00")
    headers = await auth_headers(SENDER)
    
    response = await client.post(
        "/transfer-internal",
        json={"recipient_mobile": RECIPIENT, "amount": "150.00"},
        headers=headers
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Insufficient balance."
    assert response.json()["error_code"] == "ERR_FUNDS_001"
    assert await balance_of(SENDER) == Decimal("100.00")
    assert await balance_of(RECIPIENT) == Decimal("1000.00")
    assert await ledger_count() == 0


@pytest.mark.asyncio
async def test_repeated_failure_never_mutates(client, make_account, auth_headers, balance_of, ledger_count):
    await make_account(SENDER, "100.00")
    await make_account(RECIPIENT, "50.00")
    headers = await auth_headers(SENDER)
    
    for _ in range(3):
        response = await client.post(
            "/transfer-internal",
            json={"recipient_mobile": RECIPIENT, "amount": "100.01"},
            headers=headers
        )
        assert response.status_code == 400
    
    assert await balance_of(SENDER) == Decimal("100.00")
    assert await balance_of(RECIPIENT) == Decimal("50.00")
    assert await ledger_count() == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("amount", ["0", "0.00", "-10.00", -1, "12.345", "1e30", "1e26", 1e27, "10000000000.00"])
async def test_invalid_amounts_rejected(client, sender_headers, amount, balance_of, ledger_count):
    response = await client.post(
        "/transfer-internal",
        json={"recipient_mobile": RECIPIENT, "amount": amount},
        headers=sender_headers
    )
    assert response.status_code == 400
    assert response.json()["error_code"] == "ERR_TRANSFER_001"
    assert await balance_of(SENDER) == Decimal("1000.00")
    assert await ledger_count() == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("amount", ["abc", None, "NaN"])
async def test_malformed_amounts_fail_validation(client, sender_headers, amount):
    response = await client.post(
        "/transfer-internal",
        json={"recipient_mobile": RECIPIENT, "amount": amount},
        headers=sender_headers
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_non_ten_digit_recipient_fails_validation(client, sender_headers, balance_of, ledger_count):
    """Only 10-digit mobiles can be registered, so other formats are a malformed body."""
    response = await client.post(
        "/transfer-internal",
        json={"recipient_mobile": "+919876543210", "amount": "10.00"},
        headers=sender_headers
    )
    assert response.status_code == 422
    assert response.json()["error_code"] == "ERR_VALIDATION"
    assert await balance_of(SENDER) == Decimal("1000.00")
    assert await ledger_count() == 0


@pytest.mark.asyncio
async def test_self_transfer_rejected(client, sender_headers, balance_of, ledger_count):
    response = await client.post(
        "/transfer-internal",
        json={"recipient_mobile": SENDER, "amount": "10.00"},
        headers=sender_headers
    )
    assert response.status_code == 400
    assert response.json()["error_code"] == "ERR_TRANSFER_002"
    assert await balance_of(SENDER) == Decimal("1000.00")
    assert await ledger_count() == 0


@pytest.mark.asyncio
async def test_transfer_requires_token(client, make_account, balance_of):
    await make_account(SENDER, "1000.00")
    await make_account(RECIPIENT, "1000.00")
    
    response = await client.post(
        "/transfer-internal",
        json={"recipient_mobile": RECIPIENT, "amount": "10.00"}
    )
    assert response.status_code == 401
    assert await balance_of(RECIPIENT) == Decimal("1000.00")


@pytest.mark.asyncio
async def test_sender_in_body_is_ignored(client, make_account, auth_headers, balance_of):
    """The sender always comes from the token, never from the payload."""
    await make_account(SENDER, "1000.00")
    await make_account(RECIPIENT, "1000.00")
    victim = await make_account("9000000003", "1000.00")
    headers = await auth_headers(SENDER)
    
    response = await client.post(
        "/transfer-internal",
        json={"recipient_mobile": RECIPIENT, "amount": "10.00", "sender_id": victim.id},
        headers=headers
    )
    assert response.status_code == 200
    assert await balance_of(SENDER) == Decimal("990.00")
    assert await balance_of("9000000003") == Decimal("1000.00")


@pytest.mark.asyncio
async def test_transaction_history(client, sender_headers, auth_headers):
    for amount in ("10.00", "20.00"):
        response = await client.post(
            "/transfer-internal",
            json={"recipient_mobile": RECIPIENT, "amount": amount},
            headers=sender_headers
        )
        assert response.status_code == 200
    
    response = await client.get("/transactions", headers=sender_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["total_count"] == 2
    assert data["balance"] == "970.00"
    assert [e["amount"] for e in data["entries"]] == ["-20.00", "-10.00"]
    assert all(e["counterparty_mobile"] == RECIPIENT for e in data["entries"])
    
    recipient_headers = await auth_headers(RECIPIENT)
    response = await client.get("/transactions?limit=1", headers=recipient_headers)
    data = response.json()
    assert data["total_count"] == 2
    assert len(data["entries"]) == 1
    assert data["entries"][0]["amount"] == "20.00"
    assert data["balance"] == "1030.00"


@pytest.mark.asyncio
async def test_transfer_logs_carry_request_correlation_id(client, sender_headers, caplog):
    with caplog.at_level(logging.INFO, logger="wallet.transfer"):
        response = await client.post(
            "/transfer-internal",
            json={"recipient_mobile": RECIPIENT, "amount": "25.00"},
            headers={**sender_headers, "X-Correlation-ID": "corr-123"}
        )
    assert response.status_code == 200
    assert response.headers["X-Correlation-ID"] == "corr-123"
    
    committed = [r for r in caplog.records if r.getMessage() == "Transfer committed"]
    assert len(committed) == 1
    assert committed[0].correlation_id == "corr-123"
