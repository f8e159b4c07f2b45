"""
HTTP API tests.

Drive the aiohttp application with its test client over an in-memory
SQLite database.
"""

from decimal import Decimal

import pytest
import pytest_asyncio
import redis
from aiohttp.test_utils import TestClient, TestServer

from api.app import create_app
from api.middlewares import status_for
from app.models import AppSetting, User, Wallet
from app.utils.exceptions import (
    AccountLimitError,
    ConversionDisabledError,
    InsufficientBalanceError,
    LegOccupiedError,
    NotFoundError,
    PinLockedError,
    PlacementError,
    ServiceUnavailableError,
    ValidationError,
)
from jobs.tasks.commissions import (
    distribute_order_commissions,
    distribute_purchase_commissions,
)


class TestStatusMapping:
    """Domain errors map to HTTP statuses."""

    @pytest.mark.parametrize(
        "error, status",
        [
            (ValidationError(), 400),
            (PinLockedError(), 403),
            (ConversionDisabledError(), 403),
            (NotFoundError(), 404),
            (LegOccupiedError(), 409),
            (AccountLimitError(), 409),
            (PlacementError(), 409),
            (InsufficientBalanceError(), 422),
            (ServiceUnavailableError(), 503),
        ],
    )
    def test_status_for(self, error, status):
        assert status_for(error) == status


@pytest_asyncio.fixture
async def client(session_maker):
    async with TestClient(TestServer(create_app(session_maker))) as client:
        yield client


@pytest.fixture
def add_user(session_maker):
    async def _add(username, is_admin=False, **wallet) -> int:
        async with session_maker() as session:
            user = User(username=username, is_admin=is_admin)
            session.add(user)
            await session.flush()
            session.add(Wallet(user_id=user.id, **wallet))
            await session.commit()
            return user.id

    return _add


def as_user(user_id: int) -> dict[str, str]:
    return {"X-User-Id": str(user_id)}


class TestSystemRoutes:

    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status == 200
        assert (await response.json())["status"] == "healthy"

    async def test_missing_caller_header(self, client):
        response = await client.get("/api/wallet")

        assert response.status == 401

    async def test_register_user(self, client):
        response = await client.post("/api/users", json={"username": "alice"})

        assert response.status == 201
        body = await response.json()
        assert body["user"]["username"] == "alice"
        assert body["user"]["referral_code"]

    async def test_register_duplicate_username(self, client):
        await client.post("/api/users", json={"username": "alice"})

        response = await client.post("/api/users", json={"username": "alice"})

        assert response.status == 409

    async def test_admin_route_requires_admin(self, client, add_user):
        member = await add_user("member")

        response = await client.get("/api/admin/settings", headers=as_user(member))

        assert response.status == 403

    async def test_admin_updates_settings(self, client, add_user, session_maker):
        admin = await add_user("admin", is_admin=True)

        response = await client.put(
            "/api/admin/settings",
            json={"values": {"binary_daily_cap": "750"}},
            headers=as_user(admin),
        )

        assert response.status == 200
        async with session_maker() as session:
            row = await session.get(AppSetting, 1)
            assert row.key == "binary_daily_cap"
            assert row.value == "750"

    async def test_invalid_setting_is_rejected(self, client, add_user):
        admin = await add_user("admin", is_admin=True)

        response = await client.put(
            "/api/admin/settings",
            json={"values": {"binary_admin_safety_net": "120"}},
            headers=as_user(admin),
        )

        assert response.status == 400
        assert "error" in await response.json()

    async def test_ai_generate_without_provider(self, client, add_user):
        member = await add_user("member", ai_credits=10)

        response = await client.post(
            "/api/ai/generate",
            json={"feature": "text", "prompt": "hello"},
            headers=as_user(member),
        )

        assert response.status == 503


class TestBinaryRoutes:

    async def test_enroll_and_list_accounts(self, client, add_user):
        sponsor = await add_user("sponsor")
        member = await add_user("member")

        first = await client.post("/api/binary/enroll", json={}, headers=as_user(sponsor))
        second = await client.post(
            "/api/binary/enroll",
            json={"sponsor_user_id": sponsor},
            headers=as_user(member),
        )

        assert first.status == 201
        assert second.status == 201
        placed = (await second.json())["account"]
        assert placed["placement_leg"] == "left"

        accounts = await client.get("/api/binary/accounts", headers=as_user(member))
        assert len((await accounts.json())["accounts"]) == 1
        own = await client.get("/api/binary/accounts", headers=as_user(sponsor))
        assert Decimal((await own.json())["accounts"][0]["left_volume"]) == 0

    async def test_resolve_unknown_pending(self, client, add_user):
        sponsor = await add_user("sponsor")

        response = await client.post(
            "/api/binary/pending/999/resolve",
            json={"leg": "left"},
            headers=as_user(sponsor),
        )

        assert response.status == 404

    async def test_additional_account_without_main_account(self, client, add_user):
        member = await add_user("member")

        response = await client.post(
            "/api/binary/accounts",
            json={"mode": "spillover"},
            headers=as_user(member),
        )

        assert response.status == 404


class TestWalletRoutes:

    async def test_balances(self, client, add_user):
        member = await add_user("member", credits=25)

        response = await client.get("/api/wallet", headers=as_user(member))

        body = await response.json()
        assert body["credits"] == 25
        assert body["has_pin"] is False

    async def test_convert_insufficient_balance(self, client, add_user):
        member = await add_user("member", credits=10)

        response = await client.post(
            "/api/wallet/convert",
            json={"pair": "credit_to_diamond", "amount": "100"},
            headers=as_user(member),
        )

        assert response.status == 422

    async def test_convert_disabled_pair(self, client, add_user, session_maker):
        member = await add_user("member", credits=1000)
        async with session_maker() as session:
            session.add(AppSetting(key="enable_credit_to_diamond", value="false"))
            await session.commit()

        response = await client.post(
            "/api/wallet/convert",
            json={"pair": "credit_to_diamond", "amount": "100"},
            headers=as_user(member),
        )

        assert response.status == 403

    async def test_convert(self, client, add_user):
        member = await add_user("member", credits=100)

        response = await client.post(
            "/api/wallet/convert",
            json={"pair": "credit_to_diamond", "amount": "100"},
            headers=as_user(member),
        )

        assert response.status == 200
        body = await response.json()
        assert body["balances"]["credits"] == 0
        assert body["balances"]["diamonds"] == 9
        assert Decimal(body["quote"]["result"]) == Decimal("9")


class TestCalculatorRoutes:

    async def test_preset_scenario(self, client, add_user):
        admin = await add_user("admin", is_admin=True)

        response = await client.post(
            "/api/admin/calculator/binary",
            json={"preset": "1 x 11,960 both legs", "daily_cap": "100"},
            headers=as_user(admin),
        )

        assert response.status == 200
        result = (await response.json())["result"]
        assert result["cycles_completed"] == 1
        assert result["is_capped"] is True
        assert Decimal(result["actual_commission"]) == Decimal("100")
        assert "Lost to cap" in (await response.json())["summary"]

    async def test_unknown_preset(self, client, add_user):
        admin = await add_user("admin", is_admin=True)

        response = await client.post(
            "/api/admin/calculator/binary",
            json={"preset": "nope"},
            headers=as_user(admin),
        )

        assert response.status == 404

    async def test_invalid_input(self, client, add_user):
        admin = await add_user("admin", is_admin=True)

        response = await client.post(
            "/api/admin/calculator/binary",
            json={"left_leg_users": -1},
            headers=as_user(admin),
        )

        assert response.status == 400

    async def test_presets_listed(self, client, add_user):
        admin = await add_user("admin", is_admin=True)

        response = await client.get(
            "/api/admin/calculator/binary/presets", headers=as_user(admin)
        )

        assert response.status == 200
        assert len((await response.json())["presets"]) == 5


class TestCommissionQueueing:

    @pytest.fixture
    def sent(self, monkeypatch):
        calls = []
        monkeypatch.setattr(
            distribute_purchase_commissions, "send", lambda *args: calls.append(args)
        )
        monkeypatch.setattr(
            distribute_order_commissions, "send", lambda *args: calls.append(args)
        )
        return calls

    async def test_approval_enqueues_purchase_commissions(self, client, add_user, sent):
        admin = await add_user("admin", is_admin=True)
        buyer = await add_user("buyer")
        submitted = await client.post(
            "/api/purchases", json={"amount": "500", "credits": 10}, headers=as_user(buyer)
        )
        purchase_id = (await submitted.json())["purchase"]["id"]

        response = await client.post(
            f"/api/admin/purchases/{purchase_id}/approve", headers=as_user(admin)
        )

        assert response.status == 200
        body = await response.json()
        assert body["purchase"]["status"] == "approved"
        assert body["commissions_enqueued"] is True
        assert sent == [(purchase_id,)]

    async def test_rejected_approval_enqueues_nothing(self, client, add_user, sent):
        admin = await add_user("admin", is_admin=True)

        response = await client.post(
            "/api/admin/purchases/404/approve", headers=as_user(admin)
        )

        assert response.status == 404
        assert sent == []

    async def test_deferred_order_commissions(self, client, add_user, sent):
        admin = await add_user("admin", is_admin=True)

        response = await client.post(
            "/api/admin/orders/7/commissions?defer=true", headers=as_user(admin)
        )

        assert response.status == 202
        assert sent == [(7,)]

    async def test_broker_outage_leaves_commissions_for_retrigger(
        self, client, add_user, monkeypatch
    ):
        def unreachable(*args):
            raise redis.exceptions.ConnectionError("connection refused")

        monkeypatch.setattr(distribute_purchase_commissions, "send", unreachable)
        admin = await add_user("admin", is_admin=True)
        buyer = await add_user("buyer")
        submitted = await client.post(
            "/api/purchases", json={"amount": "500", "credits": 10}, headers=as_user(buyer)
        )
        purchase_id = (await submitted.json())["purchase"]["id"]

        approved = await client.post(
            f"/api/admin/purchases/{purchase_id}/approve", headers=as_user(admin)
        )
        first = await client.post(
            f"/api/admin/purchases/{purchase_id}/commissions", headers=as_user(admin)
        )
        second = await client.post(
            f"/api/admin/purchases/{purchase_id}/commissions", headers=as_user(admin)
        )

        assert approved.status == 200
        assert (await approved.json())["commissions_enqueued"] is False
        assert first.status == 200
        assert (await first.json())["skipped"] is False
        assert second.status == 200
        assert (await second.json())["skipped"] is True

    async def test_commissions_of_pending_purchase_conflict(self, client, add_user):
        admin = await add_user("admin", is_admin=True)
        buyer = await add_user("buyer")
        submitted = await client.post(
            "/api/purchases", json={"amount": "500", "credits": 10}, headers=as_user(buyer)
        )
        purchase_id = (await submitted.json())["purchase"]["id"]

        response = await client.post(
            f"/api/admin/purchases/{purchase_id}/commissions", headers=as_user(admin)
        )

        assert response.status == 409


class TestAdminDecisions:

    async def test_transfer_approval_must_be_boolean(self, client, add_user):
        admin = await add_user("admin", is_admin=True)
        target = await add_user("target")
        member = await add_user("member")
        created = await client.post(
            "/api/upline-transfers",
            json={"requested_upline_id": target},
            headers=as_user(member),
        )
        request_id = (await created.json())["request"]["id"]
        url = f"/api/admin/upline-transfers/{request_id}/process"

        invalid = await client.post(url, json={"approve": "false"}, headers=as_user(admin))
        rejected = await client.post(url, json={"approve": False}, headers=as_user(admin))

        assert invalid.status == 400
        assert rejected.status == 200
        assert (await rejected.json())["request"]["status"] == "rejected"

    async def test_payout_approval_must_be_boolean(self, client, add_user):
        admin = await add_user("admin", is_admin=True)

        response = await client.post(
            "/api/admin/payouts/1/process",
            json={"approve": "yes"},
            headers=as_user(admin),
        )

        assert response.status == 400
