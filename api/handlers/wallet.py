"""
Wallet handlers.

Balances, conversions, cash PIN, withdrawals, ledger and earnings
consolidation; admin deposits and payout processing.
"""

from aiohttp import web

from api.utils import (
    json_ok,
    model_dict,
    page_limit,
    path_int,
    read_json,
    require,
    to_bool,
    to_decimal,
    to_int,
)
from app.models.enums import PayoutStatus
from app.services.wallet import (
    CashWalletService,
    ConversionService,
    EarningsConsolidationService,
    wallet_balances,
)

CASH_TX_FIELDS = (
    "id",
    "transaction_type",
    "amount",
    "balance_after",
    "reference_id",
    "description",
    "created_at",
)

PAYOUT_FIELDS = (
    "id",
    "user_id",
    "amount",
    "payout_account",
    "status",
    "admin_notes",
    "processed_by",
    "processed_at",
    "created_at",
)


async def get_balances(request: web.Request) -> web.Response:
    balances = await CashWalletService(request["session"]).get_balances(
        request["user_id"]
    )
    return json_ok(balances)


async def preview_conversion(request: web.Request) -> web.Response:
    data = await read_json(request)
    quote = await ConversionService(request["session"]).preview(
        require(data, "pair"), to_decimal(require(data, "amount"))
    )
    return json_ok({"quote": quote})


async def convert(request: web.Request) -> web.Response:
    data = await read_json(request)
    result = await ConversionService(request["session"]).convert(
        request["user_id"],
        require(data, "pair"),
        to_decimal(require(data, "amount")),
    )
    return json_ok({"quote": result.quote, "balances": wallet_balances(result.wallet)})


async def set_pin(request: web.Request) -> web.Response:
    data = await read_json(request)
    await CashWalletService(request["session"]).set_pin(
        request["user_id"], str(require(data, "pin")), data.get("current_pin")
    )
    return json_ok({"pin_set": True})


async def request_withdrawal(request: web.Request) -> web.Response:
    data = await read_json(request)
    payout = await CashWalletService(request["session"]).request_withdrawal(
        request["user_id"],
        to_decimal(require(data, "amount")),
        str(require(data, "pin")),
        require(data, "payout_account"),
    )
    return json_ok({"payout": model_dict(payout, PAYOUT_FIELDS)}, status=201)


async def history(request: web.Request) -> web.Response:
    entries = await CashWalletService(request["session"]).history(
        request["user_id"], limit=page_limit(request)
    )
    return json_ok({"transactions": [model_dict(e, CASH_TX_FIELDS) for e in entries]})


async def earnings_summary(request: web.Request) -> web.Response:
    summary = await EarningsConsolidationService(request["session"]).summary(
        request["user_id"]
    )
    return json_ok(summary)


async def consolidate(request: web.Request) -> web.Response:
    data = await read_json(request)
    result = await EarningsConsolidationService(request["session"]).consolidate(
        request["user_id"], sources=data.get("sources")
    )
    return json_ok(
        {
            "total": result.total,
            "by_source": result.by_source,
            "transaction": model_dict(result.transaction, CASH_TX_FIELDS),
        }
    )


async def admin_deposit(request: web.Request) -> web.Response:
    data = await read_json(request)
    entry = await CashWalletService(request["session"]).deposit(
        to_int(require(data, "user_id"), "user_id"),
        to_decimal(require(data, "amount")),
        admin_id=request["user_id"],
        description=data.get("description"),
    )
    return json_ok({"transaction": model_dict(entry, CASH_TX_FIELDS)}, status=201)


async def list_payouts(request: web.Request) -> web.Response:
    payouts = await CashWalletService(request["session"]).list_payouts(
        status=request.query.get("status", PayoutStatus.PENDING),
        limit=page_limit(request),
    )
    return json_ok({"payouts": [model_dict(p, PAYOUT_FIELDS) for p in payouts]})


async def process_payout(request: web.Request) -> web.Response:
    data = await read_json(request)
    payout = await CashWalletService(request["session"]).process_payout(
        path_int(request, "payout_id"),
        request["user_id"],
        approve=to_bool(require(data, "approve"), "approve"),
        notes=data.get("notes"),
    )
    return json_ok({"payout": model_dict(payout, PAYOUT_FIELDS)})


def setup_routes(app: web.Application) -> None:
    app.router.add_get("/api/wallet", get_balances)
    app.router.add_post("/api/wallet/convert/preview", preview_conversion)
    app.router.add_post("/api/wallet/convert", convert)
    app.router.add_post("/api/wallet/pin", set_pin)
    app.router.add_post("/api/wallet/withdrawals", request_withdrawal)
    app.router.add_get("/api/wallet/history", history)
    app.router.add_get("/api/wallet/earnings", earnings_summary)
    app.router.add_post("/api/wallet/earnings/consolidate", consolidate)
    app.router.add_post("/api/admin/wallet/deposits", admin_deposit)
    app.router.add_get("/api/admin/payouts", list_payouts)
    app.router.add_post("/api/admin/payouts/{payout_id}/process", process_payout)
