"""
Referral handlers.

Admin commission triggers and upline transfer requests.
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
from app.services.referral import (
    OrderCommissionProcessor,
    UnilevelDistributor,
    UplineTransferService,
)
from jobs.broker import broker  # noqa: F401  (sets the dramatiq broker)
from jobs.tasks.commissions import distribute_order_commissions

TRANSFER_FIELDS = (
    "id",
    "user_id",
    "current_upline_id",
    "requested_upline_id",
    "reason",
    "status",
    "admin_notes",
    "processed_by",
    "processed_at",
    "created_at",
)


async def distribute_unilevel(request: web.Request) -> web.Response:
    data = await read_json(request)
    purchase_id = data.get("purchase_id")
    result = await UnilevelDistributor(request["session"]).distribute(
        to_int(require(data, "buyer_id"), "buyer_id"),
        to_decimal(require(data, "amount")),
        purchase_id=to_int(purchase_id, "purchase_id") if purchase_id else None,
    )
    return json_ok(
        {
            "count": result.commissions_count,
            "total": result.total_distributed,
        }
    )


async def distribute_order(request: web.Request) -> web.Response:
    """Pay an order's commissions now, or hand them to a worker with ?defer=true."""
    order_id = path_int(request, "order_id")
    if request.query.get("defer", "").lower() in ("1", "true"):
        distribute_order_commissions.send(order_id)
        return json_ok({"order_id": order_id, "enqueued": True}, status=202)

    result = await OrderCommissionProcessor(request["session"]).process_order(order_id)
    return json_ok(
        {
            "skipped": result.skipped,
            "count": result.commissions_count,
            "total": result.total_distributed,
        }
    )


async def request_transfer(request: web.Request) -> web.Response:
    data = await read_json(request)
    transfer = await UplineTransferService(request["session"]).request_transfer(
        request["user_id"],
        to_int(require(data, "requested_upline_id"), "requested_upline_id"),
        reason=data.get("reason"),
    )
    return json_ok({"request": model_dict(transfer, TRANSFER_FIELDS)}, status=201)


async def list_my_transfers(request: web.Request) -> web.Response:
    requests = await UplineTransferService(request["session"]).list_for_user(
        request["user_id"]
    )
    return json_ok({"requests": [model_dict(r, TRANSFER_FIELDS) for r in requests]})


async def list_transfers(request: web.Request) -> web.Response:
    requests = await UplineTransferService(request["session"]).list_requests(
        status=request.query.get("status"), limit=page_limit(request)
    )
    return json_ok({"requests": [model_dict(r, TRANSFER_FIELDS) for r in requests]})


async def process_transfer(request: web.Request) -> web.Response:
    data = await read_json(request)
    transfer = await UplineTransferService(request["session"]).process(
        path_int(request, "request_id"),
        request["user_id"],
        approve=to_bool(require(data, "approve"), "approve"),
        notes=data.get("notes"),
    )
    return json_ok({"request": model_dict(transfer, TRANSFER_FIELDS)})


def setup_routes(app: web.Application) -> None:
    app.router.add_post("/api/admin/commissions/unilevel", distribute_unilevel)
    app.router.add_post("/api/admin/orders/{order_id}/commissions", distribute_order)
    app.router.add_post("/api/upline-transfers", request_transfer)
    app.router.add_get("/api/upline-transfers", list_my_transfers)
    app.router.add_get("/api/admin/upline-transfers", list_transfers)
    app.router.add_post("/api/admin/upline-transfers/{request_id}/process", process_transfer)
