"""
Package purchase handlers.

Members submit paid purchases; admins approve (which enrolls the buyer
and queues purchase commissions) or reject them.
"""

from aiohttp import web

from api.handlers.binary import PENDING_FIELDS, node_dict
from api.utils import (
    json_ok,
    model_dict,
    page_limit,
    path_int,
    read_json,
    require,
    to_decimal,
    to_int,
)
from app.models.enums import PurchaseStatus
from app.services.binary import BinaryPurchaseService
from app.services.purchase_commission_service import PurchaseCommissionService
from jobs.broker import broker  # noqa: F401  (sets the dramatiq broker)
from jobs.tasks.commissions import enqueue_purchase_commissions

PURCHASE_FIELDS = (
    "id",
    "user_id",
    "sponsor_user_id",
    "amount",
    "credits_received",
    "status",
    "is_first_purchase",
    "admin_notes",
    "approved_by",
    "approved_at",
    "created_at",
)


async def submit_purchase(request: web.Request) -> web.Response:
    data = await read_json(request)
    sponsor = data.get("sponsor_user_id")
    purchase = await BinaryPurchaseService(request["session"]).submit_purchase(
        request["user_id"],
        amount=to_decimal(require(data, "amount")),
        credits=to_int(data.get("credits", 0), "credits"),
        sponsor_user_id=to_int(sponsor, "sponsor_user_id") if sponsor else None,
    )
    return json_ok({"purchase": model_dict(purchase, PURCHASE_FIELDS)}, status=201)


async def list_purchases(request: web.Request) -> web.Response:
    purchases = await BinaryPurchaseService(request["session"]).list_purchases(
        status=request.query.get("status", PurchaseStatus.PENDING),
        limit=page_limit(request),
    )
    return json_ok({"purchases": [model_dict(p, PURCHASE_FIELDS) for p in purchases]})


async def approve_purchase(request: web.Request) -> web.Response:
    """
    Approve a purchase.

    Commissions are paid by a worker once the approval is committed.
    When the queue is down they are paid through the commissions route.
    """
    data = await read_json(request)
    result = await BinaryPurchaseService(request["session"]).approve_purchase(
        path_int(request, "purchase_id"),
        request["user_id"],
        notes=data.get("notes"),
    )
    purchase = result.purchase
    enqueued = enqueue_purchase_commissions(purchase.id)
    return json_ok(
        {
            "purchase": model_dict(purchase, PURCHASE_FIELDS),
            "account": node_dict(result.enrollment.node)
            if result.enrollment.node
            else None,
            "pending": model_dict(result.enrollment.pending, PENDING_FIELDS)
            if result.enrollment.is_pending
            else None,
            "split": result.split,
            "commissions_enqueued": enqueued,
        }
    )


async def pay_purchase_commissions(request: web.Request) -> web.Response:
    """Pay the commissions of an approved purchase now, at most once."""
    result = await PurchaseCommissionService(
        request["session"]
    ).distribute_for_purchase(path_int(request, "purchase_id"))
    if result is None:
        return json_ok({"skipped": True})
    return json_ok(
        {
            "skipped": False,
            "unilevel_total": result.unilevel.total_distributed,
            "stair_step_total": result.stair_step.total,
            "uplines_credited": result.uplines_credited,
        }
    )


async def reject_purchase(request: web.Request) -> web.Response:
    data = await read_json(request)
    purchase = await BinaryPurchaseService(request["session"]).reject_purchase(
        path_int(request, "purchase_id"),
        request["user_id"],
        notes=data.get("notes"),
    )
    return json_ok({"purchase": model_dict(purchase, PURCHASE_FIELDS)})


def setup_routes(app: web.Application) -> None:
    app.router.add_post("/api/purchases", submit_purchase)
    app.router.add_get("/api/admin/purchases", list_purchases)
    app.router.add_post("/api/admin/purchases/{purchase_id}/approve", approve_purchase)
    app.router.add_post("/api/admin/purchases/{purchase_id}/reject", reject_purchase)
    app.router.add_post(
        "/api/admin/purchases/{purchase_id}/commissions",
        pay_purchase_commissions,
    )
