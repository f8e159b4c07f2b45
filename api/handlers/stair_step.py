"""
Stair-step handlers.

Step configuration (admin), rank evaluation (admin), and the member's
leadership status and stair-step tree.
"""

from datetime import date

from aiohttp import web

from api.utils import json_ok, model_dict, path_int, query_int, read_json, require, to_int
from app.services.stair_step import (
    LeadershipService,
    RankManager,
    StairStepConfigManager,
)
from app.utils.exceptions import ValidationError

STEP_FIELDS = (
    "id",
    "step_number",
    "step_name",
    "commission_percentage",
    "sales_quota",
    "months_to_qualify",
    "breakaway_percentage",
    "qualification_type",
    "active",
)


def _month(data: dict) -> date | None:
    raw = data.get("month")
    if raw is None:
        return None
    try:
        return date.fromisoformat(raw)
    except (TypeError, ValueError) as e:
        raise ValidationError("'month' must be an ISO date") from e


async def list_steps(request: web.Request) -> web.Response:
    active_only = request.query.get("active_only", "").lower() in ("1", "true")
    steps = await StairStepConfigManager(request["session"]).list_steps(
        active_only=active_only
    )
    return json_ok({"steps": [model_dict(s, STEP_FIELDS) for s in steps]})


async def add_step(request: web.Request) -> web.Response:
    data = await read_json(request)
    kwargs = {
        key: data[key]
        for key in (
            "step_number",
            "step_name",
            "months_to_qualify",
            "breakaway_percentage",
            "qualification_type",
            "active",
        )
        if key in data
    }
    step = await StairStepConfigManager(request["session"]).add_step(
        commission_percentage=require(data, "commission_percentage"),
        sales_quota=require(data, "sales_quota"),
        **kwargs,
    )
    return json_ok({"step": model_dict(step, STEP_FIELDS)}, status=201)


async def update_step(request: web.Request) -> web.Response:
    data = await read_json(request)
    step = await StairStepConfigManager(request["session"]).update_step(
        path_int(request, "step_id"), **data
    )
    return json_ok({"step": model_dict(step, STEP_FIELDS)})


async def toggle_step(request: web.Request) -> web.Response:
    step = await StairStepConfigManager(request["session"]).toggle_step(
        path_int(request, "step_id")
    )
    return json_ok({"step": model_dict(step, STEP_FIELDS)})


async def get_status(request: web.Request) -> web.Response:
    status = await LeadershipService(request["session"]).get_status(request["user_id"])
    return json_ok(status)


async def get_tree(request: web.Request) -> web.Response:
    tree = await LeadershipService(request["session"]).get_tree(
        request["user_id"], depth=query_int(request, "depth", 7)
    )
    return json_ok({"tree": tree})


async def evaluate_ranks(request: web.Request) -> web.Response:
    data = await read_json(request)
    manager = RankManager(request["session"])
    month = _month(data)
    if data.get("user_id") is not None:
        result = await manager.evaluate(to_int(data["user_id"], "user_id"), month)
        return json_ok(
            {
                "user_id": result.user_id,
                "month": result.month,
                "qualified_step": result.qualified_step,
                "current_step": result.current_step,
                "qualification_count": result.qualification_count,
                "is_fixed": result.is_fixed,
            }
        )
    qualified = await manager.evaluate_all(month)
    return json_ok({"qualified": qualified})


async def revert_ranks(request: web.Request) -> web.Response:
    data = await read_json(request)
    reverted = await RankManager(request["session"]).process_monthly_reversion(
        _month(data)
    )
    return json_ok({"reverted": reverted})


def setup_routes(app: web.Application) -> None:
    app.router.add_get("/api/admin/stair-steps", list_steps)
    app.router.add_post("/api/admin/stair-steps", add_step)
    app.router.add_patch("/api/admin/stair-steps/{step_id}", update_step)
    app.router.add_post("/api/admin/stair-steps/{step_id}/toggle", toggle_step)
    app.router.add_post("/api/admin/ranks/evaluate", evaluate_ranks)
    app.router.add_post("/api/admin/ranks/revert", revert_ranks)
    app.router.add_get("/api/stair-step/status", get_status)
    app.router.add_get("/api/stair-step/tree", get_tree)
