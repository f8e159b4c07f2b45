"""
Binary network handlers.

Accounts, downlines, pending placements, genealogy, earnings and the
admin earnings calculator.
"""

from aiohttp import web
from pydantic import ValidationError as PydanticValidationError

from api.utils import json_ok, model_dict, path_int, query_int, read_json, require, to_int
from app.services.binary import (
    BinaryAccountManager,
    BinaryEnrollmentService,
    BinaryGenealogyService,
)
from app.utils.exceptions import NotFoundError, ValidationError
from calculator import (
    DEFAULT_SCENARIO,
    PRESET_SCENARIOS,
    BinaryCalculator,
    BinaryScenarioInput,
    format_scenario_result,
    get_preset,
)

NODE_FIELDS = (
    "id",
    "user_id",
    "account_number",
    "sponsor_id",
    "parent_id",
    "placement_leg",
    "left_child_id",
    "right_child_id",
    "left_volume",
    "right_volume",
    "total_cycles",
    "joined_at",
)

PENDING_FIELDS = (
    "id",
    "sponsor_user_id",
    "pending_user_id",
    "purchase_id",
    "amount",
    "status",
    "chosen_leg",
    "placed_node_id",
    "created_at",
)


def node_dict(node) -> dict:
    return model_dict(node, NODE_FIELDS)


async def list_accounts(request: web.Request) -> web.Response:
    accounts = await BinaryAccountManager(request["session"]).list_accounts(
        request["user_id"]
    )
    return json_ok({"accounts": [node_dict(a) for a in accounts]})


async def create_account(request: web.Request) -> web.Response:
    data = await read_json(request)
    downline = data.get("downline_node_id")
    node = await BinaryAccountManager(request["session"]).create_account(
        request["user_id"],
        mode=require(data, "mode"),
        leg=data.get("leg"),
        downline_node_id=to_int(downline, "downline_node_id") if downline else None,
    )
    return json_ok({"account": node_dict(node)}, status=201)


async def list_downlines(request: web.Request) -> web.Response:
    slots = await BinaryAccountManager(request["session"]).list_downlines(
        request["user_id"]
    )
    return json_ok(
        {
            "downlines": [
                {**node_dict(slot.node), "free_legs": slot.free_legs}
                for slot in slots
            ]
        }
    )


async def enroll(request: web.Request) -> web.Response:
    data = await read_json(request)
    sponsor = data.get("sponsor_user_id")
    result = await BinaryEnrollmentService(request["session"]).enroll(
        request["user_id"],
        sponsor_user_id=to_int(sponsor, "sponsor_user_id") if sponsor else None,
    )
    return json_ok(
        {
            "account": node_dict(result.node) if result.node else None,
            "pending": model_dict(result.pending, PENDING_FIELDS)
            if result.is_pending
            else None,
        },
        status=201 if result.created else 200,
    )


async def list_pending(request: web.Request) -> web.Response:
    pending = await BinaryEnrollmentService(request["session"]).list_pending(
        request["user_id"]
    )
    return json_ok({"pending": [model_dict(p, PENDING_FIELDS) for p in pending]})


async def resolve_pending(request: web.Request) -> web.Response:
    data = await read_json(request)
    node = await BinaryEnrollmentService(request["session"]).resolve_pending(
        path_int(request, "pending_id"),
        request["user_id"],
        require(data, "leg"),
    )
    return json_ok({"account": node_dict(node)})


async def cancel_pending(request: web.Request) -> web.Response:
    pending = await BinaryEnrollmentService(request["session"]).cancel_pending(
        path_int(request, "pending_id"), request["user_id"]
    )
    return json_ok({"pending": model_dict(pending, PENDING_FIELDS)})


async def get_tree(request: web.Request) -> web.Response:
    tree = await BinaryGenealogyService(request["session"]).get_tree(
        path_int(request, "node_id"),
        request["user_id"],
        depth=query_int(request, "depth", 3),
    )
    return json_ok({"tree": tree})


async def get_earnings(request: web.Request) -> web.Response:
    summary = await BinaryGenealogyService(request["session"]).get_earnings_summary(
        request["user_id"], days=query_int(request, "days", 30)
    )
    return json_ok(summary)


async def list_calculator_presets(request: web.Request) -> web.Response:
    presets = [
        {"name": name, "left_leg_users": left, "right_leg_users": right, "tier_price": price}
        for name, left, right, price in PRESET_SCENARIOS
    ]
    return json_ok({"presets": presets, "defaults": DEFAULT_SCENARIO})


async def calculate_binary_scenario(request: web.Request) -> web.Response:
    """Admin earnings simulator; a ``preset`` name seeds the inputs."""
    data = await read_json(request)
    base = DEFAULT_SCENARIO
    preset = data.pop("preset", None)
    if preset is not None:
        base = get_preset(preset)
        if base is None:
            raise NotFoundError(f"Unknown preset '{preset}'")
    try:
        inputs = BinaryScenarioInput.model_validate({**base.model_dump(), **data})
    except PydanticValidationError as e:
        raise ValidationError(str(e)) from e
    result = BinaryCalculator().calculate_scenario(inputs)
    return json_ok(
        {
            "inputs": inputs,
            "result": result,
            "summary": format_scenario_result(result),
        }
    )


def setup_routes(app: web.Application) -> None:
    app.router.add_get("/api/binary/accounts", list_accounts)
    app.router.add_post("/api/binary/accounts", create_account)
    app.router.add_get("/api/binary/downlines", list_downlines)
    app.router.add_post("/api/binary/enroll", enroll)
    app.router.add_get("/api/binary/pending", list_pending)
    app.router.add_post("/api/binary/pending/{pending_id}/resolve", resolve_pending)
    app.router.add_post("/api/binary/pending/{pending_id}/cancel", cancel_pending)
    app.router.add_get("/api/binary/tree/{node_id}", get_tree)
    app.router.add_get("/api/binary/earnings", get_earnings)
    app.router.add_get("/api/admin/calculator/binary/presets", list_calculator_presets)
    app.router.add_post("/api/admin/calculator/binary", calculate_binary_scenario)
