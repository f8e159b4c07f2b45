"""
System handlers: health, user registration, app settings and AI content.
"""

from aiohttp import web
from sqlalchemy import text

from api.utils import json_ok, model_dict, read_json, require, to_int
from app.services.ai_content_service import AIContentService
from app.services.app_settings_service import AppSettingsService
from app.services.user_service import UserService
from app.utils.exceptions import ValidationError

USER_FIELDS = (
    "id",
    "username",
    "email",
    "full_name",
    "referral_code",
    "referred_by_id",
    "created_at",
)


async def health(request: web.Request) -> web.Response:
    try:
        await request["session"].execute(text("SELECT 1"))
    except Exception as e:
        return web.json_response(
            {"status": "unhealthy", "database": str(e)}, status=503
        )
    return web.json_response({"status": "healthy", "database": "ok"})


async def register_user(request: web.Request) -> web.Response:
    data = await read_json(request)
    referred_by = data.get("referred_by_id")
    user = await UserService(request["session"]).register_user(
        require(data, "username"),
        referred_by_id=to_int(referred_by, "referred_by_id") if referred_by else None,
        email=data.get("email"),
        full_name=data.get("full_name"),
    )
    return json_ok({"user": model_dict(user, USER_FIELDS)}, status=201)


async def get_settings(request: web.Request) -> web.Response:
    values = await AppSettingsService(request["session"]).get_all()
    return json_ok({"settings": values})


async def update_settings(request: web.Request) -> web.Response:
    data = await read_json(request)
    values = require(data, "values")
    if not isinstance(values, dict):
        raise ValidationError("'values' must be an object")
    stored = await AppSettingsService(request["session"]).set_many(
        values, admin_id=request["user_id"]
    )
    return json_ok({"settings": stored})


async def generate_content(request: web.Request) -> web.Response:
    data = await read_json(request)
    result = await AIContentService(request["session"]).generate(
        request["user_id"], require(data, "feature"), require(data, "prompt")
    )
    return json_ok(
        {
            "content": result.content,
            "feature": result.feature,
            "credits_used": result.credits_used,
            "credits_remaining": result.credits_remaining,
        }
    )


def setup_routes(app: web.Application) -> None:
    app.router.add_get("/health", health)
    app.router.add_post("/api/users", register_user)
    app.router.add_get("/api/admin/settings", get_settings)
    app.router.add_put("/api/admin/settings", update_settings)
    app.router.add_post("/api/ai/generate", generate_content)
