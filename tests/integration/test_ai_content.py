"""AI content generation with a mocked Anthropic client."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import anthropic
import httpx
import pytest
from sqlalchemy import select

from app.models import AICreditUsage, Wallet
from app.services.ai_content_service import AIContentService
from app.utils.exceptions import (
    InsufficientBalanceError,
    ServiceUnavailableError,
    ValidationError,
)


def fake_client(text="Generated copy"):
    client = MagicMock()
    client.messages.create = AsyncMock(
        return_value=SimpleNamespace(
            content=[SimpleNamespace(type="text", text=text)]
        )
    )
    return client


async def set_credits(session, user_id, credits):
    wallet = (
        await session.execute(select(Wallet).where(Wallet.user_id == user_id))
    ).scalar_one()
    wallet.ai_credits = credits
    await session.commit()
    return wallet


class TestAIContentService:

    async def test_generate_charges_credits(self, db_session, make_user):
        user = await make_user()
        wallet = await set_credits(db_session, user.id, 10)
        client = fake_client()

        result = await AIContentService(db_session, client=client).generate(
            user.id, "blog", "Write about spring"
        )

        assert result.content == "Generated copy"
        assert result.credits_used == 3
        assert result.credits_remaining == 7
        assert wallet.ai_credits == 7
        kwargs = client.messages.create.await_args.kwargs
        assert kwargs["messages"] == [{"role": "user", "content": "Write about spring"}]

        usage = (await db_session.execute(select(AICreditUsage))).scalar_one()
        assert usage.status == "success"
        assert usage.feature == "blog"

    async def test_provider_failure_refunds(self, db_session, make_user):
        user = await make_user()
        wallet = await set_credits(db_session, user.id, 5)
        client = fake_client()
        client.messages.create.side_effect = anthropic.APIConnectionError(
            request=httpx.Request("POST", "https://api.anthropic.com/v1/messages")
        )

        with pytest.raises(ServiceUnavailableError):
            await AIContentService(db_session, client=client).generate(
                user.id, "research", "Market trends"
            )

        assert wallet.ai_credits == 5
        usage = (await db_session.execute(select(AICreditUsage))).scalar_one()
        assert usage.status == "refunded"
        assert usage.error

    async def test_error_text_with_braces_is_refunded(self, db_session, make_user):
        user = await make_user()
        wallet = await set_credits(db_session, user.id, 10)
        client = fake_client()
        request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
        body = {"type": "error", "error": {"type": "overloaded_error"}}
        client.messages.create.side_effect = anthropic.APIStatusError(
            f"Error code: 529 - {body}",
            response=httpx.Response(529, request=request),
            body=body,
        )

        with pytest.raises(ServiceUnavailableError):
            await AIContentService(db_session, client=client).generate(
                user.id, "blog", "Write about spring"
            )

        assert wallet.ai_credits == 10
        usage = (await db_session.execute(select(AICreditUsage))).scalar_one()
        assert usage.status == "refunded"
        assert "overloaded_error" in usage.error

    async def test_insufficient_credits(self, db_session, make_user):
        user = await make_user()
        await set_credits(db_session, user.id, 1)
        client = fake_client()

        with pytest.raises(InsufficientBalanceError):
            await AIContentService(db_session, client=client).generate(
                user.id, "research", "Market trends"
            )

        client.messages.create.assert_not_awaited()

    async def test_unknown_feature(self, db_session, make_user):
        user = await make_user()

        with pytest.raises(ValidationError):
            await AIContentService(db_session, client=fake_client()).generate(
                user.id, "poetry", "Roses"
            )

    async def test_empty_prompt(self, db_session, make_user):
        user = await make_user()

        with pytest.raises(ValidationError):
            await AIContentService(db_session, client=fake_client()).generate(
                user.id, "text", "   "
            )

    async def test_unavailable_without_client(self, db_session, make_user):
        user = await make_user()
        await set_credits(db_session, user.id, 10)
        service = AIContentService(db_session)

        with pytest.raises(ServiceUnavailableError):
            await service.generate(user.id, "text", "hello")

        assert service.available is False
