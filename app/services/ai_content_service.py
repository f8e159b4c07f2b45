"""
AI content service.

Metered content generation through the Anthropic Messages API. Credits
are charged before the provider call and refunded when it fails.
"""

from dataclasses import dataclass

import anthropic
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.business_constants import AI_FEATURE_COSTS
from app.config.operational_constants import AI_MAX_TOKENS, AI_REQUEST_TIMEOUT
from app.config.settings import settings
from app.models.ai_usage import AICreditUsage
from app.models.enums import AIUsageStatus
from app.repositories.wallet_repository import (
    AICreditUsageRepository,
    WalletRepository,
)
from app.services.base_service import BaseService, transaction
from app.utils.exceptions import (
    InsufficientBalanceError,
    NotFoundError,
    ServiceUnavailableError,
    ValidationError,
)

SYSTEM_PROMPTS = {
    "text": "You write clear, friendly marketing copy for an affiliate business.",
    "ads": "You write short, high-converting ad copy. Return a few variants.",
    "blog": "You write well-structured blog posts with headings.",
    "newsletter": "You write engaging email newsletters with a subject line.",
    "research": "You research a topic and summarize key findings as bullet points.",
}

MAX_PROMPT_LENGTH = 4000


@dataclass
class GenerationResult:
    content: str
    feature: str
    credits_used: int
    credits_remaining: int


class AIContentService(BaseService):
    """Generates content and meters AI credits."""

    def __init__(
        self,
        session: AsyncSession,
        client: anthropic.AsyncAnthropic | None = None,
    ) -> None:
        super().__init__(session)
        self.wallet_repo = WalletRepository(session)
        self.usage_repo = AICreditUsageRepository(session)
        self.client = client
        if self.client is None and settings.anthropic_api_key:
            self.client = anthropic.AsyncAnthropic(
                api_key=settings.anthropic_api_key,
                timeout=AI_REQUEST_TIMEOUT,
            )

    @property
    def available(self) -> bool:
        return self.client is not None

    async def generate(
        self, user_id: int, feature: str, prompt: str
    ) -> GenerationResult:
        """
        Generate content for a feature.

        Args:
            user_id: Caller (pays in AI credits)
            feature: One of AI_FEATURE_COSTS
            prompt: User prompt

        Returns:
            GenerationResult with the generated text

        Raises:
            ServiceUnavailableError: No provider configured, or provider failed
            ValidationError: Unknown feature or bad prompt
            InsufficientBalanceError: Not enough AI credits
        """
        if not self.available:
            raise ServiceUnavailableError("AI content generation is not configured")

        cost = AI_FEATURE_COSTS.get(feature)
        if cost is None:
            raise ValidationError(f"Unknown AI feature: {feature}")
        prompt = (prompt or "").strip()
        if not prompt:
            raise ValidationError("Prompt must not be empty")
        if len(prompt) > MAX_PROMPT_LENGTH:
            raise ValidationError(
                f"Prompt is too long (max {MAX_PROMPT_LENGTH} characters)"
            )

        usage, remaining = await self._charge(user_id, feature, cost)

        try:
            content = await self._call_provider(feature, prompt)
        except anthropic.APIError as e:
            error = f"{type(e).__name__}: {e}"
            self.logger.error(
                "AI provider request failed",
                extra={"user_id": user_id, "feature": feature, "error": error},
            )
            await self._refund(usage.id, error)
            raise ServiceUnavailableError("AI provider request failed") from e

        return GenerationResult(
            content=content,
            feature=feature,
            credits_used=cost,
            credits_remaining=remaining,
        )

    @transaction
    async def _charge(
        self, user_id: int, feature: str, cost: int
    ) -> tuple[AICreditUsage, int]:
        wallet = await self.wallet_repo.get_or_create(user_id, for_update=True)
        if wallet.ai_credits < cost:
            raise InsufficientBalanceError(
                f"Not enough AI credits: {wallet.ai_credits} < {cost}"
            )
        wallet.ai_credits -= cost
        usage = await self.usage_repo.create(
            user_id=user_id,
            feature=feature,
            credits_used=cost,
            status=AIUsageStatus.SUCCESS,
        )
        self.logger.info(
            "AI credits charged",
            extra={"user_id": user_id, "feature": feature, "credits": cost},
        )
        return usage, wallet.ai_credits

    @transaction
    async def _refund(self, usage_id: int, error: str) -> None:
        usage = await self.usage_repo.get_for_update(usage_id)
        if usage is None:
            raise NotFoundError("AI usage record not found")
        wallet = await self.wallet_repo.get_or_create(usage.user_id, for_update=True)
        wallet.ai_credits += usage.credits_used
        usage.status = AIUsageStatus.REFUNDED
        usage.error = error[:1000]
        await self.session.flush()
        self.logger.info(
            "AI credits refunded",
            extra={"user_id": usage.user_id, "credits": usage.credits_used},
        )

    async def _call_provider(self, feature: str, prompt: str) -> str:
        response = await self.client.messages.create(
            model=settings.anthropic_model,
            max_tokens=AI_MAX_TOKENS,
            system=SYSTEM_PROMPTS.get(feature, SYSTEM_PROMPTS["text"]),
            messages=[{"role": "user", "content": prompt}],
        )
        return "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )
