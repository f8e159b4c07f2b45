"""
Stair-step configuration manager.

Admin CRUD over the step ladder.
"""

from decimal import Decimal, InvalidOperation
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.config.business_constants import (
    DEFAULT_MONTHS_TO_QUALIFY,
    QualificationType,
)
from app.models.stair_step import StairStepConfig
from app.repositories.stair_step_repository import StairStepConfigRepository
from app.services.base_service import BaseService, transaction
from app.utils.exceptions import ConflictError, NotFoundError, ValidationError

EDITABLE_FIELDS = (
    "step_name",
    "commission_percentage",
    "sales_quota",
    "months_to_qualify",
    "breakaway_percentage",
    "qualification_type",
    "active",
)


def _to_decimal(field: str, value: Any) -> Decimal:
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValidationError(f"{field} must be a number") from e


def validate_step_fields(data: dict[str, Any]) -> dict[str, Any]:
    """
    Normalize and validate step fields.

    Raises:
        ValidationError: Out of range or malformed value
    """
    cleaned = dict(data)

    for field in ("commission_percentage", "breakaway_percentage"):
        if field in cleaned:
            value = _to_decimal(field, cleaned[field])
            if not Decimal("0") <= value <= Decimal("100"):
                raise ValidationError(f"{field} must be between 0 and 100")
            cleaned[field] = value

    if "sales_quota" in cleaned:
        quota = _to_decimal("sales_quota", cleaned["sales_quota"])
        if quota < 0:
            raise ValidationError("sales_quota must not be negative")
        cleaned["sales_quota"] = quota

    if "months_to_qualify" in cleaned:
        months = int(cleaned["months_to_qualify"])
        if months < 1:
            raise ValidationError("months_to_qualify must be at least 1")
        cleaned["months_to_qualify"] = months

    if "qualification_type" in cleaned:
        if cleaned["qualification_type"] not in QualificationType.ALL:
            raise ValidationError(
                f"Unknown qualification type: {cleaned['qualification_type']}"
            )

    if "step_name" in cleaned:
        name = (cleaned["step_name"] or "").strip()
        if not name:
            raise ValidationError("step_name must not be empty")
        cleaned["step_name"] = name

    return cleaned


class StairStepConfigManager(BaseService):
    """Manages the stair-step ladder."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.config_repo = StairStepConfigRepository(session)

    async def list_steps(self, active_only: bool = False) -> list[StairStepConfig]:
        return await self.config_repo.list_steps(active_only=active_only)

    @transaction
    async def add_step(
        self,
        commission_percentage: Decimal,
        sales_quota: Decimal,
        step_number: int | None = None,
        step_name: str | None = None,
        months_to_qualify: int = DEFAULT_MONTHS_TO_QUALIFY,
        breakaway_percentage: Decimal = Decimal("0"),
        qualification_type: str = QualificationType.PERSONAL,
        active: bool = True,
    ) -> StairStepConfig:
        """
        Add a step.

        Args:
            step_number: Defaults to the current maximum + 1
            step_name: Defaults to "Step N"

        Raises:
            ValidationError: Invalid values
            ConflictError: Step number taken
        """
        if step_number is None:
            step_number = await self.config_repo.max_step_number() + 1
        if step_number < 1:
            raise ValidationError("step_number must be at least 1")
        if await self.config_repo.get_by_step_number(step_number):
            raise ConflictError(f"Step {step_number} already exists")

        fields = validate_step_fields(
            {
                "step_name": step_name or f"Step {step_number}",
                "commission_percentage": commission_percentage,
                "sales_quota": sales_quota,
                "months_to_qualify": months_to_qualify,
                "breakaway_percentage": breakaway_percentage,
                "qualification_type": qualification_type,
            }
        )
        step = await self.config_repo.create(
            step_number=step_number, active=active, **fields
        )
        self.logger.info(
            "Stair step added",
            extra={"step_number": step_number, "rate": str(step.commission_percentage)},
        )
        return step

    @transaction
    async def update_step(self, step_id: int, **changes: Any) -> StairStepConfig:
        """
        Update editable fields of a step. The step number never changes.

        Raises:
            NotFoundError: Unknown step
            ValidationError: Invalid or immutable field
        """
        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValidationError(
                f"Cannot update fields: {', '.join(sorted(unknown))}"
            )

        step = await self.config_repo.get_for_update(step_id)
        if step is None:
            raise NotFoundError("Stair step not found")

        for field, value in validate_step_fields(changes).items():
            setattr(step, field, value)
        await self.session.flush()

        self.logger.info(
            "Stair step updated",
            extra={"step_id": step_id, "fields": sorted(changes)},
        )
        return step

    @transaction
    async def toggle_step(self, step_id: int) -> StairStepConfig:
        """Flip the active flag of a step."""
        step = await self.config_repo.get_for_update(step_id)
        if step is None:
            raise NotFoundError("Stair step not found")
        step.active = not step.active
        await self.session.flush()
        self.logger.info(
            "Stair step toggled",
            extra={"step_id": step_id, "active": step.active},
        )
        return step
