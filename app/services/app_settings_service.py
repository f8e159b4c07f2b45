"""
App settings service.

Typed, defaulted access to the admin-tunable ``app_settings`` rows and
validated bulk updates.
"""

from decimal import Decimal, InvalidOperation
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.business_constants import (
    BINARY_DEFAULTS,
    CASH_DEFAULTS,
    CONVERSION_DEFAULTS,
    UNILEVEL_DEFAULTS,
    UNILEVEL_DEPTH,
)
from app.repositories.app_setting_repository import AppSettingRepository
from app.services.base_service import BaseService, transaction
from app.utils.exceptions import ValidationError


ALL_DEFAULTS: dict[str, Any] = {
    **BINARY_DEFAULTS,
    **UNILEVEL_DEFAULTS,
    **CONVERSION_DEFAULTS,
    **CASH_DEFAULTS,
}

_TRUE_VALUES = ("true", "1", "yes", "on")
_FALSE_VALUES = ("false", "0", "no", "off")

# Values that must stay within [0, 100]
_PERCENT_KEYS = frozenset(
    key for key in ALL_DEFAULTS
    if key.endswith("_percent") or key == "binary_admin_safety_net"
)

# Values that must be strictly positive
_POSITIVE_KEYS = frozenset(
    key for key in ALL_DEFAULTS
    if key.endswith("_rate")
    or key in ("binary_cycle_volume", "diamond_base_price",
               "binary_max_accounts_per_user")
)


def parse_value(raw: Any, default: Any) -> Any:
    """
    Convert a raw setting to the type of its default.

    Args:
        raw: Stored (or submitted) value
        default: Default value defining the target type

    Returns:
        Parsed value

    Raises:
        ValueError: If the value cannot be converted
    """
    if isinstance(default, bool):
        if isinstance(raw, bool):
            return raw
        text = str(raw).strip().lower()
        if text in _TRUE_VALUES:
            return True
        if text in _FALSE_VALUES:
            return False
        raise ValueError(f"not a boolean: {raw!r}")
    if isinstance(default, int):
        return int(str(raw).strip())
    try:
        value = Decimal(str(raw).strip())
    except InvalidOperation as e:
        raise ValueError(f"not a number: {raw!r}") from e
    if not value.is_finite():
        raise ValueError(f"not a finite number: {raw!r}")
    return value


def validate_setting(key: str, value: Any) -> Any:
    """
    Parse and range-check one submitted setting.

    Raises:
        ValidationError: Unknown key, wrong type or out of range
    """
    if key not in ALL_DEFAULTS:
        raise ValidationError(f"Unknown setting: {key}")

    try:
        parsed = parse_value(value, ALL_DEFAULTS[key])
    except ValueError as e:
        raise ValidationError(f"Invalid value for {key}: {e}") from e

    if isinstance(parsed, bool):
        return parsed
    if parsed < 0:
        raise ValidationError(f"{key} must not be negative")
    if key in _PERCENT_KEYS and parsed > 100:
        raise ValidationError(f"{key} must not exceed 100")
    if key in _POSITIVE_KEYS and parsed <= 0:
        raise ValidationError(f"{key} must be positive")
    return parsed


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class BinarySettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    join_amount: Decimal = Field(..., ge=0)
    cycle_volume: Decimal = Field(..., gt=0)
    cycle_commission: Decimal = Field(..., ge=0)
    daily_cap: Decimal = Field(..., ge=0)
    admin_safety_net: Decimal = Field(..., ge=0, le=100)
    auto_replenish_enabled: bool
    auto_replenish_percent: Decimal = Field(..., ge=0, le=100)
    max_accounts_per_user: int = Field(..., gt=0)


class ConversionSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    credit_to_diamond_rate: Decimal = Field(..., gt=0)
    diamond_to_credit_rate: Decimal = Field(..., gt=0)
    ai_credit_to_cash_rate: Decimal = Field(..., gt=0)
    ai_credit_to_diamond_rate: Decimal = Field(..., gt=0)
    ai_credit_to_game_credit_rate: Decimal = Field(..., gt=0)
    diamond_base_price: Decimal = Field(..., gt=0)
    fee_percent: Decimal = Field(..., ge=0, le=100)
    enabled: dict[str, bool] = Field(default_factory=dict)

    def is_enabled(self, pair: str) -> bool:
        """Whether conversion pair (e.g. ``credit_to_diamond``) is on."""
        return self.enabled.get(pair, True)


class CashSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    min_withdrawal: Decimal = Field(..., ge=0)


class AppSettingsService(BaseService):
    """Reads and updates admin-tunable settings."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.repository = AppSettingRepository(session)

    async def _load(self, defaults: dict[str, Any]) -> dict[str, Any]:
        raw_values = await self.repository.get_values(list(defaults))
        values: dict[str, Any] = {}
        for key, default in defaults.items():
            raw = raw_values.get(key)
            if raw is None or raw == "":
                values[key] = default
                continue
            try:
                values[key] = validate_setting(key, raw)
            except ValidationError:
                self.logger.warning(
                    f"Invalid value for setting {key}, using default",
                    extra={"key": key, "value": raw, "default": str(default)},
                )
                values[key] = default
        return values

    async def get_all(self) -> dict[str, Any]:
        """Every known setting with defaults applied."""
        return await self._load(ALL_DEFAULTS)

    async def get_binary_settings(self) -> BinarySettings:
        v = await self._load(BINARY_DEFAULTS)
        return BinarySettings(
            join_amount=v["binary_join_amount"],
            cycle_volume=v["binary_cycle_volume"],
            cycle_commission=v["binary_cycle_commission"],
            daily_cap=v["binary_daily_cap"],
            admin_safety_net=v["binary_admin_safety_net"],
            auto_replenish_enabled=v["binary_auto_replenish_enabled"],
            auto_replenish_percent=v["binary_auto_replenish_percent"],
            max_accounts_per_user=v["binary_max_accounts_per_user"],
        )

    async def get_unilevel_rates(self) -> dict[int, Decimal]:
        """Unilevel percent per level (1..7)."""
        v = await self._load(UNILEVEL_DEFAULTS)
        return {
            level: v[f"unilevel_level_{level}_percent"]
            for level in range(1, UNILEVEL_DEPTH + 1)
        }

    async def get_conversion_settings(self) -> ConversionSettings:
        v = await self._load(CONVERSION_DEFAULTS)
        return ConversionSettings(
            credit_to_diamond_rate=v["credit_to_diamond_rate"],
            diamond_to_credit_rate=v["diamond_to_credit_rate"],
            ai_credit_to_cash_rate=v["ai_credit_to_cash_rate"],
            ai_credit_to_diamond_rate=v["ai_credit_to_diamond_conversion_rate"],
            ai_credit_to_game_credit_rate=v["ai_credit_to_game_credit_rate"],
            diamond_base_price=v["diamond_base_price"],
            fee_percent=v["conversion_fee_percent"],
            enabled={
                key.removeprefix("enable_"): value
                for key, value in v.items()
                if key.startswith("enable_")
            },
        )

    async def get_cash_settings(self) -> CashSettings:
        v = await self._load(CASH_DEFAULTS)
        return CashSettings(min_withdrawal=v["cash_min_withdrawal"])

    @transaction
    async def set_many(
        self, values: dict[str, Any], admin_id: int | None = None
    ) -> dict[str, Any]:
        """
        Validate and store several settings at once.

        Either every value is stored or none is.

        Args:
            values: Mapping key -> new value
            admin_id: Admin performing the change

        Returns:
            Stored values (parsed)

        Raises:
            ValidationError: If any key or value is invalid
        """
        if not values:
            raise ValidationError("No settings given")

        parsed = {key: validate_setting(key, value) for key, value in values.items()}

        for key, value in parsed.items():
            await self.repository.upsert(
                key, _format_value(value), updated_by=admin_id
            )

        self.logger.info(
            "App settings updated",
            extra={"admin_id": admin_id, "keys": sorted(parsed)},
        )
        return parsed
