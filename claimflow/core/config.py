"""
Claims Lifecycle Configuration
Claims-specific settings layered on top of the application settings.
Source: https://docs.pydantic.dev/latest/concepts/pydantic_settings/
"""

from decimal import Decimal
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEPRECIATION_RATE_KEYS = frozenset(
    {"acv_payment", "other_payment", "approved_supplement", "tax"}
)


class ClaimsSettings(BaseSettings):
    """
    Claims lifecycle configuration settings.

    All values are read from the environment with the CLAIMS_ prefix,
    e.g. CLAIMS_DEPRECIATION_ACV_RATE=0.3.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_prefix="CLAIMS_",
    )

    # =========================================================================
    # Claim Numbering
    # =========================================================================
    CLAIM_NUMBER_PREFIX: str = Field(
        default="CLM",
        min_length=1,
        max_length=10,
        description="Prefix for generated claim numbers (CLM-2026-000001)",
    )

    # =========================================================================
    # Listing
    # =========================================================================
    DEFAULT_PAGE_SIZE: int = Field(default=20, ge=1, le=100)
    MAX_PAGE_SIZE: int = Field(default=100, ge=1, le=500)

    # =========================================================================
    # Depreciation Draft Rates
    # =========================================================================
    DEPRECIATION_ACV_RATE: Decimal = Field(
        default=Decimal("0.25"),
        ge=0,
        le=1,
        description="Depreciation rate applied to ACV payments",
    )
    DEPRECIATION_OTHER_PAYMENT_RATE: Decimal = Field(
        default=Decimal("0.15"),
        ge=0,
        le=1,
        description="Depreciation rate applied to every non-ACV payment",
    )
    DEPRECIATION_SUPPLEMENT_RATE: Decimal = Field(
        default=Decimal("0.20"),
        ge=0,
        le=1,
        description="Depreciation rate applied to approved supplements",
    )
    DEPRECIATION_TAX_RATE: Decimal = Field(
        default=Decimal("0.08"),
        ge=0,
        le=1,
        description="Tax rate applied to (subtotal - depreciation)",
    )
    DEPRECIATION_CARRIER_OVERRIDES: dict[str, dict[str, Decimal]] = Field(
        default_factory=dict,
        description=(
            "Per-carrier rate overrides as JSON, keyed by carrier name, e.g. "
            '{"State Farm": {"acv_payment": "0.30"}}'
        ),
    )

    @field_validator("DEPRECIATION_CARRIER_OVERRIDES")
    @classmethod
    def validate_carrier_overrides(
        cls, v: dict[str, dict[str, Decimal]]
    ) -> dict[str, dict[str, Decimal]]:
        """Reject unknown rate keys and rates outside [0, 1]."""
        normalized: dict[str, dict[str, Decimal]] = {}
        for carrier, rates in v.items():
            unknown = set(rates) - DEPRECIATION_RATE_KEYS
            if unknown:
                raise ValueError(
                    f"Unknown depreciation rate keys for {carrier}: {sorted(unknown)}"
                )
            for key, rate in rates.items():
                if rate < 0 or rate > 1:
                    raise ValueError(
                        f"Depreciation rate {key} for {carrier} must be between 0 and 1"
                    )
            normalized[carrier.strip().lower()] = dict(rates)
        return normalized

    def carrier_overrides(self, carrier: Optional[str]) -> dict[str, Decimal]:
        """Get rate overrides configured for a carrier (case-insensitive)."""
        if not carrier:
            return {}
        return self.DEPRECIATION_CARRIER_OVERRIDES.get(carrier.strip().lower(), {})


# Singleton instance
_claims_settings: Optional[ClaimsSettings] = None


def get_claims_settings() -> ClaimsSettings:
    """
    Get cached claims settings instance.

    Returns:
        ClaimsSettings instance
    """
    global _claims_settings
    if _claims_settings is None:
        _claims_settings = ClaimsSettings()
    return _claims_settings
