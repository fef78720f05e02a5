"""
Partner program tables.

Single source of truth for partner levels, commission rates by upline depth
and tax withholding rates. Services receive a PartnerProgramConfig instance
at construction; DEFAULT_PROGRAM_CONFIG carries the production values.
"""

from decimal import Decimal
from types import MappingProxyType
from typing import Mapping

from pydantic import BaseModel, ConfigDict, Field, model_validator

from partner_engine.models.enums import TaxStatus

# Maximum upline depth tracked by the closure table and paid commissions
MAX_REFERRAL_DEPTH = 5

# Number of partner levels (tiers)
MAX_PARTNER_LEVEL = 5


class PartnerLevel(BaseModel):
    """Configuration of a single partner level (tier)."""

    model_config = ConfigDict(frozen=True)

    level_number: int = Field(..., ge=1, le=MAX_PARTNER_LEVEL)
    name: str = Field(..., min_length=1)
    commission_rate: Decimal = Field(
        ..., ge=0, le=100, description="Advertised commission rate, percent"
    )
    min_referrals: int = Field(..., ge=0, description="Direct referrals required")
    min_team_volume: Decimal = Field(
        ..., ge=0, description="Downline completed-transaction volume required"
    )


class PartnerProgramConfig(BaseModel):
    """
    Immutable partner program configuration.

    Attributes:
        levels: Partner levels keyed by level number (1..5)
        commission_rates_by_depth: Commission rate keyed by upline depth (1..5)
        tax_rates: Withholding rate keyed by tax status
    """

    model_config = ConfigDict(frozen=True)

    levels: Mapping[int, PartnerLevel]
    commission_rates_by_depth: Mapping[int, Decimal]
    tax_rates: Mapping[TaxStatus, Decimal]

    @model_validator(mode="after")
    def validate_tables(self) -> "PartnerProgramConfig":
        """Check table completeness and freeze the mappings."""
        expected = set(range(1, MAX_PARTNER_LEVEL + 1))
        if set(self.levels) != expected:
            raise ValueError(f"levels must define exactly {sorted(expected)}")
        for number, level in self.levels.items():
            if level.level_number != number:
                raise ValueError(
                    f"level key {number} does not match level_number "
                    f"{level.level_number}"
                )
        first = self.levels[1]
        if first.min_referrals != 0 or first.min_team_volume != 0:
            raise ValueError("level 1 must have zero thresholds")

        for depth, rate in self.commission_rates_by_depth.items():
            if not 1 <= depth <= MAX_REFERRAL_DEPTH:
                raise ValueError(f"commission depth {depth} outside 1..5")
            if not Decimal("0") <= rate <= Decimal("1"):
                raise ValueError(f"commission rate {rate} outside [0, 1]")

        if TaxStatus.INDIVIDUAL not in self.tax_rates:
            raise ValueError("tax_rates must define INDIVIDUAL")
        for status, rate in self.tax_rates.items():
            if not Decimal("0") <= rate <= Decimal("1"):
                raise ValueError(f"tax rate for {status} outside [0, 1]")

        object.__setattr__(self, "levels", MappingProxyType(dict(self.levels)))
        object.__setattr__(
            self,
            "commission_rates_by_depth",
            MappingProxyType(dict(self.commission_rates_by_depth)),
        )
        object.__setattr__(
            self, "tax_rates", MappingProxyType(dict(self.tax_rates))
        )
        return self

    def get_level(self, level_number: int) -> PartnerLevel:
        """Get level configuration by number."""
        return self.levels[level_number]

    def commission_rate_for_depth(self, depth: int) -> Decimal:
        """Commission rate for an upline depth (0 if not configured)."""
        return self.commission_rates_by_depth.get(depth, Decimal("0"))

    def tax_rate_for(self, tax_status: TaxStatus) -> Decimal:
        """Withholding rate for a tax status."""
        return self.tax_rates[tax_status]


DEFAULT_PROGRAM_CONFIG = PartnerProgramConfig(
    levels={
        1: PartnerLevel(
            level_number=1,
            name="Стартер",
            commission_rate=Decimal("5"),
            min_referrals=0,
            min_team_volume=Decimal("0"),
        ),
        2: PartnerLevel(
            level_number=2,
            name="Бронза",
            commission_rate=Decimal("7"),
            min_referrals=5,
            min_team_volume=Decimal("10000"),
        ),
        3: PartnerLevel(
            level_number=3,
            name="Серебро",
            commission_rate=Decimal("10"),
            min_referrals=15,
            min_team_volume=Decimal("50000"),
        ),
        4: PartnerLevel(
            level_number=4,
            name="Золото",
            commission_rate=Decimal("12"),
            min_referrals=30,
            min_team_volume=Decimal("150000"),
        ),
        5: PartnerLevel(
            level_number=5,
            name="Платина",
            commission_rate=Decimal("15"),
            min_referrals=50,
            min_team_volume=Decimal("500000"),
        ),
    },
    commission_rates_by_depth={
        1: Decimal("0.10"),  # 10% direct referrer
        2: Decimal("0.05"),
        3: Decimal("0.03"),
        4: Decimal("0.02"),
        5: Decimal("0.01"),
    },
    tax_rates={
        TaxStatus.INDIVIDUAL: Decimal("0.13"),
        TaxStatus.SELF_EMPLOYED: Decimal("0.04"),
        TaxStatus.ENTREPRENEUR: Decimal("0.06"),
        TaxStatus.COMPANY: Decimal("0.00"),  # company handles own taxes
    },
)
