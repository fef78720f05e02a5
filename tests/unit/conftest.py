"""
Shared fixtures for unit tests.

This module provides common fixtures used across multiple test modules:
- Alternate partner program configurations
- Pure calculators built on them
"""

from decimal import Decimal

import pytest

from partner_engine.config.partner_program import (
    DEFAULT_PROGRAM_CONFIG,
    PartnerLevel,
)
from partner_engine.services.partner.level_progression import (
    LevelProgressionCalculator,
)
from partner_engine.services.partner.tax_calculator import TaxCalculator

from tests.factories import build_config


@pytest.fixture
def scenario_config():
    """
    Config with level 2 at (5, 50 000) and level 3 at (20, 500 000).

    Returns:
        PartnerProgramConfig
    """
    levels = dict(DEFAULT_PROGRAM_CONFIG.levels)
    levels[2] = PartnerLevel(
        level_number=2, name="Бронза", commission_rate=Decimal("7"),
        min_referrals=5, min_team_volume=Decimal("50000"),
    )
    levels[3] = PartnerLevel(
        level_number=3, name="Серебро", commission_rate=Decimal("10"),
        min_referrals=20, min_team_volume=Decimal("500000"),
    )
    levels[4] = PartnerLevel(
        level_number=4, name="Золото", commission_rate=Decimal("12"),
        min_referrals=30, min_team_volume=Decimal("1000000"),
    )
    levels[5] = PartnerLevel(
        level_number=5, name="Платина", commission_rate=Decimal("15"),
        min_referrals=50, min_team_volume=Decimal("2000000"),
    )
    return build_config(levels=levels)


@pytest.fixture
def level_calculator():
    """LevelProgressionCalculator over the default config."""
    return LevelProgressionCalculator()


@pytest.fixture
def tax_calculator():
    """TaxCalculator over the default config."""
    return TaxCalculator()
