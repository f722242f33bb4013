"""BOQRecon configuration management.

Loads configuration from environment variables with sensible defaults.
The tolerance band and the unit-synonym table are the only tunable inputs
of the reconciliation core; everything else here is ambient.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path

from dotenv import load_dotenv

# Load .env file if present
load_dotenv()

DRAWING_UNITS = ("mm", "cm", "m")


@dataclass
class ReconciliationConfig:
    """Conflict detection and row validation thresholds."""

    tolerance: Decimal = Decimal("0.02")  # ±2% band around the drawing area
    high_severity_percent: Decimal = Decimal("5")
    amount_tolerance: Decimal = Decimal("0.01")  # |amount - qty*rate|

    def __post_init__(self) -> None:
        if not Decimal("0") <= self.tolerance < Decimal("1"):
            raise ValueError(f"tolerance must be in [0, 1), got {self.tolerance}")
        if self.high_severity_percent < 0:
            raise ValueError("high_severity_percent must be non-negative")
        if self.amount_tolerance < 0:
            raise ValueError("amount_tolerance must be non-negative")


@dataclass
class DrawingConfig:
    """Drawing measurement defaults."""

    default_unit: str = "mm"  # linear drawing unit when a sheet declares none
    generic_layers: tuple[str, ...] = ("0", "defpoints")

    def __post_init__(self) -> None:
        if self.default_unit not in DRAWING_UNITS:
            raise ValueError(
                f"Invalid drawing unit: {self.default_unit!r}. Expected one of {DRAWING_UNITS}"
            )


@dataclass
class LookupConfig:
    """External lookup tables merged over the built-in ones."""

    unit_synonyms_path: Path | None = None


@dataclass
class AppConfig:
    """Root application configuration."""

    log_level: str = "INFO"
    log_format: str = "text"  # json or text

    reconciliation: ReconciliationConfig = field(default_factory=ReconciliationConfig)
    drawing: DrawingConfig = field(default_factory=DrawingConfig)
    lookups: LookupConfig = field(default_factory=LookupConfig)

    @classmethod
    def from_env(cls) -> AppConfig:
        """Load configuration from environment variables.

        Optional (with defaults):
        - RECON_TOLERANCE: fractional tolerance band (default: "0.02")
        - HIGH_SEVERITY_PERCENT: percent difference above which a conflict is HIGH (default: "5")
        - AMOUNT_TOLERANCE: absolute amount tolerance (default: "0.01")
        - DRAWING_UNIT: linear unit of drawings without a declared unit (default: "mm")
        - UNIT_SYNONYMS_PATH: YAML file with extra unit synonyms
        - LOG_LEVEL / LOG_FORMAT

        Raises:
            ValueError: If a value is out of range or not a number
        """
        synonyms_path = os.getenv("UNIT_SYNONYMS_PATH")

        try:
            reconciliation = ReconciliationConfig(
                tolerance=Decimal(os.getenv("RECON_TOLERANCE", "0.02")),
                high_severity_percent=Decimal(os.getenv("HIGH_SEVERITY_PERCENT", "5")),
                amount_tolerance=Decimal(os.getenv("AMOUNT_TOLERANCE", "0.01")),
            )
        except ArithmeticError as e:
            raise ValueError(f"Invalid numeric reconciliation setting: {e}") from e

        return cls(
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "text"),
            reconciliation=reconciliation,
            drawing=DrawingConfig(
                default_unit=os.getenv("DRAWING_UNIT", "mm").lower(),
            ),
            lookups=LookupConfig(
                unit_synonyms_path=Path(synonyms_path) if synonyms_path else None,
            ),
        )


# Singleton instance (lazy-loaded)
_config: AppConfig | None = None


def get_config() -> AppConfig:
    """Get or create singleton AppConfig instance from environment."""
    global _config
    if _config is None:
        _config = AppConfig.from_env()
    return _config


def reset_config() -> None:
    """Drop the cached config so the next get_config() re-reads the environment."""
    global _config
    _config = None
