"""psql-versioning: schema version storage in the PostgreSQL database comment."""

__version__ = "0.1.0"

from .registry import StrategyRegistry, VersionStrategy
from .strategy import STRATEGY_NAME, PsqlVersioningStrategy, register
from .utils.logging import (
    ConnectivityError,
    PsqlVersioningError,
    RegistrationError,
    VersionParseError,
)

__all__ = [
    "STRATEGY_NAME",
    "ConnectivityError",
    "PsqlVersioningError",
    "PsqlVersioningStrategy",
    "RegistrationError",
    "StrategyRegistry",
    "VersionParseError",
    "VersionStrategy",
    "register",
    "__version__",
]
