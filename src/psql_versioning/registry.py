"""Version-storage capability and the strategy registry."""

from abc import ABC, abstractmethod
from collections.abc import Iterator

from sqlalchemy.engine import Connection

from .utils.logging import LogContext, RegistrationError, get_logger

logger = get_logger(__name__, LogContext.REGISTRY)


class VersionStrategy(ABC):
    """Base class for pluggable version-storage strategies."""

    @abstractmethod
    def version(self, connection: Connection) -> int:
        """Read the schema version recorded for the connected database.

        Args:
            connection: Open connection owned by the caller.

        Returns:
            The recorded version, or 0 if none has been recorded.
        """
        pass

    @abstractmethod
    def set_version(self, connection: Connection, version: int) -> None:
        """Record ``version`` as the schema version of the connected database.

        Args:
            connection: Open connection owned by the caller.
            version: Version to record.
        """
        pass

    def __repr__(self) -> str:
        return f"<{type(self).__name__}>"


class StrategyRegistry:
    """Maps strategy names to strategy instances.

    The host application creates one registry at startup and registers the
    strategies it wants to offer; nothing is registered implicitly.
    """

    def __init__(self) -> None:
        self._strategies: dict[str, VersionStrategy] = {}

    def register(
        self, name: str, strategy: VersionStrategy, replace: bool = False
    ) -> None:
        """Register a strategy under a name.

        Args:
            name: Name the framework will look the strategy up by.
            strategy: Strategy instance.
            replace: Allow overwriting an existing registration.

        Raises:
            RegistrationError: If the name is taken or the object is not a strategy.
        """
        if not name:
            raise RegistrationError("Strategy name must not be empty")

        if not isinstance(strategy, VersionStrategy):
            raise RegistrationError(
                f"Cannot register {strategy!r} as '{name}': not a VersionStrategy",
                context={"name": name},
            )

        if name in self._strategies and not replace:
            raise RegistrationError(
                f"Strategy '{name}' is already registered",
                context={"name": name, "existing": repr(self._strategies[name])},
            )

        self._strategies[name] = strategy
        logger.debug(f"Registered strategy '{name}'", strategy_name=name)

    def get(self, name: str) -> VersionStrategy:
        """Look up a registered strategy.

        Raises:
            RegistrationError: If nothing is registered under ``name``.
        """
        try:
            return self._strategies[name]
        except KeyError:
            raise RegistrationError(
                f"Unknown strategy '{name}'",
                context={"name": name, "available": self.names()},
            ) from None

    def names(self) -> list[str]:
        """Names of all registered strategies, sorted."""
        return sorted(self._strategies)

    def __contains__(self, name: object) -> bool:
        return name in self._strategies

    def __len__(self) -> int:
        return len(self._strategies)

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())
