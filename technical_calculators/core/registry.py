"""
Calculator registration and discovery.

Provides a central registry mapping each ``CalculatorName`` to the factory
(normally the calculator class) that builds it. Calculator modules register
themselves with the ``register_calculator`` decorator when imported, so the
table is complete once ``technical_calculators.calculators`` is loaded.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, TypeVar

from .data_types import CalculatorName
from .exceptions import ConfigurationError, NotSupportedError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CalculatorInfo:
    """Information about a registered calculator.

    Attributes:
        name: Registry key.
        factory: Callable building a calculator from ``(parameters, name, **kwargs)``.
        metadata: Additional calculator metadata (family, sort order, ...).
    """

    def __init__(
        self,
        name: CalculatorName,
        factory: Callable[..., Any],
        metadata: dict[str, Any] | None = None,
    ) -> None:
        self.name = name
        self.factory = factory
        self.metadata = metadata or {}

    def create(self, **kwargs: Any) -> Any:
        """Build a new calculator instance."""
        return self.factory(**kwargs)


class CalculatorRegistry:
    """Registry of calculator factories keyed by ``CalculatorName``.

    Thread-safe implementation supporting concurrent access.
    """

    def __init__(self) -> None:
        """Initialize the registry."""
        self._calculators: dict[CalculatorName, CalculatorInfo] = {}
        self._lock = threading.RLock()

    @staticmethod
    def resolve_name(name: CalculatorName | str) -> CalculatorName:
        """Convert a name to ``CalculatorName``.

        Raises:
            NotSupportedError: If the name is not part of the enumeration.
        """
        if isinstance(name, CalculatorName):
            return name
        try:
            return CalculatorName(name)
        except ValueError:
            raise NotSupportedError(
                f"Calculator '{name}' is not supported.",
                calculator_type=str(name),
            ) from None

    def register(
        self,
        name: CalculatorName,
        factory: Callable[..., Any],
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """Register a calculator factory.

        Args:
            name: Registry key.
            factory: Factory function or class.
            metadata: Optional metadata about the calculator.

        Raises:
            ConfigurationError: If the name is already registered.
        """
        with self._lock:
            if name in self._calculators:
                raise ConfigurationError(
                    f"Calculator '{name.value}' already registered",
                    details={"calculator_name": name.value},
                )
            self._calculators[name] = CalculatorInfo(name=name, factory=factory, metadata=metadata)
            logger.debug(f"Registered calculator: {name.value}")

    def unregister(self, name: CalculatorName) -> bool:
        """Remove a calculator.

        Returns:
            True if the calculator was found and removed, False otherwise.
        """
        with self._lock:
            if name in self._calculators:
                del self._calculators[name]
                logger.debug(f"Unregistered calculator: {name.value}")
                return True
            return False

    def get_info(self, name: CalculatorName | str) -> CalculatorInfo:
        """Look up a registration.

        Raises:
            NotSupportedError: If the calculator is unknown or not registered.
        """
        key = self.resolve_name(name)
        with self._lock:
            info = self._calculators.get(key)
        if info is None:
            raise NotSupportedError(
                f"Calculator '{key.value}' is not supported.",
                calculator_type=key.value,
            )
        return info

    def get_factory(self, name: CalculatorName | str) -> Callable[..., Any]:
        """Factory registered for ``name``."""
        return self.get_info(name).factory

    def create(self, calculator_name: CalculatorName | str, /, **kwargs: Any) -> Any:
        """Build a calculator. The factory runs outside the lock.

        ``kwargs`` go to the factory unchanged, so ``name=`` sets the
        calculator's own name rather than the registry key.
        """
        return self.get_info(calculator_name).create(**kwargs)

    def has(self, name: CalculatorName | str) -> bool:
        """Check whether a calculator is registered."""
        try:
            key = self.resolve_name(name)
        except NotSupportedError:
            return False
        with self._lock:
            return key in self._calculators

    def list_calculators(self) -> list[CalculatorName]:
        """Registered calculators in enumeration order."""
        with self._lock:
            return [name for name in CalculatorName if name in self._calculators]

    def get_metadata(self, name: CalculatorName | str) -> dict[str, Any]:
        """Copy of a calculator's metadata."""
        return self.get_info(name).metadata.copy()

    def clear(self) -> int:
        """Clear all registrations.

        Returns:
            Number of calculators cleared.
        """
        with self._lock:
            count = len(self._calculators)
            self._calculators.clear()
            logger.info(f"Cleared {count} calculator registrations")
            return count


# Global registry instance
registry = CalculatorRegistry()


def register_calculator(
    name: CalculatorName,
    metadata: dict[str, Any] | None = None,
    target: CalculatorRegistry | None = None,
) -> Callable[[type[T]], type[T]]:
    """Decorator to register a class as a calculator.

    Args:
        name: Registry key.
        metadata: Optional metadata; ``family`` defaults to the module name.
        target: Registry to use. Defaults to the global registry.

    Returns:
        Decorator function.

    Example:
        @register_calculator(CalculatorName.SMA)
        class SimpleMovingAverage(BaseCalculator):
            ...
    """

    def decorator(cls: type[T]) -> type[T]:
        info = {"family": cls.__module__.rsplit(".", 1)[-1], "class": cls.__name__}
        info.update(metadata or {})
        (target or registry).register(name, cls, metadata=info)
        cls.calculator_name = name  # type: ignore[attr-defined]
        return cls

    return decorator
