"""Base manager class for Fuel Points managers."""

from __future__ import annotations

from abc import ABC, abstractmethod
import asyncio
from typing import TYPE_CHECKING, Any, TypeVar

from .. import const
from ..exceptions import FuelPointsError, TransientExternalFailure

if TYPE_CHECKING:
    from collections.abc import Awaitable

    from ..config import EngineConfig
    from ..coordinator import ProgressionCoordinator

_T = TypeVar("_T")


async def async_call_external(
    operation: str,
    awaitable: Awaitable[_T],
    timeout_seconds: float,
    source: str,
) -> _T:
    """Await a collaborator call under a bounded timeout.

    Engine errors raised by the collaborator pass through unchanged; anything
    else becomes a TransientExternalFailure the caller may retry.

    Args:
        operation: Collaborator method name, used in logs and the error
        awaitable: The pending call
        timeout_seconds: Upper bound on the wait
        source: Name of the calling component for log prefixes

    Raises:
        TransientExternalFailure: The call timed out or raised
    """
    try:
        async with asyncio.timeout(timeout_seconds):
            return await awaitable
    except TimeoutError as err:
        const.LOGGER.warning(
            "%s: External call '%s' timed out after %ss",
            source,
            operation,
            timeout_seconds,
        )
        raise TransientExternalFailure(operation, timed_out=True) from err
    except FuelPointsError:
        raise
    except Exception as err:
        const.LOGGER.warning(
            "%s: External call '%s' failed: %s", source, operation, err
        )
        raise TransientExternalFailure(operation) from err


class BaseManager(ABC):
    """Base class for all Fuel Points managers with scoped event support.

    Provides:
    - Event emitting through the coordinator (emit)
    - Bounded collaborator calls (_async_call_external)

    Subclasses must implement:
    - async_setup(): Subscribe to events, initialize state
    """

    def __init__(self, coordinator: ProgressionCoordinator) -> None:
        """Initialize manager.

        Args:
            coordinator: Parent coordinator owning this manager
        """
        self.coordinator = coordinator

    @property
    def config(self) -> EngineConfig:
        """Engine configuration shared with the coordinator."""
        return self.coordinator.config

    def emit(self, signal: str, **payload: Any) -> None:
        """Emit an in-process event to listeners registered on the coordinator.

        Example:
            self.emit(
                const.SIGNAL_RESET_COMPLETED,
                boundary=fire_at.isoformat(),
            )
        """
        const.LOGGER.debug(
            "Emitting event '%s' with payload keys: %s", signal, list(payload.keys())
        )
        self.coordinator.dispatch(signal, payload)

    async def _async_call_external(
        self, operation: str, awaitable: Awaitable[_T]
    ) -> _T:
        """Await a collaborator call under the configured timeout.

        Raises:
            TransientExternalFailure: The call timed out or raised
        """
        return await async_call_external(
            operation,
            awaitable,
            self.config.external_timeout_seconds,
            self.__class__.__name__,
        )

    @abstractmethod
    async def async_setup(self) -> None:
        """Set up the manager (subscribe to events, initialize state).

        Called once from ProgressionCoordinator.async_setup().
        """

    async def async_shutdown(self) -> None:
        """Release timers and tasks. Default is a no-op."""
