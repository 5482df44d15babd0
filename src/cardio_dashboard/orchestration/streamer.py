"""Abnormality level streaming.

The local level is updated synchronously so the slider never lags; every
change is then pushed to the backend as a fire-and-forget task. Pushes are
not cancelled or reordered, and a failed push never rolls back the local
value: the local slider is trusted, divergence is only reported.
"""
from __future__ import annotations

import asyncio
import numbers
from typing import Awaitable, Callable

from loguru import logger

from cardio_dashboard.core.errors import DashboardError, ValidationError

SET_LEVEL_FAILURE_MESSAGE = "Failed to set abnormality level"

DEFAULT_LEVEL = 0.5


def validate_level(value) -> float:
    """Return value as float if it is a real number in [0, 1].

    Raises:
        ValidationError: Non-numeric, NaN or out-of-range value
    """
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise ValidationError(f"Abnormality level must be a number, got {value!r}")
    level = float(value)
    if not 0.0 <= level <= 1.0:
        raise ValidationError(f"Abnormality level must be between 0 and 1, got {value}")
    return level


class ParameterStreamer:
    """Owns the abnormality level and streams changes to the backend.

    Args:
        send: Coroutine function pushing one level to the backend
        initial_level: Starting value (default 0.5)
        on_error: Called with a human-readable message when a push fails
    """

    def __init__(
        self,
        send: Callable[[float], Awaitable[None]],
        initial_level: float = DEFAULT_LEVEL,
        on_error: Callable[[str], None] | None = None,
    ):
        self._send = send
        self._level = validate_level(initial_level)
        self._on_error = on_error
        self._tasks: set[asyncio.Task] = set()

    @property
    def level(self) -> float:
        return self._level

    @property
    def pending_pushes(self) -> int:
        """Number of pushes still awaiting the backend."""
        return len(self._tasks)

    def set_level(self, value) -> float:
        """Update the local level and push it to the backend.

        Must be called from within the running event loop.

        Returns:
            The accepted level

        Raises:
            ValidationError: If value is not in [0, 1]; the level is unchanged
        """
        level = validate_level(value)
        self._level = level
        logger.debug(f"Abnormality level set to {level:.2f}")

        task = asyncio.get_running_loop().create_task(self._push(level))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return level

    async def _push(self, level: float) -> None:
        try:
            await self._send(level)
        except DashboardError as e:
            logger.error(f"Pushing abnormality level {level:.2f} failed: {e!r}")
            if self._on_error is not None:
                self._on_error(f"{SET_LEVEL_FAILURE_MESSAGE}: {e}")
            return
        except Exception as e:
            logger.exception(f"Pushing abnormality level {level:.2f} failed unexpectedly")
            if self._on_error is not None:
                self._on_error(f"{SET_LEVEL_FAILURE_MESSAGE}: unexpected error ({type(e).__name__})")
            return
        logger.debug(f"Backend acknowledged abnormality level {level:.2f}")

    async def wait_idle(self) -> None:
        """Wait until every push issued so far has completed."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
