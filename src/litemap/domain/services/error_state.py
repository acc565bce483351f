"""The single latched error of a database handle.

Once an error is latched every operation on the handle is a no-op until
the caller clears it. Only the first error is kept; later ones are
dropped, so the error a caller inspects after a chain of calls is the one
that broke the chain.
"""

from __future__ import annotations

from litemap.domain.errors import MapperError
from litemap.infrastructure.logging import get_logger

logger = get_logger(__name__)


class ErrorState:
    """First-error latch."""

    def __init__(self) -> None:
        self._error: Exception | None = None

    @property
    def error(self) -> Exception | None:
        return self._error

    @property
    def ok(self) -> bool:
        return self._error is None

    @property
    def failed(self) -> bool:
        return self._error is not None

    def set(self, error: Exception | str | None) -> bool:
        """Latch error unless one is already latched.

        A string is wrapped in MapperError. None is ignored.

        Returns:
            True if the error was latched by this call.
        """
        if error is None or self._error is not None:
            return False
        if isinstance(error, str):
            error = MapperError(error)
        self._error = error
        logger.debug("error_latched", error=str(error), error_type=type(error).__name__)
        return True

    def clear(self) -> Exception | None:
        """Reset the latch and return the error it held."""
        error, self._error = self._error, None
        return error

    def raise_for_error(self) -> None:
        """Raise the latched error, if any."""
        if self._error is not None:
            raise self._error
