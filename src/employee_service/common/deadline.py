from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Callable, Iterator, Optional

from ..core.exceptions import CollaboratorError, DomainError, OperationTimeout

logger = logging.getLogger(__name__)

_active_deadline: ContextVar[Optional["Deadline"]] = ContextVar("active_deadline", default=None)


class Deadline:
    """Time budget for one use-case operation."""

    def __init__(self, seconds: float, *, timer: Callable[[], float] = time.monotonic):
        if seconds <= 0:
            raise ValueError("deadline must be positive")
        self._timer = timer
        self._expires_at = timer() + float(seconds)

    def remaining(self) -> float:
        return max(0.0, self._expires_at - self._timer())

    @property
    def expired(self) -> bool:
        return self._timer() >= self._expires_at

    def check(self, operation: str) -> None:
        if self.expired:
            raise OperationTimeout(f"{operation}: deadline exceeded")


def current_deadline() -> Optional[Deadline]:
    """Deadline of the collaborator call in progress, if any.

    Adapters doing blocking I/O read it to cap their own timeouts at the
    remaining budget.
    """
    return _active_deadline.get()


@contextmanager
def collaborator_call(operation: str, deadline: Optional[Deadline] = None) -> Iterator[None]:
    """Guard a repository/signer call.

    The deadline is checked before the call starts and again after it
    returns, so an overrunning call fails with OperationTimeout instead of
    its result being used. Domain errors and timeouts pass through
    untouched; anything else is wrapped into CollaboratorError carrying the
    operation name.
    """
    if deadline is not None:
        deadline.check(operation)
    token = _active_deadline.set(deadline)
    try:
        yield
    except (DomainError, OperationTimeout):
        raise
    except Exception as exc:
        logger.debug("collaborator failure during %s", operation, exc_info=True)
        raise CollaboratorError(f"{operation}: {exc}") from exc
    finally:
        _active_deadline.reset(token)
    if deadline is not None and deadline.expired:
        logger.warning("%s finished after the operation deadline", operation)
        raise OperationTimeout(f"{operation}: deadline exceeded")
