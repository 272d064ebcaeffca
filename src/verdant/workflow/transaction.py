"""Two dependent writes applied as one logical step.

Consistency level: on a transactional store both writes commit or neither
does. On the hosted REST store the first write is undone with a
compensating write when the second fails; the compensation is retried a
few times and, if it still fails, the mismatch is logged and the original
error propagates. A crash between the two writes is not covered.
"""

from __future__ import annotations

import logging
from typing import Callable, TypeVar

from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from verdant.errors import StoreError
from verdant.storage.base import Store

logger = logging.getLogger(__name__)

A = TypeVar("A")
B = TypeVar("B")


@retry(
    retry=retry_if_exception_type(StoreError),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=0.5, min=0.5, max=5),
    reraise=True,
)
def _compensate(undo: Callable[[A], object], first_result: A) -> None:
    undo(first_result)


def paired_write(
    store: Store,
    first: Callable[[], A],
    second: Callable[[A], B],
    undo: Callable[[A], object],
) -> tuple[A, B]:
    """Run ``first`` then ``second(first_result)``; undo ``first`` if ``second`` fails."""
    with store.atomic():
        first_result = first()
        try:
            second_result = second(first_result)
        except Exception:
            if not store.transactional:
                try:
                    _compensate(undo, first_result)
                except StoreError:
                    logger.exception("Compensating write failed; store left inconsistent")
            raise
    return first_result, second_result
