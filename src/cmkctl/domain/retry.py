"""Retry policy for stages that are allowed to fail once.

Only packaging uses a policy with more than one attempt: on the host
platforms listed for it (``darwin`` by default) a failed package build
is retried exactly once.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from cmkctl.domain.errors import AbortError, NonZeroExitError

logger = logging.getLogger(__name__)

RetryPredicate = Callable[[str, AbortError], bool]


def _never(_platform: str, _error: AbortError) -> bool:
    return False


@dataclass(frozen=True)
class RetryPolicy:
    """``max_attempts`` total tries; retry only while ``retry_predicate`` agrees."""

    max_attempts: int = 1
    retry_predicate: RetryPredicate = field(default=_never)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            msg = f"max_attempts must be at least 1, got {self.max_attempts}"
            raise ValueError(msg)

    async def run(self, platform: str, operation: Callable[[], Awaitable[None]]) -> None:
        """Await *operation*, retrying per policy. The last failure propagates."""
        attempt = 1
        while True:
            try:
                await operation()
                return
            except AbortError as exc:
                if attempt >= self.max_attempts or not self.retry_predicate(platform, exc):
                    raise
                logger.warning(
                    "Attempt %d/%d failed on %s, retrying: %s",
                    attempt,
                    self.max_attempts,
                    platform,
                    exc,
                )
                attempt += 1


SINGLE_ATTEMPT = RetryPolicy()


def flaky_packaging_policy(
    platforms: tuple[str, ...] = ("darwin",),
    max_attempts: int = 2,
) -> RetryPolicy:
    """Policy retrying failed package builds on the listed host platforms."""

    def predicate(platform: str, error: AbortError) -> bool:
        cause = error.__cause__ if error.__cause__ is not None else error
        return platform in platforms and isinstance(cause, NonZeroExitError)

    return RetryPolicy(max_attempts=max_attempts, retry_predicate=predicate)
