"""BaseService — shared foundation for cmkctl services.

Every service receives the resolved settings and a command runner at
construction time. Services convert fatal errors into a failed
:class:`ServiceResult` exactly once, in :meth:`BaseService._failure`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from cmkctl.infrastructure.runner import CommandRunner
from cmkctl.services.result import UNHANDLED, ServiceError, ServiceResult

if TYPE_CHECKING:
    from cmkctl.config.settings import CmkSettings

logger = structlog.get_logger(__name__)


class BaseService:
    """Base for service-layer classes.

    Usage::

        class ProbeService(BaseService):
            async def probe(self) -> ServiceResult:
                try:
                    ...
                except Exception as exc:
                    return self._failure("probe", exc)
    """

    def __init__(self, settings: CmkSettings, runner: CommandRunner | None = None) -> None:
        self._settings = settings
        self._runner = runner or CommandRunner()

    def _failure(
        self,
        op: str,
        exc: Exception,
        *,
        data: dict[str, Any] | None = None,
    ) -> ServiceResult:
        """Convert *exc* into a failed result and log it."""
        error = ServiceError.from_exception(exc)
        if error.code == UNHANDLED:
            logger.exception("run.unhandled", op=op)
        else:
            logger.error("run.aborted", op=op, code=error.code, message=error.message)
        return ServiceResult(ok=False, op=op, data=data or {}, error=error)
