"""Result contract shared by every cmkctl service.

A service never lets an error escape: the first fatal error of a run is
turned into a :class:`ServiceError` and returned inside a failed
:class:`ServiceResult`.  ``--json`` output is the serialized result.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from cmkctl.domain.errors import AbortError, error_as_string

UNHANDLED = "UNHANDLED"


class ServiceError(BaseModel):
    """Why a run was aborted.

    ``code`` is the code of the error that actually failed: for a wrapped
    runner error (``Command 'cmake' failed ...``) it is the code of the
    ``NonZeroExitError`` or ``SpawnError`` underneath. ``message`` always
    names an error kind, as ``"<Kind>: <message>"`` or inside the wrapped
    ``Command ... failed with error '<Kind>: <message>'`` text.
    """

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_exception(cls, exc: Exception) -> ServiceError:
        if not isinstance(exc, AbortError):
            return cls(
                code=UNHANDLED,
                message=f"!!! Unhandled exception {exc}",
                detail={"kind": type(exc).__name__},
            )
        detail: dict[str, Any] = {"kind": type(exc).__name__}
        cause = exc.__cause__
        if isinstance(cause, AbortError):
            detail["cause"] = cause.code
            return cls(code=cause.code, message=exc.message, detail=detail)
        # A wrapped error already names its cause kind in the message.
        message = exc.message if type(exc) is AbortError else error_as_string(exc)
        return cls(code=exc.code, message=message, detail=detail)


class BuildProgress(BaseModel):
    """How far a build got: finished configurations and stages started."""

    completed: list[str] = Field(default_factory=list)
    stages: int = 0

    def finish(self, configuration: str) -> None:
        self.completed.append(configuration)

    def as_data(self) -> dict[str, Any]:
        return {"completed": list(self.completed), "stages": self.stages}


class ServiceResult(BaseModel):
    """Return type of ``probe``, ``build`` and ``dirs``.

    Attributes:
        ok: Whether the operation succeeded.
        op: Operation name, also used to pick the renderer.
        data: Operation payload. A failed build still carries its outputs,
            the probed version and its :class:`BuildProgress`.
        warnings: Non-fatal issues.
        error: Set iff ``ok`` is False.
        meta: Telemetry when ``--verbose`` is on.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None
