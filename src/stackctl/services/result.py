"""ServiceResult and ServiceError: the universal service contract.

INVARIANT: Every public service entry point returns ServiceResult.
The CLI consumes this type; resolvers underneath raise
:class:`~stackctl.domain.errors.StackctlError` and the entry point
converts them at the boundary.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from stackctl.domain.errors import StackctlError


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_exception(cls, exc: StackctlError, *, context: str | None = None) -> ServiceError:
        """Build an error payload from a domain exception.

        *context* names the failing step and is prefixed to the message,
        e.g. ``"retrieve addons template: <cause>"``.
        """
        message = f"{context}: {exc.message}" if context else exc.message
        return cls(code=exc.code, message=message, detail=dict(exc.detail))


class ServiceResult(BaseModel):
    """Universal return type for all service operations.

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the operation (e.g. ``"package_app"``).
        data: Operation-specific payload on success.
        warnings: Non-fatal issues encountered during the operation.
        error: Structured error if ``ok`` is False.
        meta: Optional metadata (timing, counts, etc.).
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None

    @classmethod
    def failure(
        cls,
        op: str,
        exc: StackctlError,
        *,
        context: str | None = None,
        data: dict[str, Any] | None = None,
    ) -> ServiceResult:
        return cls(
            ok=False,
            op=op,
            data=data or {},
            error=ServiceError.from_exception(exc, context=context),
        )
