"""BaseService: shared foundation for stackctl services.

Every service receives a :class:`Backend` at construction time. The
backend bundles the metadata store, workspace, and AWS adapters; services
never construct collaborators themselves.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from stackctl.infrastructure.backend import Backend


class BaseService:
    """Base for all service-layer classes.

    Usage::

        class PackageService(BaseService):
            def package_app(self, ...) -> ServiceResult:
                selector = StackSelector(project, self._backend.workspace, ...)
                ...
    """

    def __init__(self, backend: Backend) -> None:
        self._backend = backend
