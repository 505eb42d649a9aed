"""Local workspace: the ``ecs-project/`` directory next to the user's code.

Layout::

    <root>/
      ecs-project/
        .ecs-workspace          # summary: which project this repo belongs to
        frontend/
          manifest.yml
          addons/               # optional extension templates
            bucket.yml

The workspace is discovered by walking up from the working directory, the
same way config discovery finds ``stackctl.toml``. When none exists yet the
starting directory becomes the root so :meth:`Workspace.create` can make one.
"""

from __future__ import annotations

import logging
from io import StringIO
from pathlib import Path

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from stackctl.domain.errors import (
    LocalIOError,
    ManifestReadError,
    WorkspaceConflictError,
    WorkspaceNotFoundError,
)
from stackctl.domain.models import WorkspaceSummary

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "manifest.yml"
ADDONS_DIRNAME = "addons"


class Workspace:
    """Filesystem view of one workspace root."""

    def __init__(
        self,
        root: Path,
        *,
        directory: str = "ecs-project",
        summary_file: str = ".ecs-workspace",
    ) -> None:
        self.root = root
        self._directory = directory
        self._summary_file = summary_file

    @classmethod
    def discover(
        cls,
        start: Path,
        *,
        directory: str = "ecs-project",
        summary_file: str = ".ecs-workspace",
    ) -> Workspace:
        """Find the nearest ancestor of *start* that holds *directory*."""
        current = start.resolve()
        while True:
            if (current / directory).is_dir():
                return cls(current, directory=directory, summary_file=summary_file)
            parent = current.parent
            if parent == current:
                break
            current = parent
        return cls(start.resolve(), directory=directory, summary_file=summary_file)

    @property
    def project_dir(self) -> Path:
        return self.root / self._directory

    @property
    def summary_path(self) -> Path:
        return self.project_dir / self._summary_file

    # ------------------------------------------------------------------
    # Project binding
    # ------------------------------------------------------------------

    def summary(self) -> WorkspaceSummary:
        """Return the project this workspace is registered to."""
        path = self.summary_path
        if not path.is_file():
            raise WorkspaceNotFoundError(self.root, self._directory)
        try:
            data = YAML(typ="safe").load(path.read_text(encoding="utf-8"))
        except (OSError, YAMLError) as exc:
            raise LocalIOError(f"read workspace summary {path}: {exc}", path=str(path)) from exc
        if not isinstance(data, dict) or not data.get("project"):
            raise LocalIOError(f"workspace summary {path} has no project", path=str(path))
        return WorkspaceSummary(project_name=str(data["project"]))

    def create(self, project_name: str) -> None:
        """Bind this workspace to *project_name*.

        Re-binding to the same project is a no-op. Binding to a different
        project than the one already recorded raises
        :class:`WorkspaceConflictError`.
        """
        try:
            existing = self.summary()
        except WorkspaceNotFoundError:
            existing = None

        if existing is not None:
            if existing.project_name == project_name:
                logger.debug("Workspace already registered to %s", project_name)
                return
            raise WorkspaceConflictError(existing.project_name, project_name)

        buf = StringIO()
        YAML(typ="safe").dump({"project": project_name}, buf)
        try:
            self.project_dir.mkdir(parents=True, exist_ok=True)
            self.summary_path.write_text(buf.getvalue(), encoding="utf-8")
        except OSError as exc:
            raise LocalIOError(
                f"create workspace {self.project_dir}: {exc}", path=str(self.project_dir)
            ) from exc
        logger.debug("Registered workspace %s to project %s", self.project_dir, project_name)

    # ------------------------------------------------------------------
    # Applications
    # ------------------------------------------------------------------

    def app_names(self) -> list[str]:
        """Names of applications that have a manifest in the workspace."""
        if not self.project_dir.is_dir():
            raise WorkspaceNotFoundError(self.root, self._directory)
        return sorted(
            child.name
            for child in self.project_dir.iterdir()
            if child.is_dir() and (child / MANIFEST_FILENAME).is_file()
        )

    def manifest_path(self, app_name: str) -> Path:
        return self.project_dir / app_name / MANIFEST_FILENAME

    def read_manifest(self, app_name: str) -> bytes:
        path = self.manifest_path(app_name)
        try:
            return path.read_bytes()
        except OSError as exc:
            raise ManifestReadError(
                f"read manifest file for {app_name}: {exc}", app=app_name, path=str(path)
            ) from exc

    def addons_dir(self, app_name: str) -> Path:
        return self.project_dir / app_name / ADDONS_DIRNAME
