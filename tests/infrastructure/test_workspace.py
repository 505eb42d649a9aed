"""Tests for the filesystem Workspace."""

from __future__ import annotations

from pathlib import Path

import pytest

from stackctl.domain.errors import (
    LocalIOError,
    ManifestReadError,
    WorkspaceConflictError,
    WorkspaceNotFoundError,
)
from stackctl.infrastructure.workspace import Workspace


class TestDiscover:
    def test_finds_ancestor(self, tmp_path: Path) -> None:
        (tmp_path / "ecs-project").mkdir()
        nested = tmp_path / "src" / "pkg"
        nested.mkdir(parents=True)
        ws = Workspace.discover(nested)
        assert ws.root == tmp_path.resolve()

    def test_falls_back_to_start(self, tmp_path: Path) -> None:
        ws = Workspace.discover(tmp_path)
        assert ws.root == tmp_path.resolve()
        assert ws.project_dir == tmp_path.resolve() / "ecs-project"

    def test_custom_directory(self, tmp_path: Path) -> None:
        (tmp_path / "infra").mkdir()
        ws = Workspace.discover(tmp_path / "infra", directory="infra")
        assert ws.root == tmp_path.resolve()


class TestBinding:
    def test_summary_without_workspace(self, workspace: Workspace) -> None:
        with pytest.raises(WorkspaceNotFoundError):
            workspace.summary()

    def test_create_then_summary(self, workspace: Workspace) -> None:
        workspace.create("demo")
        assert workspace.summary().project_name == "demo"
        assert workspace.summary_path.read_text(encoding="utf-8").strip() == "project: demo"

    def test_create_is_idempotent(self, workspace: Workspace) -> None:
        workspace.create("demo")
        workspace.create("demo")
        assert workspace.summary().project_name == "demo"

    def test_create_conflict(self, workspace: Workspace) -> None:
        workspace.create("demo")
        with pytest.raises(WorkspaceConflictError):
            workspace.create("other")

    def test_summary_without_project(self, workspace: Workspace) -> None:
        workspace.project_dir.mkdir()
        workspace.summary_path.write_text("owner: me\n", encoding="utf-8")
        with pytest.raises(LocalIOError, match="has no project"):
            workspace.summary()


class TestApplications:
    def test_app_names_requires_workspace(self, workspace: Workspace) -> None:
        with pytest.raises(WorkspaceNotFoundError):
            workspace.app_names()

    def test_app_names_lists_manifests_only(self, workspace: Workspace, make_app) -> None:
        workspace.create("demo")
        make_app(workspace, "frontend")
        make_app(workspace, "api")
        (workspace.project_dir / "scratch").mkdir()
        assert workspace.app_names() == ["api", "frontend"]

    def test_read_manifest(self, workspace: Workspace, make_app) -> None:
        workspace.create("demo")
        make_app(workspace, "frontend")
        assert workspace.read_manifest("frontend").startswith(b"name: frontend")

    def test_read_missing_manifest(self, workspace: Workspace) -> None:
        workspace.create("demo")
        with pytest.raises(ManifestReadError, match="read manifest file for frontend"):
            workspace.read_manifest("frontend")

    def test_addons_dir(self, workspace: Workspace) -> None:
        assert workspace.addons_dir("frontend") == workspace.project_dir / "frontend" / "addons"
