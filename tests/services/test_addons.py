"""Tests for AddonsResolver."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
from ruamel.yaml import YAML

from stackctl.domain.errors import AddonsReadError, AddonsRenderError
from stackctl.domain.models import AddonsNotDefined, AddonsTemplate
from stackctl.infrastructure.workspace import Workspace
from stackctl.services.addons import AddonsResolver

BUCKET = """\
Parameters:
  App:
    Type: String
  Env:
    Type: String
  Project:
    Type: String
Resources:
  AssetsBucket:
    Type: AWS::S3::Bucket
    Properties:
      BucketName: !Sub '${Project}-${Env}-${App}-assets'
Outputs:
  AssetsBucketName:
    Value: !Ref AssetsBucket
"""

TABLE = """\
Conditions:
  IsProd: !Equals [!Ref Env, prod]
Resources:
  OrdersTable:
    Type: AWS::DynamoDB::Table
    Properties:
      BillingMode: PAY_PER_REQUEST
"""


@pytest.fixture
def addons_dir(workspace: Workspace, make_app: Any) -> Path:
    make_app(workspace, "frontend")
    path = workspace.addons_dir("frontend")
    path.mkdir()
    return path


def _load(text: str) -> Any:
    return YAML().load(text)


class TestAddonsResolver:
    def test_missing_directory_is_not_defined(self, workspace: Workspace, make_app: Any) -> None:
        make_app(workspace, "frontend")
        result = AddonsResolver(workspace).resolve("frontend")
        assert isinstance(result, AddonsNotDefined)
        assert result.app_name == "frontend"
        assert result.path == workspace.addons_dir("frontend")

    def test_merges_files(self, workspace: Workspace, addons_dir: Path) -> None:
        (addons_dir / "bucket.yml").write_text(BUCKET)
        (addons_dir / "table.yaml").write_text(TABLE)
        (addons_dir / "README.md").write_text("ignored")

        result = AddonsResolver(workspace).resolve("frontend")

        assert isinstance(result, AddonsTemplate)
        doc = _load(result.template)
        assert doc["AWSTemplateFormatVersion"] == "2010-09-09"
        assert list(doc["Parameters"]) == ["App", "Env", "Project"]
        assert list(doc["Resources"]) == ["AssetsBucket", "OrdersTable"]
        assert "IsProd" in doc["Conditions"]
        assert "AssetsBucketName" in doc["Outputs"]

    def test_preserves_intrinsic_tags(self, workspace: Workspace, addons_dir: Path) -> None:
        (addons_dir / "bucket.yml").write_text(BUCKET)
        result = AddonsResolver(workspace).resolve("frontend")
        assert isinstance(result, AddonsTemplate)
        assert "!Sub" in result.template
        assert "!Ref AssetsBucket" in result.template

    def test_duplicate_logical_id(self, workspace: Workspace, addons_dir: Path) -> None:
        (addons_dir / "a.yml").write_text(BUCKET)
        (addons_dir / "b.yml").write_text(BUCKET)
        with pytest.raises(AddonsRenderError, match="AssetsBucket is defined in both a.yml and b.yml"):
            AddonsResolver(workspace).resolve("frontend")

    def test_unknown_section(self, workspace: Workspace, addons_dir: Path) -> None:
        (addons_dir / "bad.yml").write_text("Transform: AWS::Serverless-2016-10-31\n" + TABLE)
        with pytest.raises(AddonsRenderError, match="unsupported top-level section Transform"):
            AddonsResolver(workspace).resolve("frontend")

    def test_invalid_yaml(self, workspace: Workspace, addons_dir: Path) -> None:
        (addons_dir / "bad.yml").write_text("Resources: [unclosed\n")
        with pytest.raises(AddonsRenderError, match="parse addons file bad.yml"):
            AddonsResolver(workspace).resolve("frontend")

    def test_invalid_utf8(self, workspace: Workspace, addons_dir: Path) -> None:
        (addons_dir / "binary.yml").write_bytes(b"\xff\xfeResources: {}\n")
        with pytest.raises(AddonsRenderError, match="parse addons file binary.yml"):
            AddonsResolver(workspace).resolve("frontend")

    def test_empty_directory(self, workspace: Workspace, addons_dir: Path) -> None:
        with pytest.raises(AddonsRenderError, match="no addons templates found"):
            AddonsResolver(workspace).resolve("frontend")

    def test_no_resources(self, workspace: Workspace, addons_dir: Path) -> None:
        (addons_dir / "params.yml").write_text("Parameters:\n  Extra:\n    Type: String\n")
        with pytest.raises(AddonsRenderError, match="define no Resources"):
            AddonsResolver(workspace).resolve("frontend")

    def test_path_is_a_file(self, workspace: Workspace, make_app: Any) -> None:
        make_app(workspace, "frontend")
        workspace.addons_dir("frontend").write_text("not a directory")
        with pytest.raises(AddonsReadError):
            AddonsResolver(workspace).resolve("frontend")
