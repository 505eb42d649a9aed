"""Tests for ServiceResult and ServiceError."""

import json

import pytest

from stackctl.domain.errors import AddonsRenderError, RepoNotFoundError
from stackctl.services.result import ServiceError, ServiceResult


class TestServiceResult:
    def test_success_construction(self) -> None:
        result = ServiceResult(ok=True, op="package_app", data={"app": "frontend"})
        assert result.ok is True
        assert result.data == {"app": "frontend"}
        assert result.warnings == []
        assert result.error is None
        assert result.meta is None

    def test_failure_from_exception(self) -> None:
        exc = RepoNotFoundError("frontend", "us-west-2", "111111111111")
        result = ServiceResult.failure("package_app", exc, data={"files_created": []})
        assert result.ok is False
        assert result.error is not None
        assert result.error.code == "REPO_NOT_FOUND"
        assert result.error.detail["env_region"] == "us-west-2"
        assert result.data == {"files_created": []}

    def test_json_serialization(self) -> None:
        result = ServiceResult(ok=True, op="test", data={"key": "value"}, meta={"n": 1})
        parsed = json.loads(result.model_dump_json())
        assert parsed["op"] == "test"
        assert parsed["meta"]["n"] == 1

    def test_frozen(self) -> None:
        result = ServiceResult(ok=True, op="test")
        with pytest.raises(Exception):
            result.ok = False  # type: ignore[misc]


class TestServiceError:
    def test_context_prefix(self) -> None:
        err = ServiceError.from_exception(
            AddonsRenderError("bad yaml"), context="retrieve addons template"
        )
        assert err.message == "retrieve addons template: bad yaml"
        assert err.code == "RENDER_FAILURE"

    def test_without_context(self) -> None:
        err = ServiceError.from_exception(AddonsRenderError("bad yaml"))
        assert err.message == "bad yaml"
