"""Tests for the error taxonomy."""

from __future__ import annotations

from pathlib import Path

from stackctl.domain.errors import (
    IO_FAILURE,
    NOT_FOUND,
    REPO_NOT_FOUND,
    UNSUPPORTED_MANIFEST_TYPE,
    ArtifactWriteError,
    EnvironmentNotFoundError,
    NotFoundError,
    RepoNotFoundError,
    UnsupportedManifestTypeError,
)


class TestRepoNotFoundError:
    def test_message(self) -> None:
        err = RepoNotFoundError("frontend", "us-west-2", "111111111111")
        assert err.code == REPO_NOT_FOUND
        assert str(err) == (
            "ECR repository not found for application frontend in region us-west-2 "
            "and account 111111111111"
        )

    def test_equality_on_fields(self) -> None:
        a = RepoNotFoundError("frontend", "us-west-2", "111111111111")
        b = RepoNotFoundError("frontend", "us-west-2", "111111111111")
        c = RepoNotFoundError("frontend", "us-east-1", "111111111111")
        assert a == b
        assert hash(a) == hash(b)
        assert a != c


class TestOtherErrors:
    def test_unsupported_type_message(self) -> None:
        err = UnsupportedManifestTypeError("Backend App")
        assert err.code == UNSUPPORTED_MANIFEST_TYPE
        assert "Backend App" in err.message

    def test_not_found_family(self) -> None:
        err = EnvironmentNotFoundError("demo", "prod")
        assert isinstance(err, NotFoundError)
        assert err.code == NOT_FOUND
        assert err.detail == {"project": "demo", "env": "prod"}

    def test_artifact_write_error(self) -> None:
        err = ArtifactWriteError("create file", Path("/out/x.yml"), PermissionError("denied"))
        assert err.code == IO_FAILURE
        assert err.message == "create file /out/x.yml: denied"
        assert err.path == Path("/out/x.yml")
