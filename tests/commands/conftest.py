from __future__ import annotations

from pathlib import Path

import pytest

from stackctl.infrastructure.backend import Backend


@pytest.fixture
def fresh_cli_backend(backend: Backend, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Backend:
    """Like ``cli_backend`` but the workspace is not yet bound to a project."""
    monkeypatch.delenv("STACKCTL_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(Backend, "from_settings", classmethod(lambda cls, settings: backend))
    return backend
