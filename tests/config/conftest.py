from __future__ import annotations

import pytest


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's own STACKCTL_* variables out of config tests."""
    for name in ("STACKCTL_CONFIG", "STACKCTL_QUIET", "STACKCTL_AWS__REGION"):
        monkeypatch.delenv(name, raising=False)
