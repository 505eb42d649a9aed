"""ArtifactWriter: deliver rendered artifacts to a stream or a directory.

Stream mode writes only the stack template; parameters and addons are
discarded. Directory mode writes up to three files::

    {app}.stack.yml
    {app}-{env}.params.json
    {app}.addons.stack.yml      # only when addons are defined

Every write returns the paths it created, in write order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, TextIO, assert_never

from stackctl.domain.errors import ArtifactWriteError
from stackctl.domain.models import AddonsNotDefined, AddonsTemplate
from stackctl.domain.names import addons_template_name, stack_params_name, stack_template_name

if TYPE_CHECKING:
    from stackctl.domain.models import AddonsResult, RenderedArtifact

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StreamDestination:
    stream: TextIO


@dataclass(frozen=True)
class DirectoryDestination:
    path: Path


type Destination = StreamDestination | DirectoryDestination


class ArtifactWriter:
    """Write a stack and its addons to one destination."""

    def __init__(self, destination: Destination) -> None:
        self._destination = destination

    def write(
        self, app_name: str, env_name: str, artifact: RenderedArtifact, addons: AddonsResult
    ) -> list[Path]:
        return self.write_stack(app_name, env_name, artifact) + self.write_addons(app_name, addons)

    def write_stack(self, app_name: str, env_name: str, artifact: RenderedArtifact) -> list[Path]:
        match self._destination:
            case StreamDestination(stream=stream):
                _write_stream(stream, artifact.template)
                return []
            case DirectoryDestination(path=directory):
                _ensure_dir(directory)
                return [
                    _write_file(directory / stack_template_name(app_name), artifact.template),
                    _write_file(directory / stack_params_name(app_name, env_name), artifact.parameters),
                ]
            case _:
                assert_never(self._destination)

    def write_addons(self, app_name: str, addons: AddonsResult) -> list[Path]:
        match addons:
            case AddonsNotDefined():
                return []
            case AddonsTemplate(template=template):
                pass
            case _:
                assert_never(addons)

        match self._destination:
            case StreamDestination():
                logger.debug("Discarding addons template for %s in stream mode", app_name)
                return []
            case DirectoryDestination(path=directory):
                _ensure_dir(directory)
                return [_write_file(directory / addons_template_name(app_name), template)]
            case _:
                assert_never(self._destination)


def _ensure_dir(directory: Path) -> None:
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ArtifactWriteError("create directory", directory, exc) from exc


def _write_file(path: Path, content: str) -> Path:
    try:
        fh = path.open("w", encoding="utf-8")
    except OSError as exc:
        raise ArtifactWriteError("create file", path, exc) from exc
    with fh:
        try:
            fh.write(content)
        except OSError as exc:
            raise ArtifactWriteError("write file", path, exc) from exc
    logger.debug("Wrote %s", path)
    return path


def _write_stream(stream: TextIO, content: str) -> None:
    try:
        stream.write(content)
        stream.flush()
    except OSError as exc:
        raise ArtifactWriteError("write", Path(getattr(stream, "name", "<stream>")), exc) from exc
