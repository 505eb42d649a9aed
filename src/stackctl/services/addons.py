"""AddonsResolver: merge an application's extension templates.

Users drop CloudFormation snippets into ``<workspace>/<app>/addons/``.
Each ``*.yml``/``*.yaml`` file may declare ``Parameters``, ``Conditions``,
``Mappings``, ``Resources`` and ``Outputs``; the resolver merges them into
one template with the standard ``App``/``Env``/``Project`` parameters.

A missing directory is not an error: :meth:`AddonsResolver.resolve`
returns :class:`AddonsNotDefined` and the caller decides what that means.
"""

from __future__ import annotations

import logging
from io import StringIO
from typing import TYPE_CHECKING, Any

from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap
from ruamel.yaml.error import YAMLError

from stackctl.domain.errors import AddonsReadError, AddonsRenderError
from stackctl.domain.models import AddonsNotDefined, AddonsResult, AddonsTemplate

if TYPE_CHECKING:
    from pathlib import Path

    from stackctl.services.contracts import WorkspaceService

logger = logging.getLogger(__name__)

TEMPLATE_SUFFIXES = frozenset({".yml", ".yaml"})

MERGED_SECTIONS: tuple[str, ...] = ("Parameters", "Conditions", "Mappings", "Resources", "Outputs")
_HEADER_KEYS = frozenset({"AWSTemplateFormatVersion", "Description", "Metadata"})
RESERVED_PARAMETERS: tuple[str, ...] = ("App", "Env", "Project")


def _new_yaml() -> YAML:
    """Create a fresh round-trip YAML instance.

    Round-trip mode keeps CloudFormation short-form tags (``!Ref``,
    ``!Sub``...) intact through load and dump.
    """
    y = YAML()
    y.preserve_quotes = True
    y.default_flow_style = False
    y.width = 4096
    y.indent(mapping=2, sequence=4, offset=2)
    return y


def _header(app_name: str) -> CommentedMap:
    template = CommentedMap()
    template["AWSTemplateFormatVersion"] = "2010-09-09"
    template["Description"] = f"Additional resources for application '{app_name}'"
    params = CommentedMap()
    for name, description in zip(
        RESERVED_PARAMETERS,
        (
            "Your application's name.",
            "The environment name your application is being deployed to.",
            "Your project's name.",
        ),
        strict=True,
    ):
        params[name] = CommentedMap([("Type", "String"), ("Description", description)])
    template["Parameters"] = params
    return template


class AddonsResolver:
    """Locate and render the addons template for an application."""

    def __init__(self, workspace: WorkspaceService) -> None:
        self._workspace = workspace

    def resolve(self, app_name: str) -> AddonsResult:
        """Return the merged template, or :class:`AddonsNotDefined`.

        Raises:
            AddonsReadError: the addons path exists but cannot be listed.
            AddonsRenderError: a file is invalid, logical IDs collide, or
                there are no templates to merge.
        """
        directory = self._workspace.addons_dir(app_name)
        try:
            entries = sorted(directory.iterdir())
        except FileNotFoundError:
            logger.debug("No addons directory for %s at %s", app_name, directory)
            return AddonsNotDefined(app_name=app_name, path=directory)
        except OSError as exc:
            raise AddonsReadError(
                f"read addons directory {directory}: {exc}",
                app=app_name,
                path=str(directory),
            ) from exc

        files = [p for p in entries if p.suffix in TEMPLATE_SUFFIXES and p.is_file()]
        if not files:
            raise AddonsRenderError(
                f"no addons templates found in {directory}", app=app_name, path=str(directory)
            )
        return AddonsTemplate(template=self._render(app_name, files))

    def _render(self, app_name: str, files: list[Path]) -> str:
        merged = _header(app_name)
        owners: dict[tuple[str, str], str] = {}

        for path in files:
            doc = self._load(path)
            for key, body in doc.items():
                if key in _HEADER_KEYS:
                    continue
                if key not in MERGED_SECTIONS:
                    raise AddonsRenderError(
                        f"{path.name}: unsupported top-level section {key}",
                        file=path.name,
                        section=str(key),
                    )
                self._merge_section(merged, str(key), body, path.name, owners)

        if not merged.get("Resources"):
            raise AddonsRenderError(
                f"addons for application {app_name} define no Resources", app=app_name
            )

        buf = StringIO()
        _new_yaml().dump(merged, buf)
        return buf.getvalue()

    @staticmethod
    def _load(path: Path) -> Any:
        try:
            doc = _new_yaml().load(path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise AddonsReadError(f"read addons file {path}: {exc}", path=str(path)) from exc
        except (UnicodeDecodeError, YAMLError) as exc:
            raise AddonsRenderError(f"parse addons file {path.name}: {exc}", file=path.name) from exc
        if doc is None:
            return CommentedMap()
        if not isinstance(doc, dict):
            raise AddonsRenderError(
                f"{path.name}: expected a mapping at the top level", file=path.name
            )
        return doc

    @staticmethod
    def _merge_section(
        merged: CommentedMap,
        section: str,
        body: Any,
        filename: str,
        owners: dict[tuple[str, str], str],
    ) -> None:
        if body is None:
            return
        if not isinstance(body, dict):
            raise AddonsRenderError(
                f"{filename}: section {section} must be a mapping", file=filename, section=section
            )
        target = merged.setdefault(section, CommentedMap())
        for logical_id, value in body.items():
            if section == "Parameters" and logical_id in RESERVED_PARAMETERS:
                continue
            owner = owners.get((section, logical_id))
            if owner is not None:
                raise AddonsRenderError(
                    f"{section} {logical_id} is defined in both {owner} and {filename}",
                    section=section,
                    logical_id=str(logical_id),
                )
            owners[(section, logical_id)] = filename
            target[logical_id] = value
