"""Shared Jinja2 template loading for packaged CloudFormation templates."""

from __future__ import annotations

from jinja2 import Environment, PackageLoader, StrictUndefined


def build_template_environment(group: str) -> Environment:
    """Build a Jinja2 environment over ``stackctl/templates/<group>/``.

    Undefined variables fail loudly so a renamed context key cannot
    silently produce an empty CloudFormation value.
    """
    return Environment(
        loader=PackageLoader("stackctl", f"templates/{group}"),
        keep_trailing_newline=True,
        undefined=StrictUndefined,
    )
