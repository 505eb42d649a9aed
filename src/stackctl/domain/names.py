"""Naming rules for projects, stacks, and packaged artifacts."""

from __future__ import annotations

import re

from stackctl.domain.errors import InvalidNameError

# Packaged artifact file names.
STACK_TEMPLATE_NAME_FORMAT = "{app}.stack.yml"
STACK_PARAMS_NAME_FORMAT = "{app}-{env}.params.json"
ADDONS_TEMPLATE_NAME_FORMAT = "{app}.addons.stack.yml"

_NAME_RE = re.compile(r"^[a-z][a-z0-9\-]*$")
_MAX_NAME_LENGTH = 255


def stack_template_name(app: str) -> str:
    return STACK_TEMPLATE_NAME_FORMAT.format(app=app)


def stack_params_name(app: str, env: str) -> str:
    return STACK_PARAMS_NAME_FORMAT.format(app=app, env=env)


def addons_template_name(app: str) -> str:
    return ADDONS_TEMPLATE_NAME_FORMAT.format(app=app)


def app_stack_name(project: str, env: str, app: str) -> str:
    """CloudFormation stack name for an application in an environment."""
    return f"{project}-{env}-{app}"


def project_roles_stack_name(project: str) -> str:
    return f"{project}-infrastructure-roles"


def project_stack_set_name(project: str) -> str:
    return f"{project}-infrastructure"


def validate_name(value: str, *, kind: str = "project") -> str:
    """Return *value* unchanged if it is a legal resource name.

    Names start with a lowercase letter and contain only lowercase
    letters, digits, and hyphens.

    Examples:
        >>> validate_name("my-project")
        'my-project'
    """
    if not value:
        raise InvalidNameError(f"{kind} name cannot be empty", kind=kind)
    if len(value) > _MAX_NAME_LENGTH:
        raise InvalidNameError(
            f"{kind} name {value} exceeds {_MAX_NAME_LENGTH} characters", kind=kind
        )
    if not _NAME_RE.match(value):
        raise InvalidNameError(
            f"{kind} name {value} is invalid: it must start with a letter and "
            "contain only lower-case letters, numbers, and hyphens",
            kind=kind,
        )
    return value
