"""
Configuration for inline access policies on execution roles.
"""

import re
from enum import Enum
from typing import Any

from pydantic import Field, field_validator

from livestack.config.base import ResourceConfig
from livestack.core.resource import GeneratedValue

_ACTION = re.compile(r"^(\*|[a-z0-9-]+:[A-Za-z0-9*]+)$")


class Effect(str, Enum):
    ALLOW = "Allow"
    DENY = "Deny"


class PolicyStatementConfig(ResourceConfig):
    """
    One access statement attached to a role.

    Action patterns are passed through as written; wildcards such as
    ``ivs:*`` are not narrowed.
    """

    role: GeneratedValue = Field(..., description="Name of the role to attach to")
    actions: list[str] = Field(..., min_length=1, description="Action patterns")
    resources: list[str] = Field(
        default_factory=lambda: ["*"], min_length=1, description="Resource patterns"
    )
    effect: Effect = Field(Effect.ALLOW)

    @field_validator("actions")
    @classmethod
    def check_actions(cls, value: list[str]) -> list[str]:
        for action in value:
            if not _ACTION.match(action):
                raise ValueError(f"Invalid action pattern: {action!r} (expected 'service:action')")
        return value


def policy_document(actions: list[str], resources: list[str], effect: str = "Allow") -> dict[str, Any]:
    """Render a single-statement IAM policy document."""
    return {
        "Version": "2012-10-17",
        "Statement": [
            {
                "Effect": effect,
                "Action": list(actions),
                "Resource": list(resources),
            }
        ],
    }
