"""CLI utilities for livestack."""

from livestack.cli.deploy import (
    DeploymentCLI,
    DeploymentError,
)

__all__ = [
    "DeploymentCLI",
    "DeploymentError",
]
