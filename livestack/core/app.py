"""
Application context for a livestack deployment.
"""

import os
from dataclasses import dataclass, field
from typing import Mapping

from livestack.config.provider import AwsConfig


@dataclass(frozen=True)
class App:
    """
    Explicit deployment context threaded through stack construction.

    An App is created once by the entrypoint and passed to every stack
    it owns. It captures the deployment target and a snapshot of the
    process environment taken at creation, so building the same stack
    twice from the same App yields the same declarations.

    Example:
        app = App.from_env(region="ap-northeast-1")
        stack = IvsSimpleStack(app)
    """

    config: AwsConfig = field(default_factory=AwsConfig)
    """Deployment target (region, account, default tags)"""

    environ: Mapping[str, str] = field(default_factory=dict)
    """Snapshot of the environment variables visible to the declarations"""

    @classmethod
    def from_env(cls, region: str | None = None, **kwargs) -> "App":
        """Create an App that sees the current process environment."""
        if region is not None:
            kwargs["region"] = region
        return cls(config=AwsConfig(**kwargs), environ=dict(os.environ))

    @property
    def region(self) -> str:
        return self.config.region

    @property
    def tags(self) -> dict[str, str]:
        return dict(self.config.tags)

    def env_var(self, name: str, default: str = "") -> str:
        """Read a captured environment variable, falling back to ``default``."""
        return self.environ.get(name) or default
