"""
YAML deployment configuration.

A deployment file selects the region and variant and tunes the stack:

    region: ap-northeast-1
    variant: simple
    stack_name: IvsSimpleStack
    tags:
      team: streaming
    function:
      memory_size: 256
      timeout: 30
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from livestack.config.provider import AwsConfig
from livestack.config.stack import IvsStackConfig, Variant
from livestack.core.errors import ConfigurationError

REQUIRED_KEYS = ("region",)


class DeploymentConfig(BaseModel):
    """Everything the entrypoint needs to build and deploy one stack."""

    region: str = Field(..., min_length=1)
    variant: Variant = Field(Variant.SIMPLE)
    stack_name: str | None = Field(None, description="Defaults to the variant's stack name")
    profile: str | None = None
    account_id: str | None = None
    tags: dict[str, str] = Field(default_factory=dict)
    function: IvsStackConfig = Field(default_factory=IvsStackConfig)

    class Config:
        extra = "forbid"
        use_enum_values = True
        validate_default = True

    def aws_config(self) -> AwsConfig:
        return AwsConfig(
            region=self.region,
            profile=self.profile,
            account_id=self.account_id,
            tags=self.tags,
        )


def parse_config(data: Any) -> DeploymentConfig:
    """Validate raw configuration data."""
    if not isinstance(data, dict):
        raise ConfigurationError("Deployment configuration must be a mapping")

    for key in REQUIRED_KEYS:
        if key not in data:
            raise ConfigurationError(f"Missing required configuration key: {key}")

    try:
        return DeploymentConfig(**data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid deployment configuration: {e}") from e


def load_config(file_path: str | Path) -> DeploymentConfig:
    """Load and validate a YAML deployment configuration file."""
    path = Path(file_path)
    try:
        with open(path, "r") as file:
            data = yaml.safe_load(file)
    except OSError as e:
        raise ConfigurationError(f"Cannot read configuration file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e

    return parse_config(data)
