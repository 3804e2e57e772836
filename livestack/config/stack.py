"""
Settings for the live-streaming backend stacks.
"""

from enum import Enum

from pydantic import BaseModel, Field

from livestack.config.serverless import Architecture, HttpMethod, Platform


class Variant(str, Enum):
    """Which stack to build."""

    SIMPLE = "simple"
    MINIMAL = "minimal"


class IvsStackConfig(BaseModel):
    """
    Tunables for IvsSimpleStack and IvsMinimalStack.

    Defaults reproduce the deployed backend. ``actions`` replaces the
    variant's default policy actions when set.
    """

    image_path: str = Field("app", min_length=1, description="Function image directory")
    image_tag: str = Field("latest", min_length=1)
    repository_url: str | None = Field(None, description="Pre-existing image repository")
    platform: Platform | None = Field(
        None, description="Image build platform; derived from the architecture when unset"
    )
    architecture: Architecture = Field(Architecture.ARM_64)
    memory_size: int = Field(128, ge=128, le=10240)
    timeout: int = Field(30, ge=1, le=900)
    partition_key: str = Field("arn", min_length=1, description="Table partition key")
    actions: list[str] | None = Field(None, description="Override for policy actions")
    allowed_origins: list[str] = Field(default_factory=lambda: ["*"])
    allowed_methods: list[HttpMethod] = Field(
        default_factory=lambda: [HttpMethod.GET, HttpMethod.POST]
    )

    class Config:
        extra = "forbid"
        use_enum_values = True
        validate_default = True
