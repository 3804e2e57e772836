"""
Configuration for container-image functions and their public URLs.
"""

import re
from enum import Enum

from pydantic import Field, field_validator, model_validator

from livestack.config.base import ResourceConfig
from livestack.core.resource import GeneratedValue

_ENV_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class Architecture(str, Enum):
    """Instruction set the function runs on."""

    ARM_64 = "arm64"
    X86_64 = "x86_64"


class Platform(str, Enum):
    """Platform the function image is built for."""

    LINUX_ARM64 = "linux/arm64"
    LINUX_AMD64 = "linux/amd64"


PLATFORM_ARCHITECTURES = {
    Platform.LINUX_ARM64.value: Architecture.ARM_64.value,
    Platform.LINUX_AMD64.value: Architecture.X86_64.value,
}


class AuthType(str, Enum):
    NONE = "NONE"
    AWS_IAM = "AWS_IAM"


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"
    ALL = "*"


class FunctionConfig(ResourceConfig):
    """
    Container-image Lambda function configuration.

    Environment values may be literal strings or GeneratedValue references,
    e.g. a table's generated name.

    Example:
        config = FunctionConfig(
            image_path="app",
            platform=Platform.LINUX_ARM64,
            architecture=Architecture.ARM_64,
            memory_size=128,
            timeout=30,
            environment={"TABLE_NAME": table.table_name},
        )
    """

    image_path: str = Field(..., min_length=1, description="Directory holding the image's Dockerfile")
    platform: Platform = Field(Platform.LINUX_ARM64, description="Image build platform")
    architecture: Architecture = Field(Architecture.ARM_64, description="Function architecture")
    memory_size: int = Field(128, ge=128, le=10240, description="Memory allocation in MB")
    timeout: int = Field(30, ge=1, le=900, description="Timeout in seconds")
    environment: dict[str, str | GeneratedValue] = Field(
        default_factory=dict, description="Environment variables"
    )
    image_tag: str = Field("latest", min_length=1, description="Image tag to deploy")
    repository_url: str | None = Field(
        None, description="Existing image repository; one is created when omitted"
    )
    tags: dict[str, str] = Field(default_factory=dict, description="Resource tags")

    @field_validator("environment")
    @classmethod
    def check_environment_names(cls, value: dict) -> dict:
        for name in value:
            if not _ENV_NAME.match(name):
                raise ValueError(f"Invalid environment variable name: {name!r}")
        return value

    @model_validator(mode="after")
    def check_platform_matches_architecture(self) -> "FunctionConfig":
        expected = PLATFORM_ARCHITECTURES[self.platform]
        if self.architecture != expected:
            raise ValueError(
                f"Image platform {self.platform} builds for {expected}, "
                f"but the function architecture is {self.architecture}"
            )
        return self


class CorsConfig(ResourceConfig):
    """Cross-origin rules for a function URL."""

    allowed_origins: list[str] = Field(default_factory=lambda: ["*"], min_length=1)
    allowed_methods: list[HttpMethod] = Field(
        default_factory=lambda: [HttpMethod.GET, HttpMethod.POST], min_length=1
    )
    allowed_headers: list[str] = Field(default_factory=list)
    max_age: int | None = Field(None, ge=0, le=86400, description="Preflight cache seconds")


class FunctionUrlConfig(ResourceConfig):
    """
    Public HTTPS invocation URL for a function.

    Example:
        config = FunctionUrlConfig(
            function=fn.function_name,
            auth_type=AuthType.NONE,
            cors=CorsConfig(allowed_origins=["*"], allowed_methods=[HttpMethod.GET]),
        )
    """

    function: GeneratedValue = Field(..., description="Name of the function to expose")
    auth_type: AuthType = Field(AuthType.NONE, description="NONE makes the URL public")
    cors: CorsConfig = Field(default_factory=CorsConfig)
