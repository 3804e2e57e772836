"""
Provider-level configuration for the deployment target.
"""

from pydantic import BaseModel, Field

DEFAULT_REGION = "ap-northeast-1"


class AwsConfig(BaseModel):
    """
    AWS deployment target.

    Example:
        aws_config = AwsConfig(
            region="ap-northeast-1",
            profile="streaming",
            tags={"managed_by": "livestack"}
        )

        app = App(config=aws_config)
    """

    region: str = Field(default=DEFAULT_REGION, min_length=1, description="AWS region")
    profile: str | None = Field(default=None, description="AWS profile name")
    account_id: str | None = Field(default=None, description="AWS account ID")
    tags: dict[str, str] = Field(
        default_factory=dict, description="Default tags for all resources"
    )

    class Config:
        extra = "forbid"
