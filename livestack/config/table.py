"""
Configuration for key-value tables (DynamoDB).
"""

from enum import Enum

from pydantic import BaseModel, Field, model_validator

from livestack.config.base import ResourceConfig


class AttributeType(str, Enum):
    """Scalar types a key attribute may have."""

    STRING = "S"
    NUMBER = "N"
    BINARY = "B"


class BillingMode(str, Enum):
    PAY_PER_REQUEST = "PAY_PER_REQUEST"
    PROVISIONED = "PROVISIONED"


class RemovalPolicy(str, Enum):
    """What happens to the physical resource when the stack is torn down."""

    DESTROY = "destroy"
    RETAIN = "retain"


class PartitionKey(BaseModel):
    """Single-attribute partition key."""

    name: str = Field(..., min_length=1, description="Attribute name")
    type: AttributeType = Field(AttributeType.STRING, description="Attribute type")

    class Config:
        frozen = True
        use_enum_values = True
        validate_default = True


class TableConfig(ResourceConfig):
    """
    DynamoDB table configuration.

    Example:
        config = TableConfig(
            partition_key=PartitionKey(name="arn", type=AttributeType.STRING),
            removal_policy=RemovalPolicy.DESTROY,
        )
    """

    partition_key: PartitionKey = Field(..., description="Partition (hash) key")
    billing_mode: BillingMode = Field(
        BillingMode.PAY_PER_REQUEST,
        description="Capacity mode; on-demand needs no throughput sizing"
    )
    read_capacity: int | None = Field(
        None, ge=1, description="Read capacity units (PROVISIONED only)"
    )
    write_capacity: int | None = Field(
        None, ge=1, description="Write capacity units (PROVISIONED only)"
    )
    removal_policy: RemovalPolicy = Field(
        RemovalPolicy.DESTROY,
        description="Destroy or retain the table on stack teardown"
    )
    tags: dict[str, str] = Field(default_factory=dict, description="Resource tags")

    @model_validator(mode="after")
    def check_capacity(self) -> "TableConfig":
        has_capacity = self.read_capacity is not None or self.write_capacity is not None
        if self.billing_mode == BillingMode.PROVISIONED:
            if self.read_capacity is None or self.write_capacity is None:
                raise ValueError(
                    "PROVISIONED billing requires both read_capacity and write_capacity"
                )
        elif has_capacity:
            raise ValueError("read_capacity/write_capacity are only valid with PROVISIONED billing")
        return self
