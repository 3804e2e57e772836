"""
Typed configuration records for livestack resources and deployments.
"""

from livestack.config.table import (
    AttributeType,
    BillingMode,
    PartitionKey,
    RemovalPolicy,
    TableConfig,
)
from livestack.config.serverless import (
    Architecture,
    AuthType,
    CorsConfig,
    FunctionConfig,
    FunctionUrlConfig,
    HttpMethod,
    Platform,
)
from livestack.config.iam import (
    Effect,
    PolicyStatementConfig,
    policy_document,
)
from livestack.config.provider import AwsConfig
from livestack.config.stack import IvsStackConfig, Variant
from livestack.config.loader import DeploymentConfig, load_config, parse_config

__all__ = [
    # Table configs
    "AttributeType",
    "BillingMode",
    "PartitionKey",
    "RemovalPolicy",
    "TableConfig",
    # Serverless configs
    "Architecture",
    "AuthType",
    "CorsConfig",
    "FunctionConfig",
    "FunctionUrlConfig",
    "HttpMethod",
    "Platform",
    # Access configs
    "Effect",
    "PolicyStatementConfig",
    "policy_document",
    # Deployment configs
    "AwsConfig",
    "IvsStackConfig",
    "Variant",
    "DeploymentConfig",
    "load_config",
    "parse_config",
]
