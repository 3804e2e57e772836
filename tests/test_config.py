"""
Tests for configuration records and the YAML deployment loader.
"""

import pytest
from pydantic import ValidationError

from livestack.config import (
    Architecture,
    BillingMode,
    CorsConfig,
    FunctionConfig,
    PartitionKey,
    Platform,
    PolicyStatementConfig,
    TableConfig,
    Variant,
    load_config,
    parse_config,
    policy_document,
)
from livestack.core.errors import ConfigurationError
from livestack.core.resource import GeneratedValue
from livestack.stacks.ivs import build_stack


class TestTableConfig:
    """Tests for TableConfig validation."""

    def test_defaults(self):
        config = TableConfig(partition_key=PartitionKey(name="arn"))

        assert config.billing_mode == "PAY_PER_REQUEST"
        assert config.removal_policy == "destroy"
        assert config.partition_key.type == "S"

    def test_provisioned_requires_capacity(self):
        """PROVISIONED billing needs both capacities."""
        with pytest.raises(ValidationError, match="read_capacity and write_capacity"):
            TableConfig(
                partition_key=PartitionKey(name="arn"),
                billing_mode=BillingMode.PROVISIONED,
                read_capacity=5,
            )

    def test_capacity_rejected_on_demand(self):
        with pytest.raises(ValidationError, match="only valid with PROVISIONED"):
            TableConfig(partition_key=PartitionKey(name="arn"), read_capacity=5)

    def test_provisioned(self):
        config = TableConfig(
            partition_key=PartitionKey(name="arn"),
            billing_mode=BillingMode.PROVISIONED,
            read_capacity=5,
            write_capacity=5,
        )

        assert config.read_capacity == 5

    def test_frozen(self):
        """Records cannot change after construction."""
        config = TableConfig(partition_key=PartitionKey(name="arn"))

        with pytest.raises(ValidationError):
            config.billing_mode = BillingMode.PROVISIONED

    def test_unknown_field(self):
        with pytest.raises(ValidationError):
            TableConfig(partition_key=PartitionKey(name="arn"), sort_key="ts")


class TestFunctionConfig:
    """Tests for FunctionConfig validation."""

    def test_defaults(self):
        config = FunctionConfig(image_path="app")

        assert config.platform == "linux/arm64"
        assert config.architecture == "arm64"
        assert config.memory_size == 128
        assert config.timeout == 30
        assert config.repository_url is None

    def test_x86(self):
        config = FunctionConfig(
            image_path="app",
            platform=Platform.LINUX_AMD64,
            architecture=Architecture.X86_64,
        )

        assert config.architecture == "x86_64"

    def test_platform_architecture_mismatch(self):
        """An arm64 image cannot run on an x86_64 function."""
        with pytest.raises(ValidationError, match="builds for arm64"):
            FunctionConfig(
                image_path="app",
                platform=Platform.LINUX_ARM64,
                architecture=Architecture.X86_64,
            )

    @pytest.mark.parametrize("memory_size", [64, 10241])
    def test_memory_bounds(self, memory_size):
        with pytest.raises(ValidationError):
            FunctionConfig(image_path="app", memory_size=memory_size)

    def test_timeout_bounds(self):
        with pytest.raises(ValidationError):
            FunctionConfig(image_path="app", timeout=901)

    def test_environment_accepts_references(self):
        table_name = GeneratedValue("Table", "table_name")
        config = FunctionConfig(image_path="app", environment={"TABLE_NAME": table_name})

        assert config.environment["TABLE_NAME"] == table_name

    def test_invalid_environment_name(self):
        with pytest.raises(ValidationError, match="Invalid environment variable name"):
            FunctionConfig(image_path="app", environment={"TABLE-NAME": "x"})

    def test_empty_image_path(self):
        with pytest.raises(ValidationError):
            FunctionConfig(image_path="")


class TestCorsConfig:
    """Tests for CorsConfig."""

    def test_defaults(self):
        cors = CorsConfig()

        assert cors.allowed_origins == ["*"]
        assert cors.allowed_methods == ["GET", "POST"]

    def test_unknown_method(self):
        with pytest.raises(ValidationError):
            CorsConfig(allowed_methods=["FETCH"])


class TestPolicyStatementConfig:
    """Tests for access statement validation."""

    def test_wildcards_kept(self):
        """Service wildcards are passed through unchanged."""
        config = PolicyStatementConfig(
            role=GeneratedValue("Function", "role_name"),
            actions=["ivs:*", "cloudwatch:*"],
        )

        assert config.actions == ["ivs:*", "cloudwatch:*"]
        assert config.resources == ["*"]
        assert config.effect == "Allow"

    def test_requires_actions(self):
        with pytest.raises(ValidationError):
            PolicyStatementConfig(role=GeneratedValue("Function", "role_name"), actions=[])

    @pytest.mark.parametrize("action", ["ivs", "ivs:", "IVS:*", "ivs:* "])
    def test_invalid_action(self, action):
        with pytest.raises(ValidationError, match="Invalid action pattern"):
            PolicyStatementConfig(role=GeneratedValue("Function", "role_name"), actions=[action])

    def test_policy_document(self):
        document = policy_document(["ivs:*"], ["*"])

        assert document == {
            "Version": "2012-10-17",
            "Statement": [{"Effect": "Allow", "Action": ["ivs:*"], "Resource": ["*"]}],
        }


class TestDeploymentConfig:
    """Tests for loading deployment configuration."""

    def test_minimal_config(self):
        deployment = parse_config({"region": "ap-northeast-1"})

        assert deployment.region == "ap-northeast-1"
        assert deployment.variant == Variant.SIMPLE.value
        assert deployment.stack_name is None
        assert deployment.function.memory_size == 128

    def test_missing_region(self):
        with pytest.raises(ConfigurationError, match="region"):
            parse_config({"variant": "minimal"})

    def test_not_a_mapping(self):
        with pytest.raises(ConfigurationError, match="mapping"):
            parse_config(["region"])

    def test_invalid_values(self):
        """Pydantic errors are reported as configuration errors."""
        with pytest.raises(ConfigurationError, match="Invalid deployment configuration"):
            parse_config({"region": "ap-northeast-1", "function": {"memory_size": 64}})

    def test_unknown_variant(self):
        with pytest.raises(ConfigurationError):
            parse_config({"region": "ap-northeast-1", "variant": "huge"})

    def test_aws_config(self):
        deployment = parse_config({
            "region": "eu-west-1",
            "account_id": "111122223333",
            "tags": {"team": "streaming"},
        })

        aws_config = deployment.aws_config()

        assert aws_config.region == "eu-west-1"
        assert aws_config.account_id == "111122223333"
        assert aws_config.tags == {"team": "streaming"}

    def test_load_yaml(self, tmp_path):
        config_file = tmp_path / "livestack.yaml"
        config_file.write_text(
            "region: ap-northeast-1\n"
            "variant: minimal\n"
            "stack_name: Streaming\n"
            "function:\n"
            "  memory_size: 256\n"
            "  actions: ['ivs:GetChannel']\n"
        )

        deployment = load_config(config_file)

        assert deployment.variant == "minimal"
        assert deployment.stack_name == "Streaming"
        assert deployment.function.memory_size == 256
        assert deployment.function.actions == ["ivs:GetChannel"]

    def test_load_architecture_override(self, tmp_path, app):
        """A deployment file may switch the architecture alone."""
        config_file = tmp_path / "livestack.yaml"
        config_file.write_text("region: ap-northeast-1\nfunction:\n  architecture: x86_64\n")

        deployment = load_config(config_file)
        stack = build_stack(app, deployment.variant, config=deployment.function)

        assert deployment.function.platform is None
        assert stack.function.declaration.config.platform == "linux/amd64"

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Cannot read"):
            load_config(tmp_path / "missing.yaml")

    def test_load_invalid_yaml(self, tmp_path):
        config_file = tmp_path / "broken.yaml"
        config_file.write_text("region: [ap-northeast-1\n")

        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_config(config_file)

    def test_load_empty_file(self, tmp_path):
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("")

        with pytest.raises(ConfigurationError, match="mapping"):
            load_config(config_file)
