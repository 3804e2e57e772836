"""
Serverless backend for an IVS live-streaming front end.

Two variants share one declaration pass:

- IvsSimpleStack: DynamoDB table + image function + inline policy +
  public function URL. The function sees ``REGION`` and ``TABLE_NAME``.
- IvsMinimalStack: the same without the table. The function sees only
  ``REGION``.

The function URL is exported as ``FunctionUrlOutput``.
"""

from livestack.config.stack import IvsStackConfig, Variant
from livestack.core.app import App
from livestack.core.errors import ConfigurationError
from livestack.core.stack import Stack

OUTPUT_NAME = "FunctionUrlOutput"

STREAMING_ACTIONS = ["ivs:*", "cloudwatch:*"]
STORAGE_ACTIONS = ["dynamodb:*", "ivschat:*"]


class IvsStack(Stack):
    """
    Shared declaration pass for both variants.

    Subclasses choose whether a table is declared. The policy actions
    default to wildcards per service and can be replaced through
    ``IvsStackConfig.actions``; they are never narrowed here.
    """

    default_name = "IvsStack"
    resource_prefix = "IvsSimple"
    with_table = False

    def __init__(
        self,
        app: App,
        name: str | None = None,
        config: IvsStackConfig | None = None,
        tags: dict[str, str] | None = None,
    ):
        super().__init__(app, name or self.default_name, tags=tags)
        self.config = config or IvsStackConfig()
        self.table_handle = None

        environment = {"REGION": app.env_var("region")}

        if self.with_table:
            self.table_handle = self.table(
                f"{self.resource_prefix}Table",
                partition_key=self.config.partition_key,
            )
            environment["TABLE_NAME"] = self.table_handle.table_name

        self.function = self.docker_image_function(
            f"{self.resource_prefix}Function",
            image_path=self.config.image_path,
            platform=self.config.platform,
            architecture=self.config.architecture,
            memory_size=self.config.memory_size,
            timeout=self.config.timeout,
            environment=environment,
            image_tag=self.config.image_tag,
            repository_url=self.config.repository_url,
        )

        self.function.add_to_role_policy(self.policy_actions(), ["*"])

        self.function_url = self.function.add_function_url(
            auth_type="NONE",
            allowed_origins=self.config.allowed_origins,
            allowed_methods=self.config.allowed_methods,
        )

        self.output(OUTPUT_NAME, self.function_url.url, description="Public function URL")

    def policy_actions(self) -> list[str]:
        if self.config.actions is not None:
            return list(self.config.actions)
        if self.with_table:
            return STREAMING_ACTIONS + STORAGE_ACTIONS
        return list(STREAMING_ACTIONS)


class IvsSimpleStack(IvsStack):
    """Storage-enabled variant."""

    default_name = "IvsSimpleStack"
    with_table = True


class IvsMinimalStack(IvsStack):
    """Variant without persistent storage."""

    default_name = "IvsMinimalStack"
    with_table = False


VARIANTS = {
    Variant.SIMPLE.value: IvsSimpleStack,
    Variant.MINIMAL.value: IvsMinimalStack,
}


def build_stack(
    app: App,
    variant: Variant | str = Variant.SIMPLE,
    name: str | None = None,
    config: IvsStackConfig | None = None,
) -> IvsStack:
    """Instantiate the stack class for ``variant``."""
    try:
        stack_cls = VARIANTS[Variant(variant).value]
    except ValueError as e:
        raise ConfigurationError(
            f"Unknown variant: {variant!r} (expected one of: {', '.join(VARIANTS)})"
        ) from e
    return stack_cls(app, name=name, config=config)
