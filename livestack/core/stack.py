"""
Stack: the resource-graph composer.

A Stack collects resource declarations, derives their dependency edges
from the GeneratedValue references in their configuration, orders them,
and hands them one by one to a provisioning engine, resolving every
reference from the values the engine returned for earlier declarations.
"""

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Iterable

from pydantic import ValidationError

from livestack.config.iam import Effect, PolicyStatementConfig
from livestack.config.serverless import (
    PLATFORM_ARCHITECTURES,
    Architecture,
    AuthType,
    CorsConfig,
    FunctionConfig,
    FunctionUrlConfig,
    HttpMethod,
    Platform,
)
from livestack.config.table import (
    AttributeType,
    BillingMode,
    PartitionKey,
    RemovalPolicy,
    TableConfig,
)
from livestack.core.app import App
from livestack.core.errors import (
    ConfigurationError,
    GraphConstructionError,
    LivestackError,
    ProvisioningFailure,
)
from livestack.core.graph import ResourceGraph
from livestack.core.handles import (
    AccessStatement,
    ExecutionIdentity,
    FunctionHandle,
    FunctionUrlHandle,
    TableHandle,
)
from livestack.core.resource import (
    GeneratedValue,
    ResourceDeclaration,
    ResourceKind,
    ResourceState,
    resolve_value,
)

if TYPE_CHECKING:
    from livestack.provisioning.engine import ProvisioningEngine

logger = logging.getLogger(__name__)

TABLE_ATTRIBUTES = ("table_name", "table_arn")
FUNCTION_ATTRIBUTES = ("function_name", "function_arn", "role_name", "role_arn")
POLICY_ATTRIBUTES = ("policy_name",)
FUNCTION_URL_ATTRIBUTES = ("url",)


def _build_config(config_cls, **kwargs):
    try:
        return config_cls(**kwargs)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid {config_cls.__name__}: {e}") from e


class Output:
    """
    A named, user-visible value bound to one GeneratedValue.

    The value can only be read once the owning declaration is realized.
    """

    def __init__(self, name: str, source: GeneratedValue, owner: ResourceDeclaration,
                 description: str | None = None):
        self.name = name
        self.source = source
        self.description = description
        self._owner = owner

    @property
    def is_resolved(self) -> bool:
        return self._owner.is_realized

    @property
    def value(self) -> Any:
        """The realized value. Raises UnresolvedValueError before realization."""
        return self._owner.value(self.source.attribute)

    def __repr__(self) -> str:
        return f"Output('{self.name}', {self.source})"


@dataclass
class SynthesizedStack:
    """The ordered resource graph of a stack, ready for an engine."""

    stack_name: str
    region: str
    order: list[str]
    """Realization order; every declaration follows its dependencies"""

    levels: list[list[str]]
    """Groups of declarations that may be realized in parallel"""

    edges: list[tuple[str, str]]
    outputs: dict[str, str] = field(default_factory=dict)
    """Output name -> placeholder of the generated value it binds"""

    kinds: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "stack": self.stack_name,
            "region": self.region,
            "order": list(self.order),
            "levels": [list(level) for level in self.levels],
            "resources": {
                logical_id: {"kind": self.kinds[logical_id]} for logical_id in self.order
            },
            "edges": [{"from": a, "to": b} for a, b in self.edges],
            "outputs": dict(self.outputs),
        }


@dataclass
class RealizedStack:
    """Result of a successful realization."""

    stack_name: str
    order: list[str]
    outputs: dict[str, Any] = field(default_factory=dict)

    def get_output(self, name: str) -> Any | None:
        return self.outputs.get(name)


class Stack:
    """
    Container and composer for a graph of resource declarations.

    Builder methods (table, docker_image_function, add_to_role_policy,
    add_function_url, output) add declarations and return handles whose
    attributes are GeneratedValue references. Passing such a reference
    into another builder creates a dependency edge; referencing a
    declaration that is not in the graph fails immediately.

    Example:
        app = App.from_env(region="ap-northeast-1")
        stack = Stack(app, "Streaming")

        table = stack.table("Table", partition_key="arn")
        fn = stack.docker_image_function(
            "Function",
            image_path="app",
            environment={"TABLE_NAME": table.table_name},
        )
        stack.add_to_role_policy(fn.identity, ["ivs:*"])
        url = stack.add_function_url(fn)
        stack.output("FunctionUrlOutput", url.url)

        result = stack.realize(DryRunEngine())
        result.outputs["FunctionUrlOutput"]
    """

    def __init__(self, app: App, name: str, tags: dict[str, str] | None = None):
        if not name:
            raise ConfigurationError("Stack name must not be empty")
        self.app = app
        self.name = name
        self.tags = {**app.tags, **(tags or {})}
        self.graph = ResourceGraph()
        self._outputs: dict[str, Output] = {}
        self._sealed = False

    @property
    def region(self) -> str:
        return self.app.region

    @property
    def declarations(self) -> list[ResourceDeclaration]:
        """Declarations in the order they were added."""
        return [node.declaration for node in self.graph.nodes.values()]

    @property
    def outputs(self) -> dict[str, Output]:
        return dict(self._outputs)

    def get_declaration(self, logical_id: str) -> ResourceDeclaration | None:
        node = self.graph.nodes.get(logical_id)
        return node.declaration if node else None

    # ------------------------------------------------------------------
    # Graph construction
    # ------------------------------------------------------------------

    def add(self, declaration: ResourceDeclaration) -> ResourceDeclaration:
        """
        Add a declaration to the graph and wire its dependency edges.

        Raises:
            GraphConstructionError: If the stack is already synthesized, the
                logical id is taken, or a reference points at a declaration
                (or attribute) that does not exist
        """
        if self._sealed:
            raise GraphConstructionError(
                f"Stack '{self.name}' is already synthesized; cannot add '{declaration.logical_id}'"
            )
        if declaration.logical_id in self.graph:
            raise GraphConstructionError(f"Duplicate logical id '{declaration.logical_id}'")

        for ref in declaration.references:
            self._check_reference(declaration.logical_id, ref)
        for dep in declaration.explicit_dependencies:
            if dep not in self.graph:
                raise GraphConstructionError(
                    f"'{declaration.logical_id}' depends on undeclared resource '{dep}'"
                )

        self.graph.add_node(declaration)
        for dep in declaration.dependencies:
            self.graph.add_edge(dep, declaration.logical_id)

        logger.debug(
            "Declared %s '%s' (depends on: %s)",
            declaration.kind.value,
            declaration.logical_id,
            ", ".join(declaration.dependencies) or "nothing",
        )
        return declaration

    def _check_reference(self, logical_id: str, ref: GeneratedValue) -> None:
        if ref.resource_id not in self.graph:
            raise GraphConstructionError(
                f"'{logical_id}' references {ref}, but '{ref.resource_id}' "
                f"is not declared in stack '{self.name}'"
            )
        owner = self.graph.nodes[ref.resource_id].declaration
        if ref.attribute not in owner.generates:
            raise GraphConstructionError(
                f"'{logical_id}' references {ref}, but '{ref.resource_id}' "
                f"does not generate '{ref.attribute}'"
            )

    def table(
        self,
        logical_id: str,
        partition_key: str,
        key_type: AttributeType | str = AttributeType.STRING,
        billing_mode: BillingMode | str = BillingMode.PAY_PER_REQUEST,
        removal_policy: RemovalPolicy | str = RemovalPolicy.DESTROY,
        read_capacity: int | None = None,
        write_capacity: int | None = None,
    ) -> TableHandle:
        """
        Declare a key-value table keyed by a single attribute.

        Returns:
            TableHandle exposing the generated table name and ARN
        """
        try:
            key = PartitionKey(name=partition_key, type=key_type)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid partition key: {e}") from e

        config = _build_config(
            TableConfig,
            partition_key=key,
            billing_mode=billing_mode,
            removal_policy=removal_policy,
            read_capacity=read_capacity,
            write_capacity=write_capacity,
            tags=self.tags,
        )
        declaration = self.add(
            ResourceDeclaration(logical_id, ResourceKind.TABLE, config, TABLE_ATTRIBUTES)
        )
        return TableHandle(declaration)

    def docker_image_function(
        self,
        logical_id: str,
        image_path: str,
        architecture: Architecture | str = Architecture.ARM_64,
        platform: Platform | str | None = None,
        memory_size: int = 128,
        timeout: int = 30,
        environment: dict[str, str | GeneratedValue] | None = None,
        image_tag: str = "latest",
        repository_url: str | None = None,
    ) -> FunctionHandle:
        """
        Declare a function built from a container image.

        ``platform`` defaults to the Linux platform matching
        ``architecture``; an explicit platform that does not match is
        rejected.

        Returns:
            FunctionHandle exposing the execution identity and the
            function's generated name and ARN
        """
        if platform is None:
            try:
                arch = Architecture(architecture).value
            except ValueError as e:
                raise ConfigurationError(f"Unknown architecture: {architecture!r}") from e
            platform = next(
                (p for p, a in PLATFORM_ARCHITECTURES.items() if a == arch),
                Platform.LINUX_ARM64.value,
            )

        config = _build_config(
            FunctionConfig,
            image_path=image_path,
            platform=platform,
            architecture=architecture,
            memory_size=memory_size,
            timeout=timeout,
            environment=dict(environment or {}),
            image_tag=image_tag,
            repository_url=repository_url,
            tags=self.tags,
        )
        declaration = self.add(
            ResourceDeclaration(logical_id, ResourceKind.FUNCTION, config, FUNCTION_ATTRIBUTES)
        )
        return FunctionHandle(declaration, self)

    def add_to_role_policy(
        self,
        identity: ExecutionIdentity,
        actions: Iterable[str],
        resources: Iterable[str] = ("*",),
        effect: Effect | str = Effect.ALLOW,
    ) -> None:
        """
        Attach an access statement to an execution identity.

        Every call adds a new statement; overlapping or identical
        statements are kept as they are.
        """
        try:
            effect = Effect(effect).value
        except ValueError as e:
            raise ConfigurationError(f"Unknown effect: {effect!r}") from e
        statement = AccessStatement(
            actions=tuple(actions),
            resources=tuple(resources),
            effect=effect,
        )
        config = _build_config(
            PolicyStatementConfig,
            role=identity.role_name,
            actions=list(statement.actions),
            resources=list(statement.resources),
            effect=statement.effect,
        )
        logical_id = f"{identity.owner}Policy{len(identity.statements) + 1}"
        self.add(ResourceDeclaration(logical_id, ResourceKind.POLICY, config, POLICY_ATTRIBUTES))
        identity.statements.append(statement)

    def add_function_url(
        self,
        function: FunctionHandle,
        auth_type: AuthType | str = AuthType.NONE,
        allowed_origins: Iterable[str] = ("*",),
        allowed_methods: Iterable[HttpMethod | str] = (HttpMethod.GET, HttpMethod.POST),
    ) -> FunctionUrlHandle:
        """
        Expose a function over an HTTPS invocation URL.

        Returns:
            FunctionUrlHandle exposing the generated URL
        """
        cors = _build_config(
            CorsConfig,
            allowed_origins=list(allowed_origins),
            allowed_methods=list(allowed_methods),
        )
        config = _build_config(
            FunctionUrlConfig,
            function=function.function_name,
            auth_type=auth_type,
            cors=cors,
        )
        declaration = self.add(
            ResourceDeclaration(
                f"{function.logical_id}Url",
                ResourceKind.FUNCTION_URL,
                config,
                FUNCTION_URL_ATTRIBUTES,
            )
        )
        return FunctionUrlHandle(declaration)

    def output(self, name: str, value: GeneratedValue, description: str | None = None) -> Output:
        """
        Bind a named output to a generated value.

        Raises:
            GraphConstructionError: If the name is taken or the value's
                owner is not declared in this stack
        """
        if self._sealed:
            raise GraphConstructionError(f"Stack '{self.name}' is already synthesized")
        if not isinstance(value, GeneratedValue):
            raise GraphConstructionError(
                f"Output '{name}' must be bound to a generated value, got {type(value).__name__}"
            )
        if name in self._outputs:
            raise GraphConstructionError(f"Duplicate output '{name}'")
        self._check_reference(f"output {name}", value)

        output = Output(name, value, self.graph.nodes[value.resource_id].declaration, description)
        self._outputs[name] = output
        return output

    # ------------------------------------------------------------------
    # Ordering and realization
    # ------------------------------------------------------------------

    def validate(self) -> list[str]:
        """
        Check the graph without touching any declaration state.

        Returns:
            The realization order

        Raises:
            GraphConstructionError: On cycles or dangling references
        """
        for declaration in self.declarations:
            for ref in declaration.references:
                self._check_reference(declaration.logical_id, ref)
        for output in self._outputs.values():
            self._check_reference(f"output {output.name}", output.source)
        return self.graph.topological_sort()

    def synth(self) -> SynthesizedStack:
        """
        Order the graph and seal the stack against further declarations.

        Every declaration moves from Declared to Ordered.
        """
        order = self.validate()
        for logical_id in order:
            self.graph.nodes[logical_id].declaration.mark_ordered()
        self._sealed = True

        logger.debug("Synthesized stack '%s': %s", self.name, " -> ".join(order))
        return SynthesizedStack(
            stack_name=self.name,
            region=self.region,
            order=order,
            levels=self.graph.get_levels(),
            edges=self.graph.edges(),
            outputs={name: str(o.source) for name, o in self._outputs.items()},
            kinds={d.logical_id: d.kind.value for d in self.declarations},
        )

    def realize(self, engine: "ProvisioningEngine") -> RealizedStack:
        """
        Realize every declaration through ``engine`` in dependency order.

        A declaration is handed to the engine only after all of its
        dependencies are realized, with every GeneratedValue in its
        configuration replaced by the realized value.

        Raises:
            GraphConstructionError: If the graph is invalid
            ProvisioningFailure: If the engine fails for any declaration or
                while exporting an output
        """
        if any(d.is_realized for d in self.declarations):
            raise LivestackError(f"Stack '{self.name}' has already been realized")

        synthesized = self.synth()
        logger.info(
            "Realizing stack '%s' (%d resources) with %s",
            self.name, len(synthesized.order), engine.name,
        )

        for logical_id in synthesized.order:
            declaration = self.graph.nodes[logical_id].declaration
            pending = [
                dep for dep in declaration.dependencies
                if not self.graph.nodes[dep].declaration.is_realized
            ]
            if pending:
                raise GraphConstructionError(
                    f"'{logical_id}' reached realization before {', '.join(pending)}"
                )

            inputs = resolve_value(declaration.config.model_dump(), self._lookup)
            try:
                values = engine.realize(declaration, inputs)
                declaration.mark_realized(values)
            except ProvisioningFailure:
                raise
            except Exception as e:
                raise ProvisioningFailure(logical_id, str(e)) from e
            logger.info("Realized %s '%s'", declaration.kind.value, logical_id)

        outputs = {name: output.value for name, output in self._outputs.items()}
        for name, output in self._outputs.items():
            try:
                engine.export(name, outputs[name])
            except Exception as e:
                raise ProvisioningFailure(
                    output.source.resource_id, f"exporting output '{name}' failed: {e}"
                ) from e

        return RealizedStack(stack_name=self.name, order=synthesized.order, outputs=outputs)

    def _lookup(self, ref: GeneratedValue) -> Any:
        return self.graph.nodes[ref.resource_id].declaration.value(ref.attribute)

    def state_of(self, logical_id: str) -> ResourceState:
        return self.graph.nodes[logical_id].declaration.state

    def __repr__(self) -> str:
        return f"Stack(name='{self.name}', region='{self.region}', resources={len(self.graph)})"
