"""
Handles returned by the Stack builder methods.

A handle wraps the declaration it was created from and exposes that
declaration's generated attributes as GeneratedValue references.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable

from livestack.core.resource import GeneratedValue, ResourceDeclaration

if TYPE_CHECKING:
    from livestack.config.serverless import AuthType, HttpMethod
    from livestack.core.stack import Stack


@dataclass(frozen=True)
class AccessStatement:
    """A permission grant: effect on actions over resources."""

    actions: tuple[str, ...]
    resources: tuple[str, ...]
    effect: str = "Allow"


class Handle:
    """Base class for builder results."""

    def __init__(self, declaration: ResourceDeclaration):
        self.declaration = declaration

    @property
    def logical_id(self) -> str:
        return self.declaration.logical_id

    def __repr__(self) -> str:
        return f"{type(self).__name__}('{self.logical_id}')"


class TableHandle(Handle):
    """A declared key-value table."""

    @property
    def table_name(self) -> GeneratedValue:
        """Physical table name, generated at provisioning time."""
        return self.declaration.ref("table_name")

    @property
    def table_arn(self) -> GeneratedValue:
        return self.declaration.ref("table_arn")


@dataclass
class ExecutionIdentity:
    """
    The role a function runs as.

    Statements attached through Stack.add_to_role_policy accumulate
    here in attachment order; nothing removes or merges them.
    """

    owner: str
    role_name: GeneratedValue
    role_arn: GeneratedValue
    statements: list[AccessStatement] = field(default_factory=list)


class FunctionHandle(Handle):
    """A declared container-image function."""

    def __init__(self, declaration: ResourceDeclaration, stack: "Stack"):
        super().__init__(declaration)
        self._stack = stack
        self.identity = ExecutionIdentity(
            owner=declaration.logical_id,
            role_name=declaration.ref("role_name"),
            role_arn=declaration.ref("role_arn"),
        )

    @property
    def function_name(self) -> GeneratedValue:
        return self.declaration.ref("function_name")

    @property
    def function_arn(self) -> GeneratedValue:
        return self.declaration.ref("function_arn")

    def add_to_role_policy(
        self,
        actions: Iterable[str],
        resources: Iterable[str] = ("*",),
    ) -> None:
        """Attach a statement to this function's execution role."""
        self._stack.add_to_role_policy(self.identity, actions, resources)

    def add_function_url(
        self,
        auth_type: "AuthType | str" = "NONE",
        allowed_origins: Iterable[str] = ("*",),
        allowed_methods: Iterable["HttpMethod | str"] = ("GET", "POST"),
    ) -> "FunctionUrlHandle":
        """Expose this function over a public HTTPS URL."""
        return self._stack.add_function_url(
            self,
            auth_type=auth_type,
            allowed_origins=allowed_origins,
            allowed_methods=allowed_methods,
        )


class FunctionUrlHandle(Handle):
    """A declared public invocation URL."""

    @property
    def url(self) -> GeneratedValue:
        return self.declaration.ref("url")
