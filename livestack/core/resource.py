"""
Resource declarations and the generated values that flow between them.

A ResourceDeclaration describes one infrastructure resource before it
exists. Attributes that only the provisioning engine can produce (a
table's physical name, a function's URL) are represented by
GeneratedValue placeholders, which other declarations reference instead
of copying.
"""

from enum import Enum
from typing import Any, Iterator

from pydantic import BaseModel

from livestack.core.errors import GraphConstructionError, UnresolvedValueError


class ResourceKind(Enum):
    """Kinds of resources the composer knows how to declare."""

    TABLE = "table"
    FUNCTION = "function"
    POLICY = "policy"
    FUNCTION_URL = "function_url"


class ResourceState(Enum):
    """Lifecycle of a declaration: Declared -> Ordered -> Realized."""

    DECLARED = "declared"
    ORDERED = "ordered"
    REALIZED = "realized"


class GeneratedValue:
    """
    Placeholder for an attribute known only after provisioning.

    A GeneratedValue names its owner by logical id and is resolved by the
    composer once the owner is realized. Two references to the same
    attribute of the same resource compare equal.
    """

    __slots__ = ("resource_id", "attribute")

    def __init__(self, resource_id: str, attribute: str):
        self.resource_id = resource_id
        self.attribute = attribute

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GeneratedValue):
            return NotImplemented
        return (self.resource_id, self.attribute) == (other.resource_id, other.attribute)

    def __hash__(self) -> int:
        return hash((self.resource_id, self.attribute))

    def __str__(self) -> str:
        return f"${{{self.resource_id}.{self.attribute}}}"

    def __repr__(self) -> str:
        return f"GeneratedValue({self.resource_id!r}, {self.attribute!r})"


def find_references(value: Any) -> Iterator[GeneratedValue]:
    """Yield every GeneratedValue nested inside a config value."""
    if isinstance(value, GeneratedValue):
        yield value
    elif isinstance(value, BaseModel):
        for field_name in type(value).model_fields:
            yield from find_references(getattr(value, field_name))
    elif isinstance(value, dict):
        for item in value.values():
            yield from find_references(item)
    elif isinstance(value, (list, tuple, set, frozenset)):
        for item in value:
            yield from find_references(item)


def resolve_value(value: Any, lookup) -> Any:
    """
    Replace GeneratedValue placeholders with their realized values.

    Args:
        value: Plain data (dicts, lists, scalars) possibly holding references
        lookup: Callable mapping a GeneratedValue to its realized value
    """
    if isinstance(value, GeneratedValue):
        return lookup(value)
    elif isinstance(value, dict):
        return {k: resolve_value(v, lookup) for k, v in value.items()}
    elif isinstance(value, (list, tuple)):
        return [resolve_value(item, lookup) for item in value]
    return value


class ResourceDeclaration:
    """
    One infrastructure resource to be provisioned.

    Declarations are created by the Stack builder methods and are not
    meant to be constructed directly. The configuration record is frozen
    once the declaration joins the graph; only the lifecycle state and
    the realized values change afterwards, and only through the composer.
    """

    def __init__(
        self,
        logical_id: str,
        kind: ResourceKind,
        config: BaseModel,
        generates: tuple[str, ...] = (),
        depends_on: tuple[str, ...] = (),
    ):
        self.logical_id = logical_id
        self.kind = kind
        self.config = config
        self.generates = generates
        self.explicit_dependencies = tuple(depends_on)
        self.state = ResourceState.DECLARED
        self._values: dict[str, Any] = {}

    @property
    def references(self) -> list[GeneratedValue]:
        """Generated values this declaration reads from other declarations."""
        return list(find_references(self.config))

    @property
    def dependencies(self) -> list[str]:
        """Logical ids this declaration depends on, in first-seen order."""
        seen: dict[str, None] = {}
        for ref in self.references:
            seen.setdefault(ref.resource_id, None)
        for dep in self.explicit_dependencies:
            seen.setdefault(dep, None)
        return list(seen)

    def ref(self, attribute: str) -> GeneratedValue:
        """Return a reference to one of this declaration's generated attributes."""
        if attribute not in self.generates:
            raise GraphConstructionError(
                f"Resource '{self.logical_id}' ({self.kind.value}) does not generate "
                f"'{attribute}'. Available: {', '.join(self.generates) or 'none'}"
            )
        return GeneratedValue(self.logical_id, attribute)

    def value(self, attribute: str) -> Any:
        """Return a realized attribute value."""
        if self.state is not ResourceState.REALIZED:
            raise UnresolvedValueError(
                f"'{self.logical_id}.{attribute}' is not available: "
                f"resource is {self.state.value}, not realized"
            )
        return self._values[attribute]

    @property
    def is_realized(self) -> bool:
        return self.state is ResourceState.REALIZED

    def mark_ordered(self) -> None:
        if self.state is ResourceState.DECLARED:
            self.state = ResourceState.ORDERED

    def mark_realized(self, values: dict[str, Any]) -> None:
        """Record the engine's generated values. Every declared attribute must be present."""
        missing = [name for name in self.generates if name not in values]
        if missing:
            raise ValueError(
                f"Engine did not return {', '.join(missing)} for '{self.logical_id}'"
            )
        if self.state is not ResourceState.ORDERED:
            raise ValueError(
                f"'{self.logical_id}' must be ordered before it is realized "
                f"(currently {self.state.value})"
            )
        self._values = {name: values[name] for name in self.generates}
        self.state = ResourceState.REALIZED

    def __repr__(self) -> str:
        return (
            f"ResourceDeclaration(id='{self.logical_id}', kind='{self.kind.value}', "
            f"state='{self.state.value}')"
        )
