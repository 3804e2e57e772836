"""
Provisioning engine interface.

An engine turns one ordered, fully resolved declaration into a live
resource and reports the values the declaration generates. The Stack
drives it; engines never see unresolved references.
"""

from abc import ABC, abstractmethod
from typing import Any

from livestack.core.resource import ResourceDeclaration, ResourceKind


class ProvisioningEngine(ABC):
    """
    Abstract provisioning engine.

    Engines dispatch on the declaration kind; subclasses implement one
    ``_realize_<kind>`` method per ResourceKind.
    """

    name: str = "engine"

    def realize(self, declaration: ResourceDeclaration, inputs: dict[str, Any]) -> dict[str, Any]:
        """
        Realize a declaration.

        Args:
            declaration: The declaration being realized (state Ordered)
            inputs: Its configuration with every reference resolved

        Returns:
            Mapping of each attribute in ``declaration.generates`` to its value
        """
        handlers = {
            ResourceKind.TABLE: self._realize_table,
            ResourceKind.FUNCTION: self._realize_function,
            ResourceKind.POLICY: self._realize_policy,
            ResourceKind.FUNCTION_URL: self._realize_function_url,
        }
        return handlers[declaration.kind](declaration.logical_id, inputs)

    def export(self, name: str, value: Any) -> None:
        """Surface a stack output. Engines without an output channel ignore it."""
        pass

    @abstractmethod
    def _realize_table(self, logical_id: str, inputs: dict[str, Any]) -> dict[str, Any]:
        pass

    @abstractmethod
    def _realize_function(self, logical_id: str, inputs: dict[str, Any]) -> dict[str, Any]:
        pass

    @abstractmethod
    def _realize_policy(self, logical_id: str, inputs: dict[str, Any]) -> dict[str, Any]:
        pass

    @abstractmethod
    def _realize_function_url(self, logical_id: str, inputs: dict[str, Any]) -> dict[str, Any]:
        pass
