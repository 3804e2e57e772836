"""
Exceptions raised while declaring, ordering and realizing a stack.
"""


class LivestackError(Exception):
    """Base class for all livestack errors."""
    pass


class GraphConstructionError(LivestackError):
    """
    Raised when the resource graph is malformed.

    Covers references to declarations that are not in the graph,
    duplicate logical ids or output names, unknown generated attributes
    and cycles. Always raised before any provisioning call is made.
    """
    pass


class UnresolvedValueError(GraphConstructionError):
    """Raised when a generated value is read before its owner is realized."""
    pass


class ConfigurationError(LivestackError):
    """Raised when a configuration record fails static validation."""
    pass


class ProvisioningFailure(LivestackError):
    """
    Raised when the provisioning engine fails to realize a declaration.

    The whole deployment is considered failed; no partial result is
    returned to the caller.
    """

    def __init__(self, logical_id: str, message: str):
        super().__init__(f"Failed to realize '{logical_id}': {message}")
        self.logical_id = logical_id
