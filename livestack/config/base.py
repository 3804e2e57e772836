"""
Base class for typed resource configuration records.
"""

from pydantic import BaseModel


class ResourceConfig(BaseModel):
    """
    Base configuration record for a resource declaration.

    Records are validated on construction and immutable afterwards.
    Fields may hold GeneratedValue references to other declarations.
    """

    class Config:
        arbitrary_types_allowed = True
        extra = "forbid"
        frozen = True
        use_enum_values = True
        validate_default = True
