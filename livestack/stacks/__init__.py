"""Concrete stacks built with livestack."""

from livestack.stacks.ivs import (
    IvsStack,
    IvsSimpleStack,
    IvsMinimalStack,
    OUTPUT_NAME,
    build_stack,
)

__all__ = [
    "IvsStack",
    "IvsSimpleStack",
    "IvsMinimalStack",
    "OUTPUT_NAME",
    "build_stack",
]
