"""
livestack: declarative serverless backend for IVS live streaming.

livestack composes a small graph of cloud resources (a DynamoDB table,
a container-image Lambda function, an inline access policy and a public
function URL), orders it, and realizes it through a provisioning engine.

Core concepts:
- App: Explicit deployment context (region, tags, environment snapshot)
- Stack: Resource-graph composer with builder methods per resource kind
- GeneratedValue: Placeholder for values known only after provisioning
- ProvisioningEngine: Realizes declarations (Pulumi, or an in-memory dry run)

Example:
    from livestack import App, IvsSimpleStack, DryRunEngine

    app = App.from_env(region="ap-northeast-1")
    stack = IvsSimpleStack(app)

    # Inspect the ordered graph
    stack.synth().order

    # Or realize it
    result = stack.realize(DryRunEngine(stack_name=stack.name, region=app.region))
    result.outputs["FunctionUrlOutput"]
"""

from livestack.core.errors import (
    LivestackError,
    GraphConstructionError,
    UnresolvedValueError,
    ConfigurationError,
    ProvisioningFailure,
)
from livestack.core.resource import GeneratedValue, ResourceDeclaration, ResourceKind, ResourceState
from livestack.core.app import App
from livestack.core.stack import Stack, Output, SynthesizedStack, RealizedStack
from livestack.provisioning import ProvisioningEngine, DryRunEngine
from livestack.stacks import IvsSimpleStack, IvsMinimalStack, build_stack

__version__ = "0.1.0"
__all__ = [
    "LivestackError",
    "GraphConstructionError",
    "UnresolvedValueError",
    "ConfigurationError",
    "ProvisioningFailure",
    "GeneratedValue",
    "ResourceDeclaration",
    "ResourceKind",
    "ResourceState",
    "App",
    "Stack",
    "Output",
    "SynthesizedStack",
    "RealizedStack",
    "ProvisioningEngine",
    "DryRunEngine",
    "IvsSimpleStack",
    "IvsMinimalStack",
    "build_stack",
]
