"""
Provisioning engines that realize a synthesized stack.

The Pulumi engine lives in ``livestack.provisioning.pulumi_engine`` and
is imported on demand, since it registers resources with the running
Pulumi program.
"""

from livestack.provisioning.engine import ProvisioningEngine
from livestack.provisioning.dry_run import DryRunEngine

__all__ = [
    "ProvisioningEngine",
    "DryRunEngine",
]
