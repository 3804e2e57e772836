"""
Dry-run engine: realizes declarations in memory.

Generated values are deterministic placeholders derived from the stack
name, region and logical id, so repeated dry runs print the same output.
Useful for inspecting a stack and for tests.
"""

import hashlib
from typing import Any

from livestack.provisioning.engine import ProvisioningEngine


class DryRunEngine(ProvisioningEngine):
    """
    In-memory provisioning engine.

    Records every realization in ``realized`` (logical id -> resolved
    inputs) in the order it happened.

    Example:
        engine = DryRunEngine(stack_name="IvsSimpleStack", region="ap-northeast-1")
        result = stack.realize(engine)
        result.outputs["FunctionUrlOutput"]
    """

    name = "dry-run"

    def __init__(
        self,
        stack_name: str = "stack",
        region: str = "us-east-1",
        account_id: str = "123456789012",
    ):
        self.stack_name = stack_name
        self.region = region
        self.account_id = account_id
        self.realized: dict[str, dict[str, Any]] = {}
        self.exports: dict[str, Any] = {}

    def realize(self, declaration, inputs):
        values = super().realize(declaration, inputs)
        self.realized[declaration.logical_id] = inputs
        return values

    def export(self, name: str, value: Any) -> None:
        self.exports[name] = value

    def _physical_name(self, logical_id: str) -> str:
        digest = hashlib.sha256(f"{self.stack_name}/{logical_id}".encode()).hexdigest()
        return f"{self.stack_name}-{logical_id}-{digest[:12].upper()}"

    def _arn(self, service: str, resource: str) -> str:
        return f"arn:aws:{service}:{self.region}:{self.account_id}:{resource}"

    def _realize_table(self, logical_id: str, inputs: dict[str, Any]) -> dict[str, Any]:
        table_name = self._physical_name(logical_id)
        return {
            "table_name": table_name,
            "table_arn": self._arn("dynamodb", f"table/{table_name}"),
        }

    def _realize_function(self, logical_id: str, inputs: dict[str, Any]) -> dict[str, Any]:
        function_name = self._physical_name(logical_id)
        role_name = self._physical_name(f"{logical_id}ServiceRole")
        return {
            "function_name": function_name,
            "function_arn": self._arn("lambda", f"function:{function_name}"),
            "role_name": role_name,
            "role_arn": f"arn:aws:iam::{self.account_id}:role/{role_name}",
        }

    def _realize_policy(self, logical_id: str, inputs: dict[str, Any]) -> dict[str, Any]:
        return {"policy_name": self._physical_name(logical_id)}

    def _realize_function_url(self, logical_id: str, inputs: dict[str, Any]) -> dict[str, Any]:
        url_id = hashlib.sha256(str(inputs["function"]).encode()).hexdigest()[:32]
        return {"url": f"https://{url_id}.lambda-url.{self.region}.on.aws/"}
