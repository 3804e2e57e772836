"""
Pulumi engine: translates declarations into pulumi_aws resources.

Each declaration becomes one or more Pulumi resources registered with the
running Pulumi program. Function images are built from their image
directory for their platform and pushed during the deployment.

The values handed back to the Stack are Pulumi Outputs; Pulumi resolves
them when the program is deployed, and the Stack threads them into
dependent declarations as resource inputs.
"""

import json
from pathlib import Path
from typing import Any

try:
    import pulumi
    import pulumi_aws as aws
    import pulumi_docker_build as docker_build
except ImportError:
    raise ImportError(
        "pulumi, pulumi_aws and pulumi_docker_build required for PulumiEngine. "
        "Install with: pip install pulumi pulumi-aws pulumi-docker-build"
    )

from livestack.config.iam import policy_document
from livestack.config.serverless import AuthType
from livestack.config.table import BillingMode, RemovalPolicy
from livestack.provisioning.engine import ProvisioningEngine

LAMBDA_ASSUME_ROLE_POLICY = {
    "Version": "2012-10-17",
    "Statement": [
        {
            "Action": "sts:AssumeRole",
            "Principal": {"Service": "lambda.amazonaws.com"},
            "Effect": "Allow",
        }
    ],
}

BASIC_EXECUTION_POLICY_ARN = (
    "arn:aws:iam::aws:policy/service-role/AWSLambdaBasicExecutionRole"
)


class PulumiEngine(ProvisioningEngine):
    """
    Provisioning engine backed by the Pulumi AWS provider.

    Must run inside a Pulumi program (``pulumi up``) or under
    ``pulumi.runtime.set_mocks`` in tests.

    Example:
        # deploy/__main__.py
        stack = IvsSimpleStack(App.from_env(region="ap-northeast-1"))
        stack.realize(PulumiEngine(project_dir=".."))
    """

    name = "pulumi"

    def __init__(
        self,
        opts: pulumi.ResourceOptions | None = None,
        project_dir: str | Path | None = None,
    ):
        """
        Args:
            opts: Resource options merged into every resource (e.g. a provider)
            project_dir: Directory function image paths are relative to
                (defaults to the working directory)
        """
        self.opts = opts
        self.project_dir = Path(project_dir) if project_dir is not None else Path.cwd()
        self.resources: dict[str, pulumi.Resource] = {}

    def _options(self, **kwargs) -> pulumi.ResourceOptions:
        opts = pulumi.ResourceOptions(**kwargs)
        if self.opts is None:
            return opts
        return pulumi.ResourceOptions.merge(self.opts, opts)

    def _track(self, name: str, resource: pulumi.Resource) -> pulumi.Resource:
        self.resources[name] = resource
        return resource

    def export(self, name: str, value: Any) -> None:
        pulumi.export(name, value)

    def _realize_table(self, logical_id: str, inputs: dict[str, Any]) -> dict[str, Any]:
        key = inputs["partition_key"]
        provisioned = inputs["billing_mode"] == BillingMode.PROVISIONED.value

        table = self._track(logical_id, aws.dynamodb.Table(
            logical_id,
            attributes=[
                aws.dynamodb.TableAttributeArgs(name=key["name"], type=key["type"]),
            ],
            hash_key=key["name"],
            billing_mode=inputs["billing_mode"],
            read_capacity=inputs["read_capacity"] if provisioned else None,
            write_capacity=inputs["write_capacity"] if provisioned else None,
            tags=inputs["tags"] or None,
            opts=self._options(
                retain_on_delete=inputs["removal_policy"] == RemovalPolicy.RETAIN.value
            ),
        ))
        return {"table_name": table.name, "table_arn": table.arn}

    def _realize_function(self, logical_id: str, inputs: dict[str, Any]) -> dict[str, Any]:
        tags = inputs["tags"] or None

        role = self._track(f"{logical_id}-role", aws.iam.Role(
            f"{logical_id}-role",
            assume_role_policy=json.dumps(LAMBDA_ASSUME_ROLE_POLICY),
            tags=tags,
            opts=self._options(),
        ))
        basic_execution = self._track(f"{logical_id}-basic-exec", aws.iam.RolePolicyAttachment(
            f"{logical_id}-basic-exec",
            role=role.name,
            policy_arn=BASIC_EXECUTION_POLICY_ARN,
            opts=self._options(),
        ))

        repository_url = inputs["repository_url"]
        if repository_url is None:
            repository = self._track(f"{logical_id}-repo", aws.ecr.Repository(
                f"{logical_id}-repo",
                image_tag_mutability="MUTABLE",
                force_delete=True,
                image_scanning_configuration=aws.ecr.RepositoryImageScanningConfigurationArgs(
                    scan_on_push=True,
                ),
                tags=tags,
                opts=self._options(),
            ))
            repository_url = repository.repository_url

        image = self._build_image(logical_id, inputs, pulumi.Output.from_input(repository_url))

        environment = inputs["environment"]
        function = self._track(logical_id, aws.lambda_.Function(
            logical_id,
            package_type="Image",
            image_uri=pulumi.Output.all(repository_url, image.digest).apply(
                lambda args: f"{args[0]}@{args[1]}"
            ),
            role=role.arn,
            memory_size=inputs["memory_size"],
            timeout=inputs["timeout"],
            architectures=[inputs["architecture"]],
            environment=aws.lambda_.FunctionEnvironmentArgs(variables=environment)
            if environment else None,
            tags=tags,
            opts=self._options(depends_on=[basic_execution]),
        ))
        pulumi.log.info(f"Declared image function {logical_id} ({inputs['architecture']})")

        return {
            "function_name": function.name,
            "function_arn": function.arn,
            "role_name": role.name,
            "role_arn": role.arn,
        }

    def _build_image(
        self,
        logical_id: str,
        inputs: dict[str, Any],
        repository_url: pulumi.Output,
    ) -> docker_build.Image:
        """Build the function image for its platform and push it to the repository."""
        context = (self.project_dir / inputs["image_path"]).resolve()
        auth = aws.ecr.get_authorization_token_output()

        return self._track(f"{logical_id}-image", docker_build.Image(
            f"{logical_id}-image",
            context=docker_build.BuildContextArgs(location=str(context)),
            platforms=[inputs["platform"]],
            push=True,
            registries=[
                docker_build.RegistryArgs(
                    address=repository_url.apply(lambda url: url.split("/")[0]),
                    username=auth.user_name,
                    password=auth.password,
                ),
            ],
            tags=[pulumi.Output.concat(repository_url, ":", inputs["image_tag"])],
            opts=self._options(),
        ))

    def _realize_policy(self, logical_id: str, inputs: dict[str, Any]) -> dict[str, Any]:
        policy = self._track(logical_id, aws.iam.RolePolicy(
            logical_id,
            role=inputs["role"],
            policy=json.dumps(
                policy_document(inputs["actions"], inputs["resources"], inputs["effect"])
            ),
            opts=self._options(),
        ))
        return {"policy_name": policy.name}

    def _realize_function_url(self, logical_id: str, inputs: dict[str, Any]) -> dict[str, Any]:
        cors = inputs["cors"]

        function_url = self._track(logical_id, aws.lambda_.FunctionUrl(
            logical_id,
            function_name=inputs["function"],
            authorization_type=inputs["auth_type"],
            cors=aws.lambda_.FunctionUrlCorsArgs(
                allow_origins=cors["allowed_origins"],
                allow_methods=cors["allowed_methods"],
                allow_headers=cors["allowed_headers"] or None,
                max_age=cors["max_age"],
            ),
            opts=self._options(),
        ))

        # Unauthenticated URLs still need a resource policy allowing public invokes
        if inputs["auth_type"] == AuthType.NONE.value:
            self._track(f"{logical_id}-public", aws.lambda_.Permission(
                f"{logical_id}-public",
                action="lambda:InvokeFunctionUrl",
                function=inputs["function"],
                principal="*",
                function_url_auth_type=AuthType.NONE.value,
                opts=self._options(),
            ))

        return {"url": function_url.function_url}
