"""
livestack CLI - build, inspect and deploy the IVS backend stacks.
"""

import json
import logging
import os
import sys
from typing import NoReturn

import click

from livestack import __version__
from livestack.cli.deploy import DeploymentCLI, DeploymentError
from livestack.config.loader import DeploymentConfig, load_config, parse_config
from livestack.config.provider import DEFAULT_REGION
from livestack.config.stack import Variant
from livestack.core.app import App
from livestack.core.errors import LivestackError
from livestack.core.stack import Stack
from livestack.provisioning.dry_run import DryRunEngine
from livestack.stacks.ivs import OUTPUT_NAME, build_stack

DEFAULT_PULUMI_DIR = "deploy"


STACK_OPTIONS = [
    click.option(
        "--config",
        "-c",
        "config_file",
        type=click.Path(exists=True, dir_okay=False),
        help="YAML deployment configuration",
    ),
    click.option("--region", "-r", help="Deployment region (overrides the config file)"),
    click.option(
        "--variant",
        type=click.Choice([v.value for v in Variant]),
        help="Stack variant (overrides the config file)",
    ),
    click.option("--stack-name", help="Stack name (overrides the config file)"),
]


def _stack_options(command):
    """Apply the options shared by every command that builds a stack."""
    for option in reversed(STACK_OPTIONS):
        command = option(command)
    return command


def _load_deployment(config_file, region, variant, stack_name) -> DeploymentConfig:
    if config_file:
        deployment = load_config(config_file)
    else:
        deployment = parse_config({"region": region or DEFAULT_REGION})

    overrides = {}
    if region:
        overrides["region"] = region
    if variant:
        overrides["variant"] = variant
    if stack_name:
        overrides["stack_name"] = stack_name
    if overrides:
        deployment = parse_config({**deployment.model_dump(exclude_none=True), **overrides})
    return deployment


def _build(config_file, region, variant, stack_name) -> tuple[DeploymentConfig, Stack]:
    deployment = _load_deployment(config_file, region, variant, stack_name)
    app = App(config=deployment.aws_config(), environ=dict(os.environ))
    stack = build_stack(app, deployment.variant, name=deployment.stack_name, config=deployment.function)
    return deployment, stack


def _fail(message: str, error: Exception) -> NoReturn:
    click.echo(f"✗ {message}: {error}", err=True)
    if logging.getLogger().isEnabledFor(logging.DEBUG):
        import traceback

        traceback.print_exc()
    sys.exit(1)


@click.group()
@click.version_option(version=__version__)
@click.option("--debug", is_flag=True, help="Enable debug logging")
def cli(debug: bool):
    """
    livestack - serverless backend for IVS live streaming.

    Declares a DynamoDB table, a container-image Lambda function, its
    access policy and a public function URL, then deploys them with Pulumi.
    """
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@_stack_options
@click.option("--format", type=click.Choice(["text", "json", "mermaid"]), default="text")
def synth(config_file, region, variant, stack_name, format):
    """
    Build the stack and print its ordered resource graph.

    Example:
        livestack synth
        livestack synth --variant minimal --format json
        livestack synth --format mermaid
    """
    try:
        _, stack = _build(config_file, region, variant, stack_name)
        synthesized = stack.synth()
    except LivestackError as e:
        _fail("Synthesis failed", e)

    if format == "json":
        click.echo(json.dumps(synthesized.to_dict(), indent=2))

    elif format == "mermaid":
        click.echo("```mermaid")
        click.echo("graph TD")
        for from_node, to_node in synthesized.edges:
            click.echo(f"  {from_node} --> {to_node}")
        click.echo("```")

    else:  # text format
        click.echo(f"\n Stack: {synthesized.stack_name} ({synthesized.region})")
        click.echo(f"{'=' * 50}")

        click.echo(f"\n Resources: {len(synthesized.order)}")
        for i, logical_id in enumerate(synthesized.order, 1):
            deps = stack.graph.get_dependencies(logical_id)
            suffix = f"  <- {', '.join(deps)}" if deps else ""
            click.echo(f"  {i}. {logical_id} [{synthesized.kinds[logical_id]}]{suffix}")

        click.echo(f"\n Outputs:")
        for name, source in synthesized.outputs.items():
            click.echo(f"  - {name}: {source}")


@cli.command()
@_stack_options
def validate(config_file, region, variant, stack_name):
    """
    Validate configuration and the resource graph without deploying.

    Example:
        livestack validate --config livestack.yaml
    """
    try:
        _, stack = _build(config_file, region, variant, stack_name)
        order = stack.validate()
    except LivestackError as e:
        _fail("Validation failed", e)

    click.echo(f"✓ Stack '{stack.name}' is valid ({len(order)} resources)")


@cli.command("dry-run")
@_stack_options
@click.option("--format", type=click.Choice(["text", "json"]), default="text")
def dry_run(config_file, region, variant, stack_name, format):
    """
    Realize the stack in memory and print the resulting outputs.

    Example:
        livestack dry-run --variant minimal
    """
    try:
        deployment, stack = _build(config_file, region, variant, stack_name)
        engine = DryRunEngine(
            stack_name=stack.name,
            region=stack.region,
            account_id=deployment.account_id or "123456789012",
        )
        result = stack.realize(engine)
    except LivestackError as e:
        _fail("Dry run failed", e)

    if format == "json":
        click.echo(json.dumps({
            "stack": result.stack_name,
            "order": result.order,
            "outputs": result.outputs,
            "resources": engine.realized,
        }, indent=2))
        return

    click.echo(f"✓ Realized {len(result.order)} resources in '{result.stack_name}'")
    for logical_id in result.order:
        click.echo(f"  - {logical_id}")
    click.echo("\nOutputs:")
    for name, value in result.outputs.items():
        click.echo(f"  {name} = {value}")


def _pulumi_settings(deployment: DeploymentConfig) -> dict[str, str]:
    settings = {
        "aws:region": deployment.region,
        "livestack:variant": deployment.variant,
    }
    if deployment.stack_name:
        settings["livestack:stackName"] = deployment.stack_name
    if deployment.tags:
        settings["livestack:tags"] = json.dumps(deployment.tags)
    settings["livestack:function"] = json.dumps(deployment.function.model_dump(exclude_none=True))
    return settings


@cli.command()
@_stack_options
@click.option("--pulumi-dir", type=click.Path(file_okay=False), default=DEFAULT_PULUMI_DIR)
@click.option("--stack", "pulumi_stack", default="dev", help="Pulumi stack name")
def preview(config_file, region, variant, stack_name, pulumi_dir, pulumi_stack):
    """Preview the infrastructure changes with Pulumi."""
    try:
        deployment, stack = _build(config_file, region, variant, stack_name)
        stack.validate()
        deployer = DeploymentCLI()
        deployer.pulumi_configure(pulumi_dir, _pulumi_settings(deployment), pulumi_stack)
        deployer.pulumi_preview(pulumi_dir, pulumi_stack)
    except (LivestackError, DeploymentError) as e:
        _fail("Preview failed", e)


@cli.command()
@_stack_options
@click.option("--pulumi-dir", type=click.Path(file_okay=False), default=DEFAULT_PULUMI_DIR)
@click.option("--stack", "pulumi_stack", default="dev", help="Pulumi stack name")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
def deploy(config_file, region, variant, stack_name, pulumi_dir, pulumi_stack, yes):
    """
    Validate the stack, then deploy it with Pulumi.

    Example:
        livestack deploy --config livestack.yaml --stack prod --yes
    """
    try:
        deployment, stack = _build(config_file, region, variant, stack_name)
        stack.validate()
    except LivestackError as e:
        _fail("Validation failed", e)

    if not yes:
        click.confirm(
            f"Deploy '{stack.name}' to {deployment.region} (Pulumi stack '{pulumi_stack}')?",
            abort=True,
        )

    try:
        outputs = DeploymentCLI().deploy_stack(
            pulumi_dir, _pulumi_settings(deployment), stack=pulumi_stack, auto_approve=True
        )
    except DeploymentError as e:
        _fail("Deployment failed", e)

    url = outputs.get(OUTPUT_NAME)
    if url:
        click.echo(f"\n✓ Function URL: {url}")


@cli.command()
@click.option("--pulumi-dir", type=click.Path(file_okay=False), default=DEFAULT_PULUMI_DIR)
@click.option("--stack", "pulumi_stack", default="dev", help="Pulumi stack name")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
def destroy(pulumi_dir, pulumi_stack, yes):
    """Tear down every resource of the Pulumi stack, including the table."""
    if not yes:
        click.confirm(f"Destroy Pulumi stack '{pulumi_stack}'?", abort=True)
    try:
        DeploymentCLI().pulumi_destroy(pulumi_dir, pulumi_stack, yes=True)
    except DeploymentError as e:
        _fail("Destroy failed", e)


@cli.command()
@click.option("--pulumi-dir", type=click.Path(file_okay=False), default=DEFAULT_PULUMI_DIR)
@click.option("--stack", "pulumi_stack", default="dev", help="Pulumi stack name")
def outputs(pulumi_dir, pulumi_stack):
    """Print the deployed stack outputs as JSON."""
    try:
        values = DeploymentCLI(verbose=False).pulumi_stack_output(pulumi_dir, pulumi_stack)
    except DeploymentError as e:
        _fail("Reading outputs failed", e)
    click.echo(json.dumps(values, indent=2))


if __name__ == "__main__":
    cli()
