"""
Pulumi program for the livestack IVS backend.

Reads the deployment target from Pulumi config:

    pulumi config set aws:region ap-northeast-1
    pulumi config set livestack:variant simple      # or minimal
    pulumi config set livestack:function '{"memory_size": 256}'

To deploy:
1. Install: pip install -e ..
2. Run: pulumi up (the function image is built and pushed as part of it)
"""

import os
from pathlib import Path

import pulumi

from livestack.config.provider import DEFAULT_REGION, AwsConfig
from livestack.config.stack import IvsStackConfig
from livestack.core.app import App
from livestack.provisioning.pulumi_engine import PulumiEngine
from livestack.stacks.ivs import build_stack

PROJECT_DIR = Path(__file__).resolve().parent.parent


def main():
    config = pulumi.Config("livestack")
    region = pulumi.Config("aws").get("region") or DEFAULT_REGION

    app = App(
        config=AwsConfig(region=region, tags=config.get_object("tags") or {}),
        environ=dict(os.environ),
    )

    try:
        stack = build_stack(
            app,
            config.get("variant") or "simple",
            name=config.get("stackName"),
            config=IvsStackConfig(**(config.get_object("function") or {})),
        )
    except Exception as e:
        pulumi.log.error(f"Failed to build stack: {e}")
        raise

    stack.realize(PulumiEngine(project_dir=PROJECT_DIR))


main()
