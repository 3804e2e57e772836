"""
Deployment helpers for livestack stacks.

Wraps the Pulumi command line used to ship a stack: configuring the
Pulumi stack and running preview/up/destroy against the ``deploy/``
Pulumi program, which also builds and pushes the function image.
"""

import json
import subprocess
from pathlib import Path
from typing import Any


class DeploymentError(Exception):
    """Raised when deployment fails."""
    pass


class DeploymentCLI:
    """
    CLI interface for stack deployment.

    Provides commands for:
    - Setting Pulumi stack configuration
    - Running Pulumi preview/up/destroy
    - Reading stack outputs
    """

    def __init__(self, verbose: bool = True):
        """
        Initialize deployment CLI.

        Args:
            verbose: Print detailed output
        """
        self.verbose = verbose

    def pulumi_configure(
        self,
        pulumi_dir: str | Path,
        settings: dict[str, str],
        stack: str | None = None,
    ) -> None:
        """
        Set Pulumi configuration values (``pulumi config set``).

        Args:
            pulumi_dir: Directory containing Pulumi program
            settings: Configuration keys (e.g. ``aws:region``) and values
            stack: Optional stack name
        """
        for key, value in settings.items():
            self._run_pulumi_command(
                ["config", "set", key, value],
                pulumi_dir,
                stack,
                description=f"Setting {key}",
            )

    def pulumi_preview(
        self,
        pulumi_dir: str | Path,
        stack: str | None = None
    ) -> subprocess.CompletedProcess:
        """
        Run 'pulumi preview' to preview infrastructure changes.

        Raises:
            DeploymentError: If preview fails
        """
        return self._run_pulumi_command(
            ["preview"],
            pulumi_dir,
            stack,
            description="Previewing infrastructure changes"
        )

    def pulumi_up(
        self,
        pulumi_dir: str | Path,
        stack: str | None = None,
        yes: bool = False
    ) -> subprocess.CompletedProcess:
        """
        Run 'pulumi up' to deploy infrastructure.

        Raises:
            DeploymentError: If deployment fails
        """
        extra_args = ["--yes"] if yes else []
        return self._run_pulumi_command(
            ["up"],
            pulumi_dir,
            stack,
            extra_args=extra_args,
            description="Deploying infrastructure"
        )

    def pulumi_destroy(
        self,
        pulumi_dir: str | Path,
        stack: str | None = None,
        yes: bool = False
    ) -> subprocess.CompletedProcess:
        """
        Run 'pulumi destroy' to tear down infrastructure.

        The table is declared with a DESTROY removal policy, so it is
        deleted together with everything else.

        Raises:
            DeploymentError: If destroy fails
        """
        extra_args = ["--yes"] if yes else []
        return self._run_pulumi_command(
            ["destroy"],
            pulumi_dir,
            stack,
            extra_args=extra_args,
            description="Destroying infrastructure"
        )

    def pulumi_stack_output(
        self,
        pulumi_dir: str | Path,
        stack: str | None = None
    ) -> dict[str, Any]:
        """
        Get stack outputs as dictionary.

        Raises:
            DeploymentError: If getting outputs fails
        """
        result = self._run_pulumi_command(
            ["stack", "output", "--json"],
            pulumi_dir,
            stack,
            description="Getting stack outputs"
        )

        try:
            return json.loads(result.stdout or "{}")
        except json.JSONDecodeError as e:
            raise DeploymentError(f"Failed to parse stack outputs: {e}") from e

    def _run_pulumi_command(
        self,
        command: list[str],
        pulumi_dir: str | Path,
        stack: str | None = None,
        extra_args: list[str] | None = None,
        description: str | None = None
    ) -> subprocess.CompletedProcess:
        """
        Run a Pulumi CLI command.

        Raises:
            DeploymentError: If the directory is missing or the command fails
        """
        pulumi_path = Path(pulumi_dir)
        if not pulumi_path.exists():
            raise DeploymentError(f"Pulumi directory not found: {pulumi_dir}")

        cmd = ["pulumi", *command]
        if stack:
            cmd.extend(["--stack", stack])
        if extra_args:
            cmd.extend(extra_args)

        return self._run(cmd, cwd=pulumi_path, description=description)

    def _run(
        self,
        cmd: list[str],
        cwd: Path,
        description: str | None = None
    ) -> subprocess.CompletedProcess:
        if self.verbose and description:
            print(f"{description}...")
            print(f"  Command: {' '.join(cmd)}")
            print(f"  Directory: {cwd}")

        try:
            result = subprocess.run(
                cmd,
                cwd=cwd,
                check=True,
                capture_output=True,
                text=True
            )
        except FileNotFoundError as e:
            raise DeploymentError(f"Command not found: {cmd[0]}") from e
        except subprocess.CalledProcessError as e:
            error_msg = f"Command failed: {' '.join(cmd)}"
            if e.stderr:
                error_msg += f"\n{e.stderr}"
            raise DeploymentError(error_msg) from e

        if self.verbose:
            print("✓ Command completed successfully")
            if result.stdout:
                print(result.stdout)

        return result

    def deploy_stack(
        self,
        pulumi_dir: str | Path,
        settings: dict[str, str],
        stack: str = "dev",
        auto_approve: bool = False
    ) -> dict[str, Any]:
        """
        One-command deployment: configure, preview, deploy, read outputs.

        Args:
            pulumi_dir: Directory containing the Pulumi program
            settings: Pulumi configuration to set first
            stack: Pulumi stack name
            auto_approve: Skip confirmation prompt

        Returns:
            Dictionary of stack outputs

        Raises:
            DeploymentError: If any step fails
        """
        self.pulumi_configure(pulumi_dir, settings, stack)

        if self.verbose:
            print()
            print("=" * 70)
            print("PREVIEW")
            print("=" * 70)
        self.pulumi_preview(pulumi_dir, stack)

        if self.verbose:
            print()
            print("=" * 70)
            print("DEPLOY")
            print("=" * 70)
        self.pulumi_up(pulumi_dir, stack, yes=auto_approve)

        if self.verbose:
            print()
            print("=" * 70)
            print("OUTPUTS")
            print("=" * 70)
        outputs = self.pulumi_stack_output(pulumi_dir, stack)

        if self.verbose:
            print("Stack outputs:")
            for key, value in outputs.items():
                print(f"  {key}: {value}")

        return outputs
