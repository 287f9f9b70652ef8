"""
Provisioner - runs the fixed setup sequence for the Rust toolchain, fail-fast.
"""

import logging
import time
from typing import Callable, List, Optional, Tuple

from config.settings import Settings
from ..models.provision import ProvisionResult, StepResult, StepStatus
from .errors import (
    DependencyInstallError,
    PrivilegeError,
    ProvisioningError,
    ToolchainInstallError,
    VerificationError,
)
from .host import Host

PRIVILEGE_MESSAGE = "This script requires root privileges to install packages. Please run with sudo."


class Provisioner:
    """Runs the provisioning steps in order and stops at the first failure."""

    def __init__(self, host: Host, settings: Optional[Settings] = None):
        """
        Initialize the provisioner.

        Args:
            host: Capabilities over the machine being provisioned
            settings: Application settings (defaults if omitted)
        """
        self.logger = logging.getLogger(__name__)
        self.host = host
        self.settings = settings or Settings()
        self.toolchain_version: Optional[str] = None

    def steps(self) -> List[Tuple[str, Callable[[], StepResult]]]:
        return [
            ("check_privileges", self.check_privileges),
            ("ensure_download_tool", self.ensure_download_tool),
            ("install_packages", self.install_packages),
            ("install_toolchain", self.install_toolchain),
            ("reload_environment", self.reload_environment),
            ("verify_toolchain", self.verify_toolchain),
        ]

    def run(self) -> ProvisionResult:
        """
        Run every step in order.

        Returns:
            Result of the run; ``exit_code`` is 0 only if every step passed.
        """
        result = ProvisionResult(dry_run=self.settings.dry_run)

        for name, step in self.steps():
            self.logger.info(f"Running step {name}")
            started = time.monotonic()
            try:
                step_result = step()
            except ProvisioningError as e:
                self.logger.error(f"Error: {e.message}")
                step_result = StepResult(
                    step=name,
                    status=StepStatus.FAILED,
                    error_kind=e.kind,
                    message=e.message,
                    output=e.output or None
                )
            step_result.duration_seconds = time.monotonic() - started
            result.steps.append(step_result)

            if step_result.status == StepStatus.FAILED:
                result.error_kind = step_result.error_kind
                result.complete(success=False)
                return result

        result.toolchain_version = self.toolchain_version
        result.complete(success=True)
        return result

    def check_privileges(self) -> StepResult:
        if not self.host.has_privileges():
            raise PrivilegeError(PRIVILEGE_MESSAGE)
        return StepResult(step="check_privileges", status=StepStatus.PASSED)

    def ensure_download_tool(self) -> StepResult:
        tool = self.settings.packages.download_tool
        if self.host.command_exists(tool):
            self.logger.info(f"{tool} already installed")
            return StepResult(step="ensure_download_tool", status=StepStatus.SKIPPED, message=f"{tool} present")

        self.logger.info(f"Installing {tool}...")
        try:
            outcome = self.host.install_packages([tool])
        except OSError as e:
            raise DependencyInstallError(f"Failed to install {tool}.", str(e)) from e
        if not outcome.ok:
            raise DependencyInstallError(f"Failed to install {tool}.", outcome.output)
        return StepResult(step="ensure_download_tool", status=StepStatus.PASSED, message=f"Installed {tool}")

    def install_packages(self) -> StepResult:
        # One transaction; a failure may still leave some packages applied.
        names = self.settings.packages.names
        self.logger.info(f"Installing {', '.join(names)}...")
        try:
            outcome = self.host.install_packages(names)
        except OSError as e:
            raise DependencyInstallError("Failed to install one or more packages.", str(e)) from e
        if not outcome.ok:
            raise DependencyInstallError("Failed to install one or more packages.", outcome.output)
        return StepResult(step="install_packages", status=StepStatus.PASSED, message=f"Installed {len(names)} packages")

    def install_toolchain(self) -> StepResult:
        toolchain = self.settings.toolchain
        self.logger.info("Downloading and installing Rust...")
        try:
            outcome = self.host.run_remote_installer(toolchain.installer_url, toolchain.installer_args)
        except OSError as e:
            raise ToolchainInstallError("Rust installation failed.", str(e)) from e
        if not outcome.ok:
            raise ToolchainInstallError("Rust installation failed.", outcome.output)
        return StepResult(step="install_toolchain", status=StepStatus.PASSED)

    def reload_environment(self) -> StepResult:
        """Source the installer's env file. Never fatal."""
        env_file = self.settings.toolchain.resolve_env_file()
        try:
            reloaded = self.host.reload_environment(env_file)
        except OSError as e:
            self.logger.debug(f"Reloading {env_file} raised {e}")
            reloaded = False

        if not reloaded:
            self.logger.warning("Warning: Failed to source Rust environment.")
            return StepResult(
                step="reload_environment",
                status=StepStatus.WARNING,
                message=f"Failed to source {env_file}"
            )
        return StepResult(step="reload_environment", status=StepStatus.PASSED, message=f"Sourced {env_file}")

    def verify_toolchain(self) -> StepResult:
        """Check the compiler is invocable, regardless of what the installer reported."""
        binary = self.settings.toolchain.binary
        path = self.host.resolve_command(binary)
        if not path:
            raise VerificationError("Rust compiler not found after installation.")

        version = self.host.command_version(path)
        if version.ok:
            self.toolchain_version = version.stdout.strip()
        self.logger.info(f"{binary} resolved to {path}: {self.toolchain_version or 'unknown version'}")
        return StepResult(step="verify_toolchain", status=StepStatus.PASSED, output=self.toolchain_version)

    def success_message(self) -> str:
        return f"Rust and all dependencies ({', '.join(self.settings.packages.names)}) installed successfully!"
