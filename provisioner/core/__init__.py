"""
Core modules for the Rust toolchain provisioner.
"""

from .errors import (
    DependencyInstallError,
    PrivilegeError,
    ProvisioningError,
    ToolchainInstallError,
    VerificationError,
)
from .host import CommandResult, DryRunHost, Host, SystemHost
from .provisioner import Provisioner
from .run_recorder import RunRecorder

__all__ = [
    "CommandResult",
    "DependencyInstallError",
    "DryRunHost",
    "Host",
    "PrivilegeError",
    "ProvisioningError",
    "Provisioner",
    "RunRecorder",
    "SystemHost",
    "ToolchainInstallError",
    "VerificationError"
]
