"""
Exceptions raised by provisioning steps.
"""

from ..models.provision import ErrorKind


class ProvisioningError(Exception):
    """Base class for fatal provisioning failures."""

    kind: ErrorKind
    exit_code = 1

    def __init__(self, message: str, output: str = ""):
        super().__init__(message)
        self.message = message
        self.output = output


class PrivilegeError(ProvisioningError, PermissionError):
    """The process is not running with root privileges."""
    kind = ErrorKind.PERMISSION


class DependencyInstallError(ProvisioningError):
    """The package manager reported a non-zero status."""
    kind = ErrorKind.DEPENDENCY_INSTALL


class ToolchainInstallError(ProvisioningError):
    """The remote toolchain installer failed."""
    kind = ErrorKind.TOOLCHAIN_INSTALL


class VerificationError(ProvisioningError):
    """The toolchain binary is not invocable after installation."""
    kind = ErrorKind.VERIFICATION
