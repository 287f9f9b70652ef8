"""
Data models for the Rust toolchain provisioner.
"""

from .provision import ErrorKind, ProvisionResult, StepResult, StepStatus

__all__ = [
    "ErrorKind",
    "ProvisionResult",
    "StepResult",
    "StepStatus"
]
