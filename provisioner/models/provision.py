"""
Provisioning step and run result models.
"""

from enum import Enum
from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, Field


class StepStatus(str, Enum):
    """Status of a provisioning step."""
    PASSED = "passed"
    FAILED = "failed"
    WARNING = "warning"
    SKIPPED = "skipped"


class ErrorKind(str, Enum):
    """Failure taxonomy, one kind per fatal step."""
    PERMISSION = "PermissionError"
    DEPENDENCY_INSTALL = "DependencyInstallError"
    TOOLCHAIN_INSTALL = "ToolchainInstallError"
    VERIFICATION = "VerificationError"


class StepResult(BaseModel):
    """Outcome of a single provisioning step."""
    step: str = Field(..., description="Step name")
    status: StepStatus = Field(..., description="Step status")
    error_kind: Optional[ErrorKind] = Field(None, description="Error kind if the step failed")
    message: Optional[str] = Field(None, description="Human-readable diagnostic")
    output: Optional[str] = Field(None, description="Captured command output")
    duration_seconds: Optional[float] = Field(None, description="Step duration")

    @property
    def ok(self) -> bool:
        return self.status != StepStatus.FAILED

    class Config:
        json_schema_extra = {
            "example": {
                "step": "install_packages",
                "status": "failed",
                "error_kind": "DependencyInstallError",
                "message": "Failed to install one or more packages.",
                "duration_seconds": 12.4
            }
        }


class ProvisionResult(BaseModel):
    """Complete result of a provisioning run."""
    success: bool = Field(default=False, description="Overall success status")
    steps: List[StepResult] = Field(default_factory=list)
    error_kind: Optional[ErrorKind] = Field(None, description="Kind of the failure that aborted the run")
    toolchain_version: Optional[str] = Field(None, description="Version reported by the toolchain binary")
    dry_run: bool = Field(default=False)

    # Timing
    started_at: datetime = Field(default_factory=datetime.utcnow)
    completed_at: Optional[datetime] = None
    duration_seconds: Optional[float] = None

    @property
    def exit_code(self) -> int:
        return 0 if self.success else 1

    @property
    def failed_step(self) -> Optional[StepResult]:
        for step in self.steps:
            if step.status == StepStatus.FAILED:
                return step
        return None

    def step_names(self) -> List[str]:
        return [s.step for s in self.steps]

    def complete(self, success: bool) -> None:
        """Mark the run as complete."""
        self.success = success
        self.completed_at = datetime.utcnow()
        if self.started_at:
            self.duration_seconds = (self.completed_at - self.started_at).total_seconds()
