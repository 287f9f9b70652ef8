"""
Configuration settings for the Rust toolchain provisioner.
"""

import os
from typing import Optional, List
from pathlib import Path
from pydantic import BaseModel, Field, validator
from pydantic_settings import BaseSettings


DEFAULT_PACKAGES = [
    "libssl-dev",
    "pkgconf",
    "pcscd",
    "pcsc-tools",
    "libccid",
    "pkg-config",
    "libgbm-dev",
    "libxkbcommon-dev",
    "libudev-dev",
    "libseat-dev",
]

SUPPORTED_TLS_VERSIONS = ("1.2", "1.3")


class PackagesConfig(BaseModel):
    """System package configuration."""
    manager: str = Field(default="apt-get", description="Package manager executable")
    download_tool: str = Field(default="curl", description="HTTP client installed on demand")
    names: List[str] = Field(
        default_factory=lambda: list(DEFAULT_PACKAGES),
        description="Packages installed in a single transaction, in order"
    )

    @validator('names')
    def validate_names_not_empty(cls, v):
        if not v:
            raise ValueError("Package list must contain at least one package")
        return v


class ToolchainConfig(BaseModel):
    """Remote toolchain installer configuration."""
    installer_url: str = Field(default="https://sh.rustup.rs", description="Installer script URL")
    installer_args: List[str] = Field(default_factory=lambda: ["-y"], description="Arguments passed to the installer")
    min_tls_version: str = Field(default="1.2", description="Minimum TLS version for the download")
    binary: str = Field(default="rustc", description="Compiler binary checked after installation")
    env_file: Optional[Path] = Field(None, description="Environment file written by the installer")

    @validator('installer_url')
    def validate_https(cls, v):
        if not v.startswith("https://"):
            raise ValueError(f"Installer URL must use https: {v}")
        return v

    @validator('min_tls_version')
    def validate_tls_version(cls, v):
        if v not in SUPPORTED_TLS_VERSIONS:
            raise ValueError(f"Unsupported TLS version {v}; expected one of {', '.join(SUPPORTED_TLS_VERSIONS)}")
        return v

    def resolve_env_file(self) -> Path:
        """Return the configured env file, or ``$HOME/.cargo/env``."""
        if self.env_file:
            return self.env_file
        home = os.environ.get("HOME") or str(Path.home())
        return Path(home) / ".cargo" / "env"


class ArtifactConfig(BaseModel):
    """Run record storage configuration."""
    base_path: Path = Field(default=Path("artifacts"), description="Base path for run records")
    record_runs: bool = Field(default=True, description="Write a JSON record of each run")


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = Field(default="INFO", description="Logging level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s",
        description="Log format"
    )
    file_path: Optional[Path] = Field(default=Path("logs/provisioner.log"))
    max_file_size_mb: int = Field(default=10, description="Maximum log file size in MB")
    backup_count: int = Field(default=5, description="Number of log backups to keep")

    @validator('level')
    def validate_level(cls, v):
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return level


class Settings(BaseSettings):
    """Main application settings."""
    packages: PackagesConfig = Field(default_factory=PackagesConfig)
    toolchain: ToolchainConfig = Field(default_factory=ToolchainConfig)
    artifacts: ArtifactConfig = Field(default_factory=ArtifactConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    # Operational settings
    dry_run: bool = Field(default=False, description="Log mutating commands instead of running them")

    class Config:
        env_prefix = "PROVISIONER_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_nested_delimiter = "__"
        extra = "ignore"
