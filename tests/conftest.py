from pathlib import Path
from typing import Dict, List, Optional, Sequence

import pytest

from config.settings import Settings
from provisioner.core.host import CommandResult


class FakeHost:
    """In-memory Host.

    Batch installs only report the configured status; whether a failing
    install applied some packages is deliberately left unmodelled.
    """

    def __init__(self,
                 root: bool = True,
                 commands: Optional[Dict[str, str]] = None,
                 install_codes: Optional[List[int]] = None,
                 installer_code: int = 0,
                 reload_ok: bool = True,
                 installed_after_installer: Optional[Dict[str, str]] = None,
                 version_output: str = "rustc 1.82.0 (f6e511eec 2024-10-15)"):
        self.root = root
        self.commands = dict(commands or {})
        self.install_codes = list(install_codes or [])
        self.installer_code = installer_code
        self.reload_ok = reload_ok
        self.installed_after_installer = installed_after_installer or {}
        self.version_output = version_output
        self.calls: List[tuple] = []

    def has_privileges(self) -> bool:
        self.calls.append(("has_privileges",))
        return self.root

    def command_exists(self, name: str) -> bool:
        self.calls.append(("command_exists", name))
        return name in self.commands

    def resolve_command(self, name: str) -> Optional[str]:
        self.calls.append(("resolve_command", name))
        return self.commands.get(name)

    def install_packages(self, names: Sequence[str]) -> CommandResult:
        self.calls.append(("install_packages", list(names)))
        code = self.install_codes.pop(0) if self.install_codes else 0
        if code == 0 and "curl" in names:
            self.commands.setdefault("curl", "/usr/bin/curl")
        return CommandResult(argv=["apt-get", "install", "-y", *names], returncode=code,
                             stderr="E: Unable to locate package" if code else "")

    def run_remote_installer(self, url: str, args: Sequence[str]) -> CommandResult:
        self.calls.append(("run_remote_installer", url, list(args)))
        if self.installer_code == 0:
            self.commands.update(self.installed_after_installer)
        return CommandResult(argv=["curl", url, "|", "sh", "-s", "--", *args], returncode=self.installer_code)

    def reload_environment(self, env_file: Path) -> bool:
        self.calls.append(("reload_environment", env_file))
        return self.reload_ok

    def command_version(self, path: str) -> CommandResult:
        self.calls.append(("command_version", path))
        return CommandResult(argv=[path, "--version"], returncode=0, stdout=self.version_output + "\n")

    def called(self, name: str) -> List[tuple]:
        return [c for c in self.calls if c[0] == name]


@pytest.fixture
def settings(tmp_path):
    return Settings(
        toolchain={"env_file": str(tmp_path / "cargo-env")},
        artifacts={"base_path": str(tmp_path / "artifacts")},
        logging={"file_path": str(tmp_path / "logs" / "provisioner.log")}
    )


@pytest.fixture
def fresh_host():
    """Root host with nothing installed where the installer provides rustc."""
    return FakeHost(installed_after_installer={"rustc": "/root/.cargo/bin/rustc"})
