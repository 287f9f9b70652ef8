"""
Host capabilities used by the provisioner.

Everything that touches the operating system goes through a ``Host`` so the
provisioning sequence can run against fakes in tests.
"""

import logging
import os
import shlex
import shutil
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Sequence


@dataclass
class CommandResult:
    """Exit status and captured output of an external command."""
    argv: List[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""
    extra: Dict[str, int] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        return "\n".join(part for part in (self.stdout.strip(), self.stderr.strip()) if part)


def format_argv(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(a) for a in argv)


class Host(Protocol):
    """Side-effect interface over the machine being provisioned."""

    def has_privileges(self) -> bool:
        ...

    def command_exists(self, name: str) -> bool:
        ...

    def install_packages(self, names: Sequence[str]) -> CommandResult:
        ...

    def run_remote_installer(self, url: str, args: Sequence[str]) -> CommandResult:
        ...

    def reload_environment(self, env_file: Path) -> bool:
        ...

    def resolve_command(self, name: str) -> Optional[str]:
        ...

    def command_version(self, path: str) -> CommandResult:
        ...


class SystemHost:
    """Host implementation backed by the real system.

    No timeouts are applied: a hung package manager or download hangs the run.
    """

    def __init__(self, package_manager: str = "apt-get", min_tls_version: str = "1.2"):
        self.logger = logging.getLogger(__name__)
        self.package_manager = package_manager
        self.min_tls_version = min_tls_version

    def has_privileges(self) -> bool:
        return os.geteuid() == 0

    def command_exists(self, name: str) -> bool:
        return self.resolve_command(name) is not None

    def resolve_command(self, name: str) -> Optional[str]:
        return shutil.which(name)

    def _run(self, argv: Sequence[str], env: Optional[Dict[str, str]] = None) -> CommandResult:
        argv_list = list(argv)
        self.logger.info(f"Running: {format_argv(argv_list)}")

        result = subprocess.run(
            argv_list,
            capture_output=True,
            text=True,
            env=dict(os.environ, **(env or {}))
        )

        if result.stdout:
            self.logger.debug(f"STDOUT {result.stdout.strip()}")
        if result.stderr:
            self.logger.debug(f"STDERR {result.stderr.strip()}")

        return CommandResult(
            argv=argv_list,
            returncode=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr
        )

    def install_packages(self, names: Sequence[str]) -> CommandResult:
        """Refresh the package index, then install ``names`` in one transaction."""
        env = {"DEBIAN_FRONTEND": "noninteractive"}

        update = self._run([self.package_manager, "update"], env=env)
        if not update.ok:
            return update

        return self._run([self.package_manager, "install", "-y", *names], env=env)

    def download_argv(self, url: str) -> List[str]:
        return ["curl", "--proto", "=https", f"--tlsv{self.min_tls_version}", "-sSf", url]

    def run_remote_installer(self, url: str, args: Sequence[str]) -> CommandResult:
        """Download the installer script and pipe it straight into ``sh``.

        The installer's own output goes to the console.
        """
        download = self.download_argv(url)
        install = ["sh", "-s", "--", *args]
        self.logger.info(f"Running: {format_argv(download)} | {format_argv(install)}")

        fetch = subprocess.Popen(download, stdout=subprocess.PIPE, stderr=subprocess.PIPE)
        shell = subprocess.Popen(install, stdin=fetch.stdout)
        # Let curl receive SIGPIPE if sh exits early.
        fetch.stdout.close()

        shell_rc = shell.wait()
        fetch_stderr = fetch.stderr.read().decode(errors="replace")
        fetch.stderr.close()
        fetch_rc = fetch.wait()

        if fetch_stderr:
            self.logger.debug(f"STDERR {fetch_stderr.strip()}")

        return CommandResult(
            argv=[*download, "|", *install],
            returncode=fetch_rc or shell_rc,
            stderr=fetch_stderr,
            extra={"download": fetch_rc, "install": shell_rc}
        )

    def reload_environment(self, env_file: Path) -> bool:
        """Source ``env_file`` in a subshell and merge its variables into os.environ."""
        if not env_file.is_file():
            self.logger.debug(f"Environment file not found: {env_file}")
            return False

        result = subprocess.run(
            ["sh", "-c", '. "$1" && env -0', "sh", str(env_file)],
            capture_output=True
        )
        if result.returncode != 0:
            self.logger.debug(f"Sourcing {env_file} failed: {result.stderr.decode(errors='replace').strip()}")
            return False

        for entry in result.stdout.decode(errors="replace").split("\0"):
            key, sep, value = entry.partition("=")
            if sep and key:
                os.environ[key] = value
        return True

    def command_version(self, path: str) -> CommandResult:
        return self._run([path, "--version"])


class DryRunHost:
    """Wraps a host so that inspection runs for real and mutations are only logged."""

    def __init__(self, inner: Host):
        self.logger = logging.getLogger(__name__)
        self.inner = inner

    def has_privileges(self) -> bool:
        return self.inner.has_privileges()

    def command_exists(self, name: str) -> bool:
        return self.inner.command_exists(name)

    def resolve_command(self, name: str) -> Optional[str]:
        return self.inner.resolve_command(name)

    def command_version(self, path: str) -> CommandResult:
        return self.inner.command_version(path)

    def install_packages(self, names: Sequence[str]) -> CommandResult:
        argv = [getattr(self.inner, "package_manager", "apt-get"), "install", "-y", *names]
        self.logger.info(f"[dry-run] would run: {format_argv(argv)}")
        return CommandResult(argv=argv, returncode=0)

    def run_remote_installer(self, url: str, args: Sequence[str]) -> CommandResult:
        argv = ["curl", url, "|", "sh", "-s", "--", *args]
        self.logger.info(f"[dry-run] would run: {' '.join(argv)}")
        return CommandResult(argv=argv, returncode=0)

    def reload_environment(self, env_file: Path) -> bool:
        self.logger.info(f"[dry-run] would source {env_file}")
        return True
