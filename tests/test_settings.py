from pathlib import Path

import pytest
from pydantic import ValidationError

from config.settings import DEFAULT_PACKAGES, Settings, ToolchainConfig


def test_defaults_match_rustup_setup():
    settings = Settings()

    assert settings.packages.manager == "apt-get"
    assert settings.packages.download_tool == "curl"
    assert settings.packages.names == DEFAULT_PACKAGES
    assert settings.toolchain.installer_url == "https://sh.rustup.rs"
    assert settings.toolchain.installer_args == ["-y"]
    assert settings.toolchain.min_tls_version == "1.2"
    assert settings.toolchain.binary == "rustc"
    assert not settings.dry_run


def test_env_file_defaults_to_home(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))

    assert ToolchainConfig().resolve_env_file() == tmp_path / ".cargo" / "env"


def test_explicit_env_file_wins(monkeypatch):
    monkeypatch.setenv("HOME", "/home/builder")

    config = ToolchainConfig(env_file="/opt/cargo/env")

    assert config.resolve_env_file() == Path("/opt/cargo/env")


def test_plain_http_installer_rejected():
    with pytest.raises(ValidationError):
        ToolchainConfig(installer_url="http://sh.rustup.rs")


def test_old_tls_rejected():
    with pytest.raises(ValidationError):
        ToolchainConfig(min_tls_version="1.0")


def test_empty_package_list_rejected():
    with pytest.raises(ValidationError):
        Settings(packages={"names": []})


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("PROVISIONER_DRY_RUN", "true")
    monkeypatch.setenv("PROVISIONER_TOOLCHAIN__BINARY", "cargo")

    settings = Settings()

    assert settings.dry_run
    assert settings.toolchain.binary == "cargo"


def test_log_level_normalised():
    settings = Settings(logging={"level": "debug"})

    assert settings.logging.level == "DEBUG"
