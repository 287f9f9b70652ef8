import json
import logging

import pytest

import main
from conftest import FakeHost


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    yield
    logging.getLogger().handlers.clear()


def test_success_prints_version_and_exits_zero(fresh_host, capsys):
    code = main.run(["--no-record"], host=fresh_host)

    out = capsys.readouterr().out
    assert code == 0
    assert "rustc 1.82.0 (f6e511eec 2024-10-15)" in out
    assert "installed successfully!" in out


def test_non_root_exits_one_without_side_effects(capsys):
    host = FakeHost(root=False)

    code = main.run(["--no-record"], host=host)

    assert code == 1
    assert host.calls == [("has_privileges",)]
    assert capsys.readouterr().out == ""


def test_run_record_written_by_default(fresh_host, tmp_path):
    code = main.run(["--artifacts-dir", str(tmp_path / "records")], host=fresh_host)

    assert code == 0
    records = list((tmp_path / "records" / "runs").glob("*/provision_result.json"))
    assert len(records) == 1
    assert json.loads(records[0].read_text())["exit_code"] == 0


def test_config_file_overrides_packages(tmp_path):
    config_path = tmp_path / "provision.json"
    config_path.write_text(json.dumps({"packages": {"names": ["libssl-dev"]}}))
    host = FakeHost(commands={"curl": "/usr/bin/curl"},
                    installed_after_installer={"rustc": "/root/.cargo/bin/rustc"})

    code = main.run(["--config", str(config_path), "--no-record"], host=host)

    assert code == 0
    assert host.called("install_packages") == [("install_packages", ["libssl-dev"])]


def test_invalid_config_exits_one(tmp_path):
    config_path = tmp_path / "provision.json"
    config_path.write_text(json.dumps({"toolchain": {"installer_url": "http://example.com"}}))
    host = FakeHost()

    code = main.run(["--config", str(config_path)], host=host)

    assert code == 1
    assert host.calls == []


def test_unexpected_error_exits_one():
    class BrokenHost(FakeHost):
        def has_privileges(self):
            raise OSError("boom")

    assert main.run(["--no-record"], host=BrokenHost()) == 1


def test_dry_run_builds_wrapping_host():
    settings = main.load_config(main.parse_arguments(["--dry-run"]))

    host = main.build_host(settings)

    assert isinstance(host, main.DryRunHost)
    assert isinstance(host.inner, main.SystemHost)
