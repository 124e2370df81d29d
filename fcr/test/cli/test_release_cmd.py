from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
import typer
from typer.testing import CliRunner

from fcr import __version__
from fcr.cli.app import app
from fcr.cli.context import CLIContext
from fcr.core.config import FcConfig
from fcr.core.errors import ErrorCode
from fcr.output.console import MockConsole
from fcr.services.release.resolver import ServiceNameResolver
from fcr.template.model import PathConfig

from ..services.fakes import FakePlatform

TEMPLATE = """\
Resources:
  api:
    Type: 'Aliyun::Serverless::Service'
    getUser:
      Type: 'Aliyun::Serverless::Function'
      Events:
        http:
          Type: HTTP
          Properties:
            Methods: [GET]
  apiDomain:
    Type: 'Aliyun::Serverless::CustomDomain'
    Properties:
      DomainName: api.example.com
      RouteConfig:
        Routes:
          '/user/*':
            ServiceName: api
            FunctionName: getUser
"""


def _template(tmp_path: Path, text: str = TEMPLATE) -> Path:
    path = tmp_path / "template.yml"
    path.write_text(text, encoding="utf-8")
    return path


def _install_context(
    monkeypatch: pytest.MonkeyPatch, platform: FakePlatform, console: MockConsole
) -> dict[str, Any]:
    import fcr.cli.commands.release_cmd as release_cmd

    seen: dict[str, Any] = {}

    def fake_build_context(
        *, config_path: Path | None, verbose: bool, region: str | None, stack_name: str | None
    ) -> CLIContext:
        seen.update(
            config_path=config_path, verbose=verbose, region=region, stack_name=stack_name
        )
        return CLIContext(
            config=FcConfig(
                endpoint="https://1.cn-shanghai.fc.aliyuncs.com",
                access_key_id="id",
                access_key_secret="secret",
            ),
            region=region or "cn-shanghai",
            console=console,
            client=platform,
            resolver=ServiceNameResolver(stack_name=None, stack_client=None),
        )

    monkeypatch.setattr(release_cmd, "build_context", fake_build_context)
    return seen


def _release(template: Path, version: str = "1.2.3", **overrides: Any) -> None:
    import fcr.cli.commands.release_cmd as release_cmd

    args: dict[str, Any] = {
        "version": version,
        "config": None,
        "template": template,
        "instances": 2,
        "no_provision": False,
        "stack_name": None,
        "region": None,
        "dry_run": False,
        "eviction_policy": "snapshot-first",
        "dated_snapshot": False,
        "no_create_domains": False,
        "verbose": False,
    }
    args.update(overrides)
    release_cmd.release(**args)


def test_release_reconciles_and_prints_summary(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    platform = FakePlatform()
    platform.add_domain("api.example.com", PathConfig("/user/*", "api", "getUser"))
    console = MockConsole()
    seen = _install_context(monkeypatch, platform, console)

    _release(_template(tmp_path), region="cn-hangzhou", verbose=True)

    assert seen["region"] == "cn-hangzhou"
    assert seen["verbose"] is True
    assert "v1_2_3" in platform.aliases["api"]
    assert console.find("custom domain api.example.com: updated")
    assert console.find("OK release v1_2_3 reconciled")


def test_invalid_version_exits_before_context(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    platform = FakePlatform()
    seen = _install_context(monkeypatch, platform, MockConsole())

    with pytest.raises(typer.Exit) as exc:
        _release(_template(tmp_path), version="1.2")

    assert exc.value.exit_code == int(ErrorCode.USER_ERROR)
    assert seen == {}
    assert platform.calls == []


def test_invalid_eviction_policy(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _install_context(monkeypatch, FakePlatform(), MockConsole())
    with pytest.raises(typer.Exit) as exc:
        _release(_template(tmp_path), eviction_policy="random")
    assert exc.value.exit_code == int(ErrorCode.USER_ERROR)


def test_missing_template_is_io_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    console = MockConsole()
    _install_context(monkeypatch, FakePlatform(), console)
    with pytest.raises(typer.Exit) as exc:
        _release(tmp_path / "missing.yml")
    assert exc.value.exit_code == int(ErrorCode.IO_ERROR)
    assert console.has_error()


def test_remote_failure_exit_code(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    platform = FakePlatform()
    platform.fail("publish_version", "Forbidden")
    console = MockConsole()
    _install_context(monkeypatch, platform, console)

    with pytest.raises(typer.Exit) as exc:
        _release(_template(tmp_path))

    assert exc.value.exit_code == int(ErrorCode.REMOTE_ERROR)
    assert console.find("publish_version failed")


def test_missing_domain_without_creation_is_resolution_error(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    _install_context(monkeypatch, FakePlatform(), MockConsole())
    with pytest.raises(typer.Exit) as exc:
        _release(_template(tmp_path), no_create_domains=True)
    assert exc.value.exit_code == int(ErrorCode.RESOLUTION_ERROR)


def test_degraded_run_exits_zero_with_warning(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    platform = FakePlatform()
    platform.set_provision("api", "v1_2_2", "getUser", target=5, current=5)
    platform.fail("put_provision_config", "throttled", when=lambda args: args[1] == "v1_2_2")
    console = MockConsole()
    _install_context(monkeypatch, platform, console)

    _release(_template(tmp_path))

    assert console.find("1 capacity drain(s) failed")
    assert console.find("OK release v1_2_3 reconciled")


def test_config_error_exit_code(tmp_path: Path) -> None:
    from fcr.cli.context import build_context

    with pytest.raises(typer.Exit) as exc:
        build_context(
            config_path=tmp_path / "config.yaml", verbose=False, region=None, stack_name=None
        )
    assert exc.value.exit_code == int(ErrorCode.CONFIG_ERROR)


def test_stack_name_needs_a_region(tmp_path: Path) -> None:
    from fcr.cli.context import build_context

    config = tmp_path / "config.yaml"
    config.write_text(
        "endpoint: http://localhost:9000\naccess_key_id: id\naccess_key_secret: secret\n",
        encoding="utf-8",
    )
    with pytest.raises(typer.Exit) as exc:
        build_context(config_path=config, verbose=False, region=None, stack_name="prod")
    assert exc.value.exit_code == int(ErrorCode.CONFIG_ERROR)


class TestApp:
    def test_version(self) -> None:
        result = CliRunner().invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_qualifier_command(self) -> None:
        result = CliRunner().invoke(app, ["qualifier", "v1.3.0-rc1"])
        assert result.exit_code == 0
        assert "qualifier: v1_3_0-rc1-pre" in result.output
        assert "mode: snapshot" in result.output
        assert "stable: v1_3_0" in result.output

    def test_qualifier_rejects_bad_version(self) -> None:
        result = CliRunner().invoke(app, ["qualifier", "one.two"])
        assert result.exit_code == int(ErrorCode.USER_ERROR)
