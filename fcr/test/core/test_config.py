"""Tests for fcr.core.config module."""

from __future__ import annotations

from pathlib import Path

import pytest

from fcr.core.config import (
    DEFAULT_TIMEOUT_SECONDS,
    FcConfig,
    default_config_path,
    extract_region,
    load_config,
)
from fcr.core.result import Err, Ok

FUNCRAFT_CONFIG = """\
endpoint: 'https://1234567890.cn-shanghai.fc.aliyuncs.com'
api_version: '2016-08-15'
access_key_id: AKIDEXAMPLE
access_key_secret: secret
security_token: ''
debug: false
timeout: 30
retries: 3
sls_endpoint: ''
report: true
"""


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return path


class TestFcConfig:
    def test_from_dict_minimal(self) -> None:
        config = FcConfig.from_dict(
            {
                "endpoint": "https://1.cn-hangzhou.fc.aliyuncs.com",
                "access_key_id": "id",
                "access_key_secret": "secret",
            }
        )
        assert config.timeout == DEFAULT_TIMEOUT_SECONDS
        assert config.security_token is None
        assert config.debug is False

    def test_from_dict_reports_missing_keys(self) -> None:
        with pytest.raises(ValueError, match="access_key_id, access_key_secret"):
            FcConfig.from_dict({"endpoint": "https://1.cn-hangzhou.fc.aliyuncs.com"})

    def test_account_id(self) -> None:
        config = FcConfig(
            endpoint="https://1234567890.cn-shanghai.fc.aliyuncs.com",
            access_key_id="id",
            access_key_secret="secret",
        )
        assert config.account_id == "1234567890"

    def test_frozen(self) -> None:
        config = FcConfig(endpoint="e", access_key_id="i", access_key_secret="s")
        with pytest.raises(AttributeError):
            config.endpoint = "other"  # type: ignore[misc]


class TestExtractRegion:
    def test_region_from_endpoint(self) -> None:
        assert extract_region("https://1234567890.cn-shanghai.fc.aliyuncs.com") == "cn-shanghai"
        assert extract_region("http://123.ap-southeast-1.fc.aliyuncs.com") == "ap-southeast-1"

    def test_unparsable_endpoint(self) -> None:
        assert extract_region("localhost:9000") is None


class TestLoadConfig:
    def test_loads_funcraft_file_and_ignores_extra_keys(self, tmp_path: Path) -> None:
        result = load_config(_write(tmp_path, FUNCRAFT_CONFIG))
        assert isinstance(result, Ok)
        config = result.value
        assert config.access_key_id == "AKIDEXAMPLE"
        assert config.timeout == 30
        # Empty strings count as unset.
        assert config.security_token is None

    def test_missing_file(self, tmp_path: Path) -> None:
        result = load_config(tmp_path / "nope.yaml")
        assert isinstance(result, Err)
        assert "not found" in result.error.message
        assert result.error.path == tmp_path / "nope.yaml"

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        result = load_config(_write(tmp_path, "endpoint: [unclosed\n"))
        assert isinstance(result, Err)
        assert "Invalid YAML" in result.error.message

    def test_root_must_be_mapping(self, tmp_path: Path) -> None:
        result = load_config(_write(tmp_path, "- a\n- b\n"))
        assert isinstance(result, Err)
        assert "mapping" in result.error.message

    def test_missing_credentials(self, tmp_path: Path) -> None:
        result = load_config(_write(tmp_path, "endpoint: https://1.cn-beijing.fc.aliyuncs.com\n"))
        assert isinstance(result, Err)
        assert "missing required keys" in result.error.message


def test_default_config_path_is_funcraft_location() -> None:
    path = default_config_path()
    assert path.parts[-2:] == (".fcli", "config.yaml")
