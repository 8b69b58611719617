"""
Tests for configuration loading.
"""

import pytest
from pydantic import ValidationError

from m3usieve.config import CheckerConfig, Config, PlaylistConfig, load_config


@pytest.mark.unit
class TestConfig:
    def test_defaults(self):
        config = Config()

        assert config.playlist.header == "#EXTM3U"
        assert config.playlist.metadata_prefix == "#EXTINF"
        assert config.playlist.uri_schemes == ["http"]
        assert config.checker.concurrency_limit == 10
        assert config.checker.timeout == 3.0
        assert config.checker.max_redirects == 3
        assert config.checker.final_hop_attempts == 1
        assert config.output.suffix == "_checked"

    def test_from_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "checker:\n  concurrency_limit: 25\n  timeout: 5\nplaylist:\n  uri_schemes: [http, rtmp]\n",
            encoding="utf-8",
        )

        config = Config.from_yaml(path)

        assert config.checker.concurrency_limit == 25
        assert config.checker.timeout == 5.0
        assert config.playlist.uri_schemes == ["http", "rtmp"]

    def test_empty_yaml_uses_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("", encoding="utf-8")

        assert Config.from_yaml(path).checker.concurrency_limit == 10

    def test_missing_yaml(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            Config.from_yaml(tmp_path / "absent.yaml")

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("M3USIEVE_CHECKER__TIMEOUT", "7.5")
        monkeypatch.setenv("M3USIEVE_CHECKER__MAX_REDIRECTS", "0")

        config = Config()

        assert config.checker.timeout == 7.5
        assert config.checker.max_redirects == 0

    def test_load_config_discovers_file(self, tmp_path, monkeypatch):
        (tmp_path / "config.yml").write_text("checker:\n  max_redirects: 9\n", encoding="utf-8")
        monkeypatch.chdir(tmp_path)

        assert load_config().checker.max_redirects == 9

    def test_load_config_without_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        assert load_config().checker.max_redirects == 3

    @pytest.mark.parametrize(
        "values",
        [{"concurrency_limit": 0}, {"timeout": 0}, {"max_redirects": -1}, {"final_hop_attempts": -1}],
    )
    def test_checker_bounds(self, values):
        with pytest.raises(ValidationError):
            CheckerConfig(**values)

    def test_uri_schemes_must_not_be_empty(self):
        with pytest.raises(ValidationError):
            PlaylistConfig(uri_schemes=["  "])
