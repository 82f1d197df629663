"""Tests for TOML configuration loading."""

import tomllib

import pytest

from dexspectre.config import (
    DexSpectreConfig,
    find_config_file,
    generate_default_config,
    init_config,
    load_config,
)
from dexspectre.logging import LogLevel


class TestDefaults:
    def test_default_values(self):
        config = DexSpectreConfig()
        assert config.limits.max_call_depth == 50
        assert config.analysis.emulation
        assert config.analysis.cache_mutability
        assert config.analysis.cache_size == 1024
        assert config.output.level == "info"

    def test_missing_file_gives_defaults(self, tmp_path):
        config = load_config(tmp_path / "absent.toml")
        assert config.config_file is None
        assert config.to_dict() == DexSpectreConfig().to_dict()

    def test_generated_config_parses(self):
        data = tomllib.loads(generate_default_config())
        assert data["tool"]["dexspectre"]["limits"]["max_call_depth"] == 50
        assert data["tool"]["dexspectre"]["analysis"]["final_classes"] == []


class TestLoadConfig:
    def test_standalone_file(self, tmp_path):
        path = tmp_path / "dexspectre.toml"
        path.write_text(
            "[limits]\n"
            "max_call_depth = 8\n"
            "\n"
            "[analysis]\n"
            'final_classes = ["com.lib.Id"]\n'
            "cache_size = 16\n"
            "\n"
            "[output]\n"
            'level = "fine"\n',
            encoding="utf-8",
        )
        config = load_config(path)
        assert config.limits.max_call_depth == 8
        assert config.analysis.final_classes == ["com.lib.Id"]
        assert config.analysis.cache_size == 16
        assert config.output.create_logger().level == LogLevel.FINE
        assert config.project_root == tmp_path

    def test_pyproject_section(self, tmp_path):
        path = tmp_path / "pyproject.toml"
        path.write_text(
            '[project]\nname = "app"\n\n[tool.dexspectre.analysis]\nemulation = false\n',
            encoding="utf-8",
        )
        config = load_config(path)
        assert not config.analysis.emulation
        assert config.limits.max_call_depth == 50

    def test_pyproject_without_section(self, tmp_path):
        path = tmp_path / "pyproject.toml"
        path.write_text('[project]\nname = "app"\n', encoding="utf-8")
        assert load_config(path).to_dict() == DexSpectreConfig().to_dict()

    def test_init_config_round_trips(self, tmp_path):
        path = init_config(tmp_path)
        assert path.name == "dexspectre.toml"
        assert load_config(path).to_dict() == DexSpectreConfig().to_dict()

    def test_init_config_refuses_to_overwrite(self, tmp_path):
        init_config(tmp_path)
        with pytest.raises(FileExistsError):
            init_config(tmp_path)

    def test_discovered_from_subdirectory(self, tmp_path):
        (tmp_path / ".dexspectre.toml").write_text("[limits]\nmax_call_depth = 3\n", encoding="utf-8")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        assert find_config_file(nested) == (tmp_path / ".dexspectre.toml").resolve()
        assert load_config(start_dir=nested).limits.max_call_depth == 3


class TestInvalidConfig:
    @pytest.mark.parametrize(
        "body",
        [
            "[limits]\nmax_call_depth = \"deep\"\n",
            "[limits]\nmax_call_depth = true\n",
            "[limits]\nmax_call_depth = -1\n",
            "[analysis]\nemulation = 1\n",
            "[analysis]\ncache_size = 0\n",
            "[analysis]\nfinal_classes = \"Lcom/lib/Id;\"\n",
            "[output]\nlevel = \"chatty\"\n",
        ],
    )
    def test_rejected(self, tmp_path, body):
        path = tmp_path / "dexspectre.toml"
        path.write_text(body, encoding="utf-8")
        with pytest.raises(ValueError):
            load_config(path)

    def test_malformed_toml(self, tmp_path):
        path = tmp_path / "dexspectre.toml"
        path.write_text("[limits\nmax_call_depth = 3\n", encoding="utf-8")
        with pytest.raises(ValueError, match="Failed to parse"):
            load_config(path)
