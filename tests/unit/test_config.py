"""
Runtime Configuration Unit Tests
Tests for solvency/config/runtime.py
"""
import pytest

from solvency.config import (
    RuntimeConfig,
    TreeConfig,
    get_default_config,
    get_default_config_template,
    set_default_config,
)
from solvency.schemas.errors import BalanceOverflowException, ParameterException


class TestLoading:
    """Tests for config sources."""

    def test_defaults(self):
        config = RuntimeConfig()
        assert config.tree.n_currencies == 2
        assert config.tree.byte_width == 14
        assert config.tree.depth is None
        assert config.build.workers == 0
        assert config.logging.level == "INFO"

    def test_from_dict_partial(self):
        config = RuntimeConfig.from_dict({"tree": {"byte_width": 8}})
        assert config.tree.byte_width == 8
        assert config.tree.n_currencies == 2

    def test_from_dict_unknown_key(self):
        with pytest.raises(ParameterException):
            RuntimeConfig.from_dict({"tree": {"width": 8}})

    def test_from_dict_empty_section(self):
        config = RuntimeConfig.from_dict({"tree": None, "build": {"workers": 2}})
        assert config.tree.byte_width == 14
        assert config.build.workers == 2

    def test_from_dict_section_not_mapping(self):
        with pytest.raises(ParameterException, match="must be a mapping") as exc_info:
            RuntimeConfig.from_dict({"build": [1, 2]})
        assert exc_info.value.details["parameter"] == "build"

    def test_from_yaml(self, tmp_path):
        path = tmp_path / "solvency.yaml"
        path.write_text("tree:\n  n_currencies: 3\n  depth: 4\nbuild:\n  workers: 2\n")
        config = RuntimeConfig.from_yaml(path)
        assert config.tree.n_currencies == 3
        assert config.tree.depth == 4
        assert config.build.workers == 2

    def test_from_yaml_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert RuntimeConfig.from_yaml(path).to_dict() == RuntimeConfig().to_dict()

    def test_from_yaml_empty_section(self, tmp_path):
        path = tmp_path / "solvency.yaml"
        path.write_text("tree:\nbuild:\n  workers: 3\n")
        config = RuntimeConfig.from_yaml(path)
        assert config.tree.n_currencies == 2
        assert config.build.workers == 3

    def test_from_yaml_not_mapping(self, tmp_path):
        path = tmp_path / "solvency.yaml"
        path.write_text("- tree\n")
        with pytest.raises(ParameterException):
            RuntimeConfig.from_yaml(path)

    def test_from_yaml_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            RuntimeConfig.from_yaml(tmp_path / "missing.yaml")

    def test_template_parses(self, tmp_path):
        path = tmp_path / "template.yaml"
        path.write_text(get_default_config_template())
        config = RuntimeConfig.from_yaml(path)
        config.validate()
        assert config.tree.byte_width == 14


class TestEnvironment:
    """Tests for SOLVENCY_* overrides."""

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("SOLVENCY_N_CURRENCIES", "4")
        monkeypatch.setenv("SOLVENCY_TREE_DEPTH", "10")
        monkeypatch.setenv("SOLVENCY_WORKERS", "3")
        monkeypatch.setenv("SOLVENCY_LOG_LEVEL", "DEBUG")
        config = RuntimeConfig.from_env()
        assert config.tree.n_currencies == 4
        assert config.tree.depth == 10
        assert config.build.workers == 3
        assert config.logging.level == "DEBUG"

    def test_with_env_overrides(self, monkeypatch):
        base = RuntimeConfig.from_dict({"tree": {"byte_width": 8, "n_currencies": 3}})
        monkeypatch.setenv("SOLVENCY_BYTE_WIDTH", "10")
        config = base.with_env_overrides()
        assert config.tree.byte_width == 10
        assert config.tree.n_currencies == 3
        assert base.tree.byte_width == 8

    def test_no_overrides_returns_self(self):
        config = RuntimeConfig()
        assert config.with_env_overrides() is config

    def test_bad_integer(self, monkeypatch):
        monkeypatch.setenv("SOLVENCY_BYTE_WIDTH", "wide")
        with pytest.raises(ParameterException, match="SOLVENCY_BYTE_WIDTH"):
            RuntimeConfig.from_env()


class TestValidation:
    """Tests for RuntimeConfig.validate."""

    def test_defaults_valid(self):
        RuntimeConfig().validate()

    @pytest.mark.parametrize(
        "tree",
        [
            TreeConfig(n_currencies=0),
            TreeConfig(n_currencies=7),
            TreeConfig(byte_width=0),
            TreeConfig(depth=-1),
        ],
    )
    def test_invalid_tree(self, tree):
        with pytest.raises(ParameterException):
            RuntimeConfig(tree=tree).validate()

    def test_invalid_workers(self):
        config = RuntimeConfig.from_dict({"build": {"workers": -1}})
        with pytest.raises(ParameterException) as exc_info:
            config.validate()
        assert exc_info.value.details["parameter"] == "workers"

    def test_unsound_depth(self):
        config = RuntimeConfig(tree=TreeConfig(byte_width=31, depth=200))
        with pytest.raises(BalanceOverflowException):
            config.validate()

    def test_to_dict(self):
        data = RuntimeConfig(tree=TreeConfig(depth=5)).to_dict()
        assert data["tree"] == {"n_currencies": 2, "byte_width": 14, "depth": 5}
        assert data["build"] == {"workers": 0}


class TestDefaultConfig:
    """Tests for the module-level default."""

    def test_set_and_get(self):
        previous = get_default_config()
        custom = RuntimeConfig(tree=TreeConfig(byte_width=9))
        try:
            set_default_config(custom)
            assert get_default_config() is custom
        finally:
            set_default_config(previous)
