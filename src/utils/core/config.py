"""
配置管理 - 读取 YAML 配置文件并支持环境变量覆盖

Values are looked up with dotted key paths (``config.get("llm.host")``) and
fall back to ``DEFAULT_CONFIG`` so the generator runs without a config file.
Components never read this object directly; they receive typed settings from
the ``*_settings()`` accessors.
"""
import copy
import os
from pathlib import Path
from typing import Any

import yaml

from src.schemas.settings import (
    CoverageSettings,
    DiscoverySettings,
    GenerationSettings,
    PathSettings,
    SandboxSettings,
    TestRequirements,
)


PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent.parent
DEFAULT_CONFIG_PATH = PROJECT_ROOT / "configs" / "pipeline.yaml"

DEFAULT_CONFIG: dict[str, Any] = {
    "llm": {
        "host": "http://localhost:11434",
        "model": "qwen2.5-coder:7b",
        "num_ctx": 131072,
        "num_predict": 1024,
        "attempts_per_backend": 3,
        "timeout_sec": 300,
        "backoff_sec": 1.0,
        "use_all_models": True,
    },
    "requirements": {
        "language_standard": "c++17",
        "system_includes": ["gtest/gtest.h", "cmath", "stdexcept"],
        "suite_name": "CalculatorTest",
        "test_macro": "TEST",
        "tests_per_symbol": 2,
        "target_symbols": ["add", "subtract"],
        "min_length": 250,
    },
    "discovery": {
        "extensions": [".cpp", ".h"],
        "ignore_paths": [],
        "infer_symbols": False,
    },
    "sandbox": {
        "compiler": "g++",
        "coverage_tool": "gcov",
        "include_dirs": ["/opt/homebrew/opt/googletest/include", "/usr/local/include"],
        "lib_dirs": ["/opt/homebrew/opt/googletest/lib", "/usr/local/lib"],
        "link_libs": ["gtest", "gtest_main"],
        "extra_link_flags": ["-pthread"],
        "coverage_flags": ["-fprofile-arcs", "-ftest-coverage"],
        "binary_name": "run_tests",
        "temp_prefix": "unit-test-generator-",
        "timeout_sec": None,
    },
    "coverage": {
        "threshold": 80.0,
    },
    "paths": {
        "input_dir": "codebase",
        "output_dir": "generated_tests",
        "debug_dir": "data/debug",
        "reports_dir": "data/reports",
        "test_suffix": "_test",
        "test_extension": ".cpp",
    },
    "logging": {
        "level": "INFO",
        "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        "file": "logs/unit_test_generator.log",
    },
}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge ``override`` into a copy of ``base``."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class Config:
    """配置管理类

    Unlike a process-wide singleton, every ``Config`` instance owns its data;
    the pipeline builds one at startup and hands typed settings downstream.
    """

    def __init__(self, config_path: str | Path | None = None):
        """
        Args:
            config_path: YAML file to load. ``None`` loads
                ``configs/pipeline.yaml`` when it exists, otherwise defaults.
        """
        self._config: dict = {}
        self.config_path: Path | None = None
        self.reload(config_path)

    def reload(self, config_path: str | Path | None = None):
        """
        重新加载配置文件

        Args:
            config_path: 配置文件路径，默认为 configs/pipeline.yaml

        Raises:
            FileNotFoundError: An explicit ``config_path`` does not exist.
        """
        if config_path is None:
            path = DEFAULT_CONFIG_PATH if DEFAULT_CONFIG_PATH.exists() else None
        else:
            path = Path(config_path)
            if not path.exists():
                raise FileNotFoundError(f"Config file not found: {path}")

        loaded: dict = {}
        if path is not None:
            with open(path, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f) or {}
            if not isinstance(loaded, dict):
                raise ValueError(f"Config file must contain a mapping: {path}")

        self.config_path = path
        self._config = _deep_merge(DEFAULT_CONFIG, loaded)

        self._apply_env_overrides()

    def _apply_env_overrides(self):
        """应用环境变量覆盖配置"""
        if os.environ.get('OLLAMA_HOST'):
            self.set('llm.host', os.environ['OLLAMA_HOST'])

        if os.environ.get('OLLAMA_MODEL'):
            self.set('llm.model', os.environ['OLLAMA_MODEL'])

        if os.environ.get('LOG_LEVEL'):
            self.set('logging.level', os.environ['LOG_LEVEL'])

    def set(self, key_path: str, value: Any):
        """
        设置嵌套字典的值

        Args:
            key_path: 点分隔的键路径，如 "llm.host"
            value: 要设置的值
        """
        keys = key_path.split('.')
        d = self._config

        for key in keys[:-1]:
            if key not in d or not isinstance(d[key], dict):
                d[key] = {}
            d = d[key]

        d[keys[-1]] = value

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        获取配置值

        Args:
            key_path: 点分隔的键路径，如 "llm.host"
            default: 默认值

        Returns:
            配置值或默认值
        """
        keys = key_path.split('.')
        value = self._config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def get_section(self, section: str) -> dict:
        """获取配置的某个部分"""
        return dict(self._config.get(section, {}))

    def __getitem__(self, key: str) -> Any:
        return self.get(key)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def generation_settings(self) -> GenerationSettings:
        return GenerationSettings(**self.get_section('llm'))

    def test_requirements(self) -> TestRequirements:
        return TestRequirements(**self.get_section('requirements'))

    def discovery_settings(self) -> DiscoverySettings:
        return DiscoverySettings(**self.get_section('discovery'))

    def sandbox_settings(self) -> SandboxSettings:
        return SandboxSettings(**self.get_section('sandbox'))

    def coverage_settings(self) -> CoverageSettings:
        return CoverageSettings(**self.get_section('coverage'))

    def path_settings(self) -> PathSettings:
        return PathSettings(**self.get_section('paths'))

    def ensure_output_dirs(self) -> None:
        """
        Create output, debug and reports directories.

        Raises:
            OSError: A directory cannot be created. Callers treat this as fatal.
        """
        paths = self.path_settings()
        for dir_path in (paths.output_dir, paths.debug_dir, paths.reports_dir):
            Path(dir_path).mkdir(parents=True, exist_ok=True)
