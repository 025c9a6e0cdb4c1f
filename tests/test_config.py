"""Tests for config.py and the configuration dialect adapters."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from doccov.adapters.config import (
    ConfigError,
    JestDialect,
    NativeDialect,
    VitestDialect,
    detect_dialect,
    get_dialect,
)
from doccov.config import (
    DEFAULT_EXCLUDE,
    DEFAULT_INCLUDE,
    DEFAULT_INDEX_PATH,
    DEFAULT_MEMORY_STORE_PATH,
    INDEX_PATH_ENV,
    MEMORY_STORE_ENV,
    CoverageConfig,
    detect_config_type,
    discover_config_file,
    load_config,
    normalize_config,
    parse_config,
    validate_config,
)
from tests.conftest import write_file


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(MEMORY_STORE_ENV, raising=False)
    monkeypatch.delenv(INDEX_PATH_ENV, raising=False)


# ── Dialect detection ────────────────────────────────────────────


class TestDetectConfigType:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("project.coverage.json", "native"),
            (".coverage.json", "native"),
            ("vitest.config.ts", "vitest"),
            ("vitest.config.mts", "vitest"),
            ("vitest.workspace.json", "vitest"),
            ("jest.config.js", "jest"),
            ("jest.config.cjs", "jest"),
            ("jest.config.json", "jest"),
            ("other.json", "native"),
        ],
    )
    def test_detects_by_file_name(self, name: str, expected: str) -> None:
        assert detect_config_type(name) == expected

    def test_dialect_classes(self) -> None:
        assert isinstance(detect_dialect(Path("vitest.config.js")), VitestDialect)
        assert isinstance(detect_dialect(Path("jest.config.ts")), JestDialect)
        assert isinstance(detect_dialect(Path("docs.coverage.json")), NativeDialect)

    def test_get_dialect(self) -> None:
        assert get_dialect("jest").name == "jest"
        with pytest.raises(ValueError, match="Unknown config dialect"):
            get_dialect("karma")


# ── Normalization ────────────────────────────────────────────────


class TestNormalizeConfig:
    def test_empty_uses_defaults(self) -> None:
        config = normalize_config({})
        assert config.thresholds == {}
        assert config.include == list(DEFAULT_INCLUDE)
        assert config.exclude == list(DEFAULT_EXCLUDE)
        assert config.categories == ["DOC", "ADR", "CTX"]
        assert config.memory_store_path == DEFAULT_MEMORY_STORE_PATH
        assert config.index_path == DEFAULT_INDEX_PATH
        assert config.overall_threshold is None

    def test_camel_case_keys(self) -> None:
        config = normalize_config(
            {"memoryStorePath": "./docs/records", "indexPath": "./docs/idx", "rootDir": "app"}
        )
        assert config.memory_store_path == "./docs/records"
        assert config.index_path == "./docs/idx"
        assert config.root_dir == "app"

    def test_thresholds_become_floats(self) -> None:
        config = normalize_config({"thresholds": {"overall": 80, "src": "92.5"}})
        assert config.thresholds == {"overall": 80.0, "src": 92.5}
        assert config.overall_threshold == 80.0

    def test_env_vars_fill_store_paths(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(MEMORY_STORE_ENV, "/data/records")
        monkeypatch.setenv(INDEX_PATH_ENV, "/data/index")
        config = normalize_config({})
        assert config.memory_store_path == "/data/records"
        assert config.index_path == "/data/index"

    def test_config_value_wins_over_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(MEMORY_STORE_ENV, "/data/records")
        config = normalize_config({"memory_store_path": "./mine"})
        assert config.memory_store_path == "./mine"

    def test_single_string_include(self) -> None:
        assert normalize_config({"include": "lib/**/*.py"}).include == ["lib/**/*.py"]

    @pytest.mark.parametrize(
        "raw",
        [
            {"thresholds": {"overall": "high"}},
            {"thresholds": {"overall": True}},
            {"thresholds": [80]},
            {"include": [1, 2]},
            {"exclude": {"a": 1}},
        ],
    )
    def test_wrong_types_raise(self, raw: dict) -> None:
        with pytest.raises(ConfigError):
            normalize_config(raw)


# ── Native files ─────────────────────────────────────────────────


class TestParseNativeConfig:
    def test_parse_native_file(self, tmp_path: Path) -> None:
        path = write_file(
            tmp_path,
            "project.coverage.json",
            json.dumps(
                {
                    "thresholds": {"overall": 75, "src": 90},
                    "include": ["lib/**/*.py"],
                    "categories": ["DOC"],
                    "memoryStorePath": "./records",
                }
            ),
        )
        config = parse_config(path)
        assert config.dialect == "native"
        assert config.source == str(path)
        assert config.thresholds == {"overall": 75.0, "src": 90.0}
        assert config.include == ["lib/**/*.py"]
        assert config.exclude == list(DEFAULT_EXCLUDE)
        assert config.categories == ["DOC"]
        assert config.memory_store_path == "./records"

    def test_env_placeholders_are_expanded(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("DOCS_HOME", "/srv/docs")
        path = write_file(
            tmp_path, ".coverage.json", json.dumps({"memoryStorePath": "${DOCS_HOME}/records"})
        )
        assert parse_config(path).memory_store_path == "/srv/docs/records"

    def test_unset_placeholder_warns(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
    ) -> None:
        monkeypatch.delenv("DOCCOV_TEST_UNSET", raising=False)
        path = write_file(
            tmp_path, ".coverage.json", json.dumps({"include": ["${DOCCOV_TEST_UNSET}src/**"]})
        )
        assert parse_config(path).include == ["src/**"]
        assert "DOCCOV_TEST_UNSET" in caplog.text

    def test_invalid_json_raises(self, tmp_path: Path) -> None:
        path = write_file(tmp_path, ".coverage.json", "{not json")
        with pytest.raises(ConfigError, match="Invalid JSON"):
            parse_config(path)

    def test_non_object_raises(self, tmp_path: Path) -> None:
        path = write_file(tmp_path, ".coverage.json", "[1, 2]")
        with pytest.raises(ConfigError, match="JSON object"):
            parse_config(path)

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            parse_config(tmp_path / "absent.coverage.json")


# ── Test-runner dialects ─────────────────────────────────────────


class TestVitestDialect:
    def test_flat_thresholds(self, tmp_path: Path) -> None:
        path = write_file(
            tmp_path,
            "vitest.config.ts",
            """import { defineConfig } from "vitest/config";

export default defineConfig({
  test: {
    coverage: {
      include: ["src/**/*.ts"],
      exclude: ["src/**/*.test.ts"],
      thresholds: { functions: 60, lines: 85 },
    },
  },
});
""",
        )
        config = parse_config(path)
        assert config.dialect == "vitest"
        assert config.include == ["src/**/*.ts"]
        assert config.exclude == ["src/**/*.test.ts"]
        assert config.thresholds == {"overall": 85.0}

    def test_global_thresholds_take_precedence(self, tmp_path: Path) -> None:
        path = write_file(
            tmp_path,
            "vitest.config.mjs",
            "export default { test: { coverage: { thresholds: "
            "{ lines: 50, global: { statements: 70 } } } } };\n",
        )
        assert parse_config(path).thresholds == {"overall": 70.0}

    def test_missing_coverage_section_uses_defaults(self, tmp_path: Path) -> None:
        path = write_file(tmp_path, "vitest.config.js", "export default { test: {} };\n")
        config = parse_config(path)
        assert config.include == list(DEFAULT_INCLUDE)
        assert config.thresholds == {}

    def test_unreadable_module_raises(self, tmp_path: Path) -> None:
        path = write_file(tmp_path, "vitest.config.ts", "export default {{{\n")
        with pytest.raises(ConfigError, match="Cannot evaluate config module"):
            parse_config(path)


class TestJestDialect:
    def test_collect_coverage_from_and_thresholds(self, tmp_path: Path) -> None:
        path = write_file(
            tmp_path,
            "jest.config.js",
            """module.exports = {
  collectCoverageFrom: ["src/**/*.{js,ts}", "!src/**/*.d.ts", "!**/vendor/**"],
  coverageThreshold: { global: { branches: 50, functions: 65 } },
};
""",
        )
        config = parse_config(path)
        assert config.dialect == "jest"
        assert config.include == ["src/**/*.{js,ts}"]
        assert config.exclude == ["src/**/*.d.ts", "**/vendor/**"]
        assert config.thresholds == {"overall": 65.0}

    def test_json_config(self, tmp_path: Path) -> None:
        path = write_file(
            tmp_path,
            "jest.config.json",
            json.dumps({"coverageThreshold": {"global": {"lines": 90, "branches": 10}}}),
        )
        assert parse_config(path).thresholds == {"overall": 90.0}

    def test_no_coverage_settings(self, tmp_path: Path) -> None:
        path = write_file(tmp_path, "jest.config.cjs", "module.exports = { verbose: true };\n")
        config = parse_config(path)
        assert config.include == list(DEFAULT_INCLUDE)
        assert config.thresholds == {}


# ── Discovery and loading ────────────────────────────────────────


class TestLoadConfig:
    def test_discover_prefers_dot_coverage_json(self, tmp_path: Path) -> None:
        write_file(tmp_path, "a.coverage.json", "{}")
        default = write_file(tmp_path, ".coverage.json", "{}")
        assert discover_config_file(tmp_path) == default

    def test_discover_falls_back_to_named_file(self, tmp_path: Path) -> None:
        named = write_file(tmp_path, "docs.coverage.json", "{}")
        assert discover_config_file(tmp_path) == named

    def test_discover_nothing(self, tmp_path: Path) -> None:
        assert discover_config_file(tmp_path) is None

    def test_load_defaults_without_file(self, tmp_path: Path) -> None:
        config = load_config(tmp_path)
        assert config.source is None
        assert config.dialect == "default"

    def test_load_discovered(self, tmp_path: Path) -> None:
        write_file(tmp_path, ".coverage.json", json.dumps({"thresholds": {"overall": 50}}))
        assert load_config(tmp_path).overall_threshold == 50.0

    def test_explicit_path_wins(self, tmp_path: Path) -> None:
        write_file(tmp_path, ".coverage.json", json.dumps({"thresholds": {"overall": 50}}))
        explicit = write_file(
            tmp_path, "jest.config.json", json.dumps({"collectCoverageFrom": ["lib/**"]})
        )
        config = load_config(tmp_path, explicit)
        assert config.dialect == "jest"
        assert config.include == ["lib/**"]

    def test_explicit_missing_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError):
            load_config(tmp_path, tmp_path / "missing.coverage.json")


# ── Validation ───────────────────────────────────────────────────


class TestValidateConfig:
    def test_defaults_are_valid(self) -> None:
        assert validate_config(CoverageConfig()) == []

    def test_threshold_out_of_range(self) -> None:
        errors = validate_config(CoverageConfig(thresholds={"overall": 120.0, "src": -1.0}))
        assert len(errors) == 2
        assert "thresholds.overall" in errors[0]
        assert "thresholds.src" in errors[1]

    def test_empty_include(self) -> None:
        errors = validate_config(CoverageConfig(include=[]))
        assert errors == ["include must contain at least one pattern"]

    def test_invalid_glob(self) -> None:
        errors = validate_config(CoverageConfig(exclude=["../vendor/**"]))
        assert len(errors) == 1
        assert "exclude contains an invalid glob pattern" in errors[0]

    def test_unknown_category(self) -> None:
        errors = validate_config(CoverageConfig(categories=["DOC", "NOTES"]))
        assert len(errors) == 1
        assert "NOTES" in errors[0]

    def test_missing_store_paths(self) -> None:
        errors = validate_config(CoverageConfig(memory_store_path="", index_path=""))
        assert errors == ["memory_store_path is required", "index_path is required"]

    def test_to_dict(self) -> None:
        data = CoverageConfig(thresholds={"overall": 80.0}).to_dict()
        assert data["thresholds"] == {"overall": 80.0}
        assert data["include"] == list(DEFAULT_INCLUDE)
