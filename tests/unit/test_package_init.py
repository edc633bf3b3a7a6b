"""
Модульные тесты для labelraster/__init__.py
Тестирует метаданные, конфигурацию, логирование и публичный API.
"""

import dataclasses
import json
import logging
import re
from pathlib import Path

import pytest

import labelraster
from labelraster.barcodegen.sizing import SizingRules


class TestVersionMetadata:
    def test_version_format(self) -> None:
        assert re.match(r"^\d+\.\d+\.\d+$", labelraster.__version__)

    def test_version_components(self) -> None:
        expected = (
            f"{labelraster.VERSION_MAJOR}."
            f"{labelraster.VERSION_MINOR}."
            f"{labelraster.VERSION_PATCH}"
        )
        assert labelraster.__version__ == expected

    def test_public_api_exported(self) -> None:
        for name in labelraster.__all__:
            assert hasattr(labelraster, name), name


class TestLogging:
    def test_package_logger_configured(self) -> None:
        root = logging.getLogger("labelraster")
        assert root.handlers
        assert any(
            isinstance(h, logging.StreamHandler) and h.level == logging.WARNING
            for h in root.handlers
        )

    def test_setup_is_idempotent(self) -> None:
        root = logging.getLogger("labelraster")
        before = list(root.handlers)
        labelraster._setup_logging()
        assert root.handlers == before

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("my_plugin", "labelraster.my_plugin"),
            ("labelraster.units", "labelraster.units"),
            ("__main__", "labelraster.main"),
            (".relative", "labelraster.relative"),
        ],
    )
    def test_get_logger_namespacing(self, name: str, expected: str) -> None:
        assert labelraster.get_logger(name).name == expected


class TestLoadConfig:
    def test_missing_file_returns_defaults(self, tmp_path: Path) -> None:
        config = labelraster.load_config(tmp_path / "missing.json")
        assert config == labelraster._DEFAULT_CONFIG
        assert config is not labelraster._DEFAULT_CONFIG

    def test_user_values_override(self, tmp_path: Path) -> None:
        path = tmp_path / "labelraster.json"
        path.write_text(json.dumps({"qr_min_module_px": 3}), encoding="utf-8")
        config = labelraster.load_config(path)
        assert config["qr_min_module_px"] == 3
        assert config["mono_threshold"] == 128
        assert SizingRules.from_config(config).qr_min_module_px == 3

    def test_invalid_json_warns(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        path = tmp_path / "labelraster.json"
        path.write_text("{not json", encoding="utf-8")
        with caplog.at_level(logging.WARNING, logger="labelraster"):
            config = labelraster.load_config(path)
        assert config == labelraster._DEFAULT_CONFIG
        assert any(r.levelno == logging.WARNING for r in caplog.records)

    def test_non_object_json(self, tmp_path: Path) -> None:
        path = tmp_path / "labelraster.json"
        path.write_text("[1, 2, 3]", encoding="utf-8")
        assert labelraster.load_config(path) == labelraster._DEFAULT_CONFIG

    def test_defaults_build_default_rules(self) -> None:
        assert SizingRules.from_config(labelraster._DEFAULT_CONFIG) == SizingRules()

    def test_defaults_match_sizing_rules(self) -> None:
        assert labelraster._DEFAULT_CONFIG == dataclasses.asdict(SizingRules())

    def test_out_of_range_value_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "labelraster.json"
        path.write_text(json.dumps({"qr_min_module_px": 0}), encoding="utf-8")
        with pytest.raises(ValueError, match="qr_min_module_px"):
            SizingRules.from_config(labelraster.load_config(path))


class TestCheckDependencies:
    def test_reports_booleans(self) -> None:
        deps = labelraster.check_dependencies()
        assert set(deps) == {
            "pillow",
            "qrcode",
            "python-barcode",
            "pylibdmtx",
            "treepoem",
            "ghostscript",
        }
        assert all(isinstance(v, bool) for v in deps.values())
        assert deps["pillow"] and deps["qrcode"] and deps["python-barcode"]
