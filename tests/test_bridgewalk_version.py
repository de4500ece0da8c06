from __future__ import annotations

import importlib.metadata
import importlib.util
from pathlib import Path

import journey_engine

ROOT = Path(__file__).resolve().parents[1]
MODULE_PATH = ROOT / "src" / "bridgewalk" / "__init__.py"


def test_bridgewalk_version_falls_back_without_installed_distribution(monkeypatch) -> None:
    spec = importlib.util.spec_from_file_location("bridgewalk_init_under_test", MODULE_PATH)
    assert spec and spec.loader

    module = importlib.util.module_from_spec(spec)

    def _raise_not_found(_: str) -> str:
        raise importlib.metadata.PackageNotFoundError

    monkeypatch.setattr(importlib.metadata, "version", _raise_not_found)

    spec.loader.exec_module(module)

    assert module.__version__ == "0+unknown"
    assert module.JourneyEngine is journey_engine.JourneyEngine
    assert set(journey_engine.__all__) <= set(module.__all__)
