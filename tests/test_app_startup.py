"""Startup smoke test.

Verifies that every module of the PEI Assistant imports cleanly and that
the API and CLI entry points can be constructed.  This catches broken
import chains before they reach a deployment.
"""
from __future__ import annotations

import importlib
import pkgutil
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent


def _package_modules(package_name: str):
    package = importlib.import_module(package_name)
    for info in pkgutil.walk_packages(package.__path__, prefix=f"{package_name}."):
        yield info.name


class TestAppStartup:

    @pytest.fixture(autouse=True)
    def _ensure_project_root_on_path(self) -> None:
        root = str(PROJECT_ROOT)
        if root not in sys.path:
            sys.path.insert(0, root)

    @pytest.mark.parametrize("package_name", ["pei", "shared.schemas"])
    def test_all_modules_importable(self, package_name: str) -> None:
        failures = []
        for mod in sorted(_package_modules(package_name)):
            try:
                importlib.import_module(mod)
            except ImportError as exc:
                failures.append(f"{mod}: {exc}")
        assert not failures, "These modules failed to import:\n" + "\n".join(failures)

    def test_provider_modules_importable(self) -> None:
        for mod in ("core.providers.base", "core.providers.registry",
                    "core.providers.guards", "core.providers.audit"):
            importlib.import_module(mod)

    def test_api_app_builds(self) -> None:
        from services.api.app.main import app

        paths = {route.path for route in app.routes}
        assert "/health" in paths
        assert "/v1/sessions" in paths
        assert "/v1/peis" in paths

    def test_cli_registers_commands(self) -> None:
        from pei.cli.main import app

        names = {cmd.name or cmd.callback.__name__ for cmd in app.registered_commands}
        assert {"fields", "suggest", "smart", "activities", "analyze", "generate", "list"} <= names
