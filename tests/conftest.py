"""Shared fixtures and helpers for tests."""

from pathlib import Path

import pytest

from pipewrench_compiler.core.manifest import write_manifest
from pipewrench_compiler.models import CompiledUnit, ModInfo, ProjectConfig, ProjectSettings

_REPO_ROOT = Path(__file__).parent.parent


# ---------------------------------------------------------------------------
# Auto-marker: tag tests as "unit" or "integration" based on directory
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        test_path = Path(str(item.fspath))
        rel = test_path.relative_to(_REPO_ROOT / "tests")
        parts = rel.parts
        if parts and parts[0] == "integration":
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# ---------------------------------------------------------------------------
# Shared fixtures
# ---------------------------------------------------------------------------

MOD_INFO = {
    "id": "TestMod",
    "name": "Test Mod",
    "poster": "poster.png",
    "description": "A mod used in tests",
}


class StubCompiler:
    """ExternalCompiler returning a fixed batch of units and recording what it saw."""

    def __init__(self, units: list[CompiledUnit] | None = None) -> None:
        self.units = units or []
        self.calls = 0
        self.markers_seen: list[Path] = []

    def compile(self, config: ProjectConfig) -> list[CompiledUnit]:
        self.calls += 1
        self.markers_seen = sorted(config.src_dir.rglob("_.ts"))
        return [CompiledUnit(u.declared_path, u.text) for u in self.units]


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    root = tmp_path / "mod"
    for name in ("client", "server", "shared"):
        (root / "src" / name).mkdir(parents=True)
    write_manifest(root / "mod.info", MOD_INFO)
    return root


@pytest.fixture
def config(project_root: Path) -> ProjectConfig:
    return ProjectConfig(
        root=project_root.resolve(),
        settings=ProjectSettings(),
        mod_info=ModInfo(**MOD_INFO),
    )
