from pathlib import Path

from pipewrench_compiler.core.manifest import DEFAULT_MOD_INFO, MANIFEST_NAME, write_manifest

MEDIA_FOLDERS = ("sound", "textures", "models", "scripts", "client", "server", "shared")


def init_project(target_dir: str | Path) -> list[Path]:
    """Create the ``src`` folder layout and a default manifest; existing files are kept."""
    root = Path(target_dir)
    created = []
    for name in MEDIA_FOLDERS:
        folder = root / "src" / name
        if not folder.exists():
            created.append(folder)
        folder.mkdir(parents=True, exist_ok=True)

    manifest = root / MANIFEST_NAME
    if not manifest.exists():
        write_manifest(manifest, DEFAULT_MOD_INFO)
        created.append(manifest)
    return created
