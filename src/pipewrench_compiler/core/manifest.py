"""Reading and writing the ``mod.info`` manifest (``key=value`` lines)."""

from __future__ import annotations

from pathlib import Path

from pydantic import ValidationError

from pipewrench_compiler.errors import ConfigValidationError, MissingManifestFieldError
from pipewrench_compiler.models import ModInfo

MANIFEST_NAME = "mod.info"
REQUIRED_FIELDS = ("id", "name", "poster", "description")

DEFAULT_MOD_INFO = {
    "name": "My First Mod",
    "poster": "poster.png",
    "id": "MyFirst",
    "description": "ModDescription",
    "url": "https://theindiestone.com",
}


def parse_manifest(text: str) -> dict[str, str]:
    entries: dict[str, str] = {}
    for line in text.splitlines():
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip().lower()
        if key:
            entries[key] = value.strip()
    return entries


def to_mod_info(entries: dict[str, str], source: Path | None = None) -> ModInfo:
    missing = [name for name in REQUIRED_FIELDS if not entries.get(name)]
    if missing:
        raise MissingManifestFieldError(missing, source)

    require = [item.strip() for item in entries.get("require", "").split(",") if item.strip()]
    try:
        return ModInfo(
            id=entries["id"],
            name=entries["name"],
            poster=entries["poster"],
            description=entries["description"],
            url=entries.get("url") or None,
            require=require,
        )
    except ValidationError as exc:
        raise ConfigValidationError([str(err["msg"]) for err in exc.errors()], source) from exc


def read_manifest(project_root: Path) -> ModInfo:
    path = project_root / MANIFEST_NAME
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise MissingManifestFieldError(list(REQUIRED_FIELDS), path) from None
    return to_mod_info(parse_manifest(text), path)


def serialize_manifest(entries: dict[str, str] | ModInfo) -> str:
    if isinstance(entries, ModInfo):
        data = entries.model_dump(exclude_none=True)
        data["require"] = ",".join(data.get("require", []))
        entries = {key: value for key, value in data.items() if value != ""}
    return "\r\n".join(f"{key}={value}" for key, value in entries.items())


def write_manifest(path: Path, entries: dict[str, str] | ModInfo) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(serialize_manifest(entries), encoding="utf-8", newline="")
