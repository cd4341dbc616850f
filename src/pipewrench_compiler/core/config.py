import json
import os
import shlex
from pathlib import Path

from pydantic import ValidationError

from pipewrench_compiler.core.manifest import read_manifest
from pipewrench_compiler.errors import ConfigValidationError
from pipewrench_compiler.models import ProjectConfig, ProjectSettings

CONFIG_NAME = "pipewrench.json"
COMPILER_ENV = "PIPEWRENCH_COMPILER"


def _format_error(err: dict) -> str:
    location = ".".join(str(part) for part in err.get("loc", ())) or "<root>"
    return f"{location}: {err['msg']}"


def load_settings(project_root: Path) -> ProjectSettings:
    path = project_root / CONFIG_NAME
    data: dict = {}
    if path.exists():
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ConfigValidationError([f"<root>: {exc}"], path) from exc
        if not isinstance(data, dict):
            raise ConfigValidationError(["<root>: expected a JSON object"], path)

    compiler = os.getenv(COMPILER_ENV)
    if compiler:
        data["compiler"] = shlex.split(compiler)

    try:
        return ProjectSettings.model_validate(data)
    except ValidationError as exc:
        raise ConfigValidationError([_format_error(err) for err in exc.errors()], path) from exc


def load_project_config(project_root: str | Path) -> ProjectConfig:
    """Validate ``pipewrench.json`` and ``mod.info`` of a project.

    Raises ConfigValidationError or MissingManifestFieldError before any build
    step touches the disk.
    """
    root = Path(project_root).resolve()
    settings = load_settings(root)
    mod_info = read_manifest(root)
    return ProjectConfig(root=root, settings=settings, mod_info=mod_info)
