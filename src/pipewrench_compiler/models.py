from __future__ import annotations

import enum
import time
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class Scope(str, enum.Enum):
    CLIENT = "client"
    SERVER = "server"
    SHARED = "shared"
    NONE = "none"


SCOPE_FOLDERS: tuple[Scope, ...] = (Scope.CLIENT, Scope.SERVER, Scope.SHARED)


class ModInfo(BaseModel):
    """Identity fields read from the ``mod.info`` manifest."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    poster: str
    description: str
    url: str | None = None
    require: list[str] = Field(default_factory=list)


class ProjectSettings(BaseModel):
    """Contents of the optional ``pipewrench.json`` file."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)

    src_dir: str = Field(default="src", alias="srcDir")
    out_dir: str = Field(default="dist", alias="outDir")
    models_dir: str = Field(default="src/models", alias="modelsDir")
    textures_dir: str = Field(default="src/textures", alias="texturesDir")
    sound_dir: str = Field(default="src/sound", alias="soundDir")
    scripts_dir: str = Field(default="src/scripts", alias="scriptsDir")
    compiler: list[str] = Field(default_factory=lambda: ["npx", "tstl"], min_length=1)


class ProjectConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    root: Path
    settings: ProjectSettings
    mod_info: ModInfo

    @property
    def src_dir(self) -> Path:
        return self.root / self.settings.src_dir

    @property
    def out_dir(self) -> Path:
        return self.root / self.settings.out_dir

    @property
    def mod_out_dir(self) -> Path:
        return self.out_dir / self.mod_info.id

    @property
    def lua_out_dir(self) -> Path:
        return self.mod_out_dir / "media" / "lua"

    @property
    def asset_dirs(self) -> dict[str, Path]:
        """Asset folder name in the output ``media`` tree mapped to its source directory."""
        return {
            "models": self.root / self.settings.models_dir,
            "textures": self.root / self.settings.textures_dir,
            "sound": self.root / self.settings.sound_dir,
            "scripts": self.root / self.settings.scripts_dir,
        }

    def scope_src_dir(self, scope: Scope) -> Path:
        return self.src_dir / scope.value


@dataclass
class CompiledUnit:
    """One file emitted by the external compiler.

    ``declared_path`` is relative to the compiler's output root and uses ``/``.
    """

    declared_path: str
    text: str
    scope: Scope = field(init=False)

    def __post_init__(self) -> None:
        from pipewrench_compiler.core.paths import classify_scope, normalize_path

        self.declared_path = normalize_path(self.declared_path)
        self.scope = classify_scope(self.declared_path)


@dataclass(frozen=True)
class ModuleReference:
    dotted: str

    @property
    def slash(self) -> str:
        return self.dotted.replace(".", "/")

    @property
    def namespace(self) -> Scope:
        head, sep, _ = self.slash.partition("/")
        if sep and head in {s.value for s in SCOPE_FOLDERS}:
            return Scope(head)
        return Scope.NONE

    @property
    def runtime_name(self) -> str:
        """Slash form with the namespace prefix removed, as the runtime loader expects it."""
        if self.namespace is Scope.NONE:
            return self.slash
        return self.slash[len(self.namespace.value) + 1 :]


@dataclass(frozen=True)
class ReimportBinding:
    identifier: str
    expression: str

    @property
    def declaration(self) -> str:
        return f"local {self.identifier} = {self.expression}"

    @property
    def rebind(self) -> str:
        return f"{self.identifier} = {self.expression}"


class BuildKind(str, enum.Enum):
    FULL = "full"
    INCREMENTAL = "incremental"


@dataclass
class BuildJob:
    kind: BuildKind = BuildKind.FULL
    started_at: float = field(default_factory=time.monotonic)
    finished_at: float | None = None
    written: list[Path] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    warnings: list[Warning] = field(default_factory=list)

    def finish(self) -> None:
        self.finished_at = time.monotonic()

    @property
    def elapsed(self) -> float:
        end = self.finished_at if self.finished_at is not None else time.monotonic()
        return end - self.started_at


class FileEventKind(str, enum.Enum):
    ADDED = "added"
    CHANGED = "changed"
    REMOVED = "removed"
    DIR_ADDED = "dir_added"
    DIR_REMOVED = "dir_removed"


@dataclass(frozen=True)
class FileEvent:
    kind: FileEventKind
    path: Path
