from __future__ import annotations

from pathlib import Path

from pipewrench_compiler.core.paths import split_segments
from pipewrench_compiler.models import ProjectConfig, Scope

LUALIB_BUNDLE = "lualib_bundle.lua"
EXTERNAL_MODULES_FOLDER = "lua_modules"


def resolve_lua_path(declared_path: str) -> str:
    """Path of a compiled unit relative to ``media/lua``.

    The TSTL runtime bundle always lands at the shared root; anything under
    ``lua_modules`` is flattened into the shared namespace; everything else stays
    where the compiler put it.
    """
    segments = split_segments(declared_path)
    if segments and segments[-1] == LUALIB_BUNDLE:
        return f"{Scope.SHARED.value}/{LUALIB_BUNDLE}"

    if EXTERNAL_MODULES_FOLDER in segments[:-1]:
        marker = segments.index(EXTERNAL_MODULES_FOLDER)
        return "/".join([Scope.SHARED.value, *segments[marker + 1 :]])

    return "/".join(segments)


def resolve_output_path(declared_path: str, config: ProjectConfig) -> Path:
    return config.lua_out_dir.joinpath(*resolve_lua_path(declared_path).split("/"))
