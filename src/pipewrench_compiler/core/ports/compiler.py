from typing import Protocol

from pipewrench_compiler.models import CompiledUnit, ProjectConfig


class ExternalCompiler(Protocol):
    def compile(self, config: ProjectConfig) -> list[CompiledUnit]: ...
