"""Error and warning types raised while building a mod."""

from __future__ import annotations

from pathlib import Path


class PipeWrenchError(Exception):
    """Base class for every fatal error of a build or CLI command."""


class ConfigValidationError(PipeWrenchError):
    def __init__(self, errors: list[str], source: Path | None = None) -> None:
        self.errors = errors
        self.source = source
        where = f" in {source}" if source else ""
        super().__init__(f"Invalid project configuration{where}:\n" + "\n".join(f"  - {e}" for e in errors))


class MissingManifestFieldError(PipeWrenchError):
    def __init__(self, fields: list[str], source: Path | None = None) -> None:
        self.fields = fields
        self.source = source
        where = f"{source}" if source else "mod.info"
        super().__init__(f"{where} has no {', '.join(fields)}.")


class ExternalCompilerFailure(PipeWrenchError):
    def __init__(self, message: str, output: str = "", returncode: int | None = None) -> None:
        self.output = output
        self.returncode = returncode
        super().__init__(message if not output else f"{message}\n{output}")


class FileSystemError(PipeWrenchError):
    def __init__(self, message: str, path: Path | str | None = None) -> None:
        self.path = path
        super().__init__(message)


class CrossScopeReferenceWarning(UserWarning):
    def __init__(self, owner: str, target: str, module: str) -> None:
        self.owner = owner
        self.target = target
        self.module = module
        super().__init__(
            f"Cannot reference code from src/{target} from src/{owner} ('{module}'). (Code will fail when ran)"
        )


class UnterminatedReferenceWarning(UserWarning):
    def __init__(self, offset: int) -> None:
        self.offset = offset
        super().__init__(f"Unterminated require string at offset {offset}")
