"""Deferred rebinding of module-scope PipeWrench captures.

Under Kahlua's load order a module can run before PipeWrench has populated its
bridge table, so ``local X = ____PipeWrench.X`` may capture ``nil``. Each such
binding is replayed, against the same local, once ``OnPipeWrenchBoot`` fires.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from pipewrench_compiler.models import ReimportBinding

BRIDGE_ALIAS = "____PipeWrench"
BOOT_EVENT = "OnPipeWrenchBoot"
IMPORTS_PLACEHOLDER = "{imports}"

DEFAULT_TEMPLATE = """-- PIPEWRENCH --
if _G.Events.{event} then
  _G.Events.{event}.Add(function(____flag____)
    if ____flag____ ~= true then return end
{imports}
  end)
end
----------------"""

_IMPORT_INDENT = "    "

_DECLARATION = re.compile(
    r"^local\s+(?P<identifier>[A-Za-z_][A-Za-z0-9_]*(?:\s*,\s*[A-Za-z_][A-Za-z0-9_]*)*)"
    r"\s*=\s*(?P<expression>.+?)\s*$"
)


@dataclass(frozen=True)
class ReimportSettings:
    alias: str = BRIDGE_ALIAS
    event: str = BOOT_EVENT
    template: str = DEFAULT_TEMPLATE


@dataclass
class ReimportPlan:
    """Bindings of one module, in declaration order, to rebind on boot."""

    bindings: list[ReimportBinding] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.bindings

    def rebind_statements(self) -> list[str]:
        return [binding.rebind for binding in self.bindings]

    def render(self, settings: ReimportSettings) -> str:
        body = "\n".join(f"{_IMPORT_INDENT}{statement}" for statement in self.rebind_statements())
        return settings.template.replace("{event}", settings.event).replace(IMPORTS_PLACEHOLDER, body)


def collect_bindings(text: str, settings: ReimportSettings | None = None) -> ReimportPlan:
    settings = settings or ReimportSettings()
    member = f"{settings.alias}."
    plan = ReimportPlan()
    for line in text.split("\n"):
        line = line.rstrip("\r")
        if not line.startswith("local "):
            continue
        match = _DECLARATION.match(line)
        if match is None or member not in match.group("expression"):
            continue
        plan.bindings.append(ReimportBinding(match.group("identifier"), match.group("expression")))
    return plan


def _is_return(line: str) -> bool:
    return line == "return" or line.startswith(("return ", "return("))


def apply_reimport(text: str, settings: ReimportSettings | None = None) -> str:
    settings = settings or ReimportSettings()
    plan = collect_bindings(text, settings)
    if plan.is_empty:
        return text
    return splice_plan(text, plan, settings)


def splice_plan(text: str, plan: ReimportPlan, settings: ReimportSettings) -> str:
    """Insert the rendered block after the last statement, keeping a trailing return last.

    Only ``\\n`` delimits lines here; every other byte of ``text`` is kept as is.
    """
    lines = text.split("\n")
    end = len(lines)
    while end > 0 and not lines[end - 1].strip(" \t\r"):
        end -= 1
    if end == 0:
        return text

    last = lines[end - 1].rstrip("\r")
    newline = "\r\n" if lines[end - 1].endswith("\r") else "\n"
    block = newline.join(plan.render(settings).split("\n"))
    start = sum(len(line) + 1 for line in lines[: end - 1])

    if _is_return(last):
        body_end = end - 1
        while body_end > 0 and not lines[body_end - 1].strip(" \t\r"):
            body_end -= 1
        head = text[: sum(len(line) + 1 for line in lines[:body_end])]
        return f"{head}{newline}{block}{newline}{newline}{text[start:]}"

    cut = start + len(last)
    return f"{text[:cut]}{newline}{newline}{block}{text[cut:]}"
