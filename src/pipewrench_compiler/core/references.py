"""Rewrites ``require("a.b.c")`` calls emitted by TSTL into the form Kahlua resolves.

Kahlua only understands ``/`` in require paths, and each of the client, server
and shared namespaces is flat, so the leading scope folder is dropped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from pipewrench_compiler.errors import CrossScopeReferenceWarning, UnterminatedReferenceWarning
from pipewrench_compiler.models import ModuleReference, Scope

logger = logging.getLogger(__name__)

_OPEN = 'require("'
_CLOSE = '")'

_FORBIDDEN = {
    Scope.SERVER: Scope.CLIENT,
    Scope.CLIENT: Scope.SERVER,
}


@dataclass
class RewriteResult:
    text: str
    references: list[ModuleReference] = field(default_factory=list)
    warnings: list[Warning] = field(default_factory=list)


def check_reference(scope: Scope, reference: ModuleReference) -> CrossScopeReferenceWarning | None:
    if _FORBIDDEN.get(scope) is reference.namespace:
        return CrossScopeReferenceWarning(scope.value, reference.namespace.value, reference.dotted)
    return None


def render_reference(reference: ModuleReference) -> str:
    return f"require('{reference.runtime_name}')"


def rewrite_references(scope: Scope, text: str) -> RewriteResult:
    result = RewriteResult(text="")
    if not text:
        return result

    out: list[str] = []
    cursor = 0
    while True:
        start = text.find(_OPEN, cursor)
        if start == -1:
            break
        name_start = start + len(_OPEN)
        name_end = text.find('"', name_start)
        if name_end == -1:
            warning = UnterminatedReferenceWarning(start)
            logger.debug("%s", warning)
            result.warnings.append(warning)
            break
        if not text.startswith(_CLOSE, name_end):
            # Not an exact call shape; leave it and keep scanning after the opener.
            out.append(text[cursor:name_start])
            cursor = name_start
            continue

        reference = ModuleReference(text[name_start:name_end])
        warning = check_reference(scope, reference)
        if warning is not None:
            logger.warning("%s", warning)
            result.warnings.append(warning)

        out.append(text[cursor:start])
        out.append(render_reference(reference))
        result.references.append(reference)
        cursor = name_end + len(_CLOSE)

    out.append(text[cursor:])
    result.text = "".join(out)
    return result
