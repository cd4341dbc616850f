"""Tests for the OnPipeWrenchBoot reimport block."""

from __future__ import annotations

from pipewrench_compiler.core.reimport import (
    ReimportPlan,
    ReimportSettings,
    apply_reimport,
    collect_bindings,
)
from pipewrench_compiler.models import ReimportBinding

_MODULE = """local ____exports = {}
local ____PipeWrench = require('PipeWrench')
local getPlayer = ____PipeWrench.getPlayer
local ISButton = ____PipeWrench.ISButton
function ____exports.hello()
    return getPlayer()
end
return ____exports
"""


def _lines(text: str) -> list[str]:
    return text.rstrip("\n").split("\n")


class TestCollectBindings:
    def test_collects_in_declaration_order(self) -> None:
        plan = collect_bindings(_MODULE)
        assert plan.bindings == [
            ReimportBinding("getPlayer", "____PipeWrench.getPlayer"),
            ReimportBinding("ISButton", "____PipeWrench.ISButton"),
        ]

    def test_ignores_the_require_of_the_bridge_itself(self) -> None:
        plan = collect_bindings("local ____PipeWrench = require('PipeWrench')\n")
        assert plan.is_empty

    def test_ignores_indented_locals(self) -> None:
        plan = collect_bindings("function f()\n    local p = ____PipeWrench.getPlayer\nend\n")
        assert plan.is_empty

    def test_custom_alias(self) -> None:
        settings = ReimportSettings(alias="____bridge")
        plan = collect_bindings("local a = ____bridge.A\nlocal b = ____PipeWrench.B\n", settings)
        assert plan.rebind_statements() == ["a = ____bridge.A"]

    def test_multiple_names_in_one_declaration(self) -> None:
        plan = collect_bindings("local a, b = ____PipeWrench.A, ____PipeWrench.B\nreturn M\n")
        assert plan.rebind_statements() == ["a, b = ____PipeWrench.A, ____PipeWrench.B"]
        assert plan.bindings[0].declaration == "local a, b = ____PipeWrench.A, ____PipeWrench.B"

    def test_crlf_lines_are_matched_without_the_carriage_return(self) -> None:
        plan = collect_bindings("local a = ____PipeWrench.A\r\nreturn M\r\n")
        assert plan.rebind_statements() == ["a = ____PipeWrench.A"]


class TestReimportPlan:
    def test_render_replays_every_binding(self) -> None:
        plan = ReimportPlan([ReimportBinding("a", "____PipeWrench.A"), ReimportBinding("b", "____PipeWrench.B")])
        block = plan.render(ReimportSettings())
        assert "OnPipeWrenchBoot" in block
        assert block.index("a = ____PipeWrench.A") < block.index("b = ____PipeWrench.B")
        assert "local a" not in block

    def test_render_uses_given_template(self) -> None:
        plan = ReimportPlan([ReimportBinding("a", "____bridge.A")])
        settings = ReimportSettings(template="on({event}, function()\n{imports}\nend)", event="Boot")
        assert plan.render(settings) == "on(Boot, function()\n    a = ____bridge.A\nend)"


class TestApplyReimport:
    def test_bridge_bindings_example(self) -> None:
        settings = ReimportSettings(alias="____bridge", template="BOOT(function()\n{imports}\nend)")
        text = "local a = ____bridge.A\nlocal b = ____bridge.B\nreturn M\n"

        out = _lines(apply_reimport(text, settings))

        assert out[:2] == ["local a = ____bridge.A", "local b = ____bridge.B"]
        start = out.index("BOOT(function()")
        assert out[start + 1 : start + 3] == ["    a = ____bridge.A", "    b = ____bridge.B"]
        assert out.count("BOOT(function()") == 1
        assert out[-1] == "return M"

    def test_keeps_declarations_and_moves_return_last(self) -> None:
        out = apply_reimport(_MODULE)
        lines = _lines(out)
        assert "local getPlayer = ____PipeWrench.getPlayer" in lines
        assert "local ISButton = ____PipeWrench.ISButton" in lines
        assert lines[-1] == "return ____exports"
        assert lines.count("return ____exports") == 1
        assert out.count("OnPipeWrenchBoot.Add") == 1
        assert out.index("    getPlayer = ____PipeWrench.getPlayer") < out.index("    ISButton = ____PipeWrench.ISButton")

    def test_function_body_return_is_not_moved(self) -> None:
        lines = _lines(apply_reimport(_MODULE))
        assert "    return getPlayer()" in lines[:8]

    def test_module_without_bindings_is_unchanged(self) -> None:
        text = "local ____exports = {}\r\nreturn ____exports\r\n"
        assert apply_reimport(text) == text

    def test_without_trailing_return_block_goes_last(self) -> None:
        text = "local p = ____PipeWrench.getPlayer\nprint(p)\n"
        out = apply_reimport(text)
        assert out.startswith(text.rstrip("\n"))
        assert out.rstrip("\n").endswith("----------------")

    def test_preserves_crlf(self) -> None:
        text = "local p = ____PipeWrench.getPlayer\r\nreturn p\r\n"
        out = apply_reimport(text)
        assert out.endswith("\r\nreturn p\r\n")
        assert "\n" not in out.replace("\r\n", "")

    def test_form_feed_in_string_literal_is_kept(self) -> None:
        text = 'local a = ____PipeWrench.A\nlocal s = "x\x0cy"\nreturn M\n'
        out = apply_reimport(text)
        assert out.startswith('local a = ____PipeWrench.A\nlocal s = "x\x0cy"\n')
        assert out.endswith("\n\nreturn M\n")
        assert out.count("\x0c") == 1

    def test_mixed_line_endings_are_kept(self) -> None:
        text = "local a = ____PipeWrench.A\nlocal s = [[l1\r\nl2]]\nreturn M\n"
        out = apply_reimport(text)
        assert out.startswith("local a = ____PipeWrench.A\nlocal s = [[l1\r\nl2]]\n")
        assert out.count("\r\n") == 1
        assert out.endswith("\n\nreturn M\n")

    def test_only_the_block_is_added(self) -> None:
        text = "local a = ____PipeWrench.A\nlocal s = '\x0b\x1c\x85 '\n\n\nreturn M\n"
        out = apply_reimport(text)
        block = ReimportPlan([ReimportBinding("a", "____PipeWrench.A")]).render(ReimportSettings())
        assert out == f"local a = ____PipeWrench.A\nlocal s = '\x0b\x1c\x85 '\n\n{block}\n\nreturn M\n"
