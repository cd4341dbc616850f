"""Tests for require() rewriting."""

from __future__ import annotations

import logging

import pytest

from pipewrench_compiler.core.references import check_reference, rewrite_references
from pipewrench_compiler.errors import CrossScopeReferenceWarning, UnterminatedReferenceWarning
from pipewrench_compiler.models import ModuleReference, Scope


class TestModuleReference:
    def test_slash_form(self) -> None:
        assert ModuleReference("shared.util.Strings").slash == "shared/util/Strings"

    def test_namespace_from_first_segment(self) -> None:
        assert ModuleReference("server.Bar").namespace is Scope.SERVER

    def test_namespace_requires_exact_segment(self) -> None:
        assert ModuleReference("clientside.Bar").namespace is Scope.NONE

    def test_runtime_name_strips_prefix(self) -> None:
        assert ModuleReference("client.ui.Panel").runtime_name == "ui/Panel"

    def test_runtime_name_without_prefix(self) -> None:
        assert ModuleReference("lualib_bundle").runtime_name == "lualib_bundle"


class TestRewriteReferences:
    def test_shared_reference_from_client(self) -> None:
        result = rewrite_references(Scope.CLIENT, 'local ____Foo = require("shared.Foo")')
        assert result.text == "local ____Foo = require('Foo')"
        assert result.warnings == []

    def test_server_reference_from_client_warns_once(self) -> None:
        result = rewrite_references(Scope.CLIENT, 'local ____Bar = require("server.Bar")')
        assert result.text == "local ____Bar = require('Bar')"
        assert len(result.warnings) == 1
        assert isinstance(result.warnings[0], CrossScopeReferenceWarning)

    def test_client_reference_from_server_warns(self) -> None:
        result = rewrite_references(Scope.SERVER, 'require("client.Menu")')
        assert result.text == "require('Menu')"
        assert [w.target for w in result.warnings] == ["client"]  # type: ignore[attr-defined]

    def test_cross_scope_warning_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING):
            rewrite_references(Scope.CLIENT, 'require("server.Bar")')
        assert "Cannot reference code from src/server from src/client" in caplog.text

    def test_shared_scope_may_reference_anything_without_warning(self) -> None:
        result = rewrite_references(Scope.SHARED, 'require("client.A")\nrequire("server.B")')
        assert result.text == "require('A')\nrequire('B')"
        assert result.warnings == []

    def test_rewrites_every_occurrence_including_duplicates(self) -> None:
        text = 'local a = require("shared.Foo")\nlocal b = require("shared.Foo")\nlocal c = require("lib.x.Y")\n'
        result = rewrite_references(Scope.CLIENT, text)
        assert result.text == "local a = require('Foo')\nlocal b = require('Foo')\nlocal c = require('lib/x/Y')\n"
        assert [r.dotted for r in result.references] == ["shared.Foo", "shared.Foo", "lib.x.Y"]

    def test_adjacent_calls(self) -> None:
        result = rewrite_references(Scope.NONE, 'f(require("a.b"),require("c"))')
        assert result.text == "f(require('a/b'),require('c'))"

    def test_single_quoted_calls_are_left_alone(self) -> None:
        text = "local x = require('shared.Foo')"
        assert rewrite_references(Scope.CLIENT, text).text == text

    def test_inexact_call_shape_is_left_alone(self) -> None:
        text = 'require("shared.Foo" .. suffix)\nrequire("shared.Bar")'
        result = rewrite_references(Scope.CLIENT, text)
        assert result.text == "require(\"shared.Foo\" .. suffix)\nrequire('Bar')"

    def test_unterminated_reference_halts_scan(self) -> None:
        text = 'require("shared.Foo")\nrequire("shared.Broken'
        result = rewrite_references(Scope.CLIENT, text)
        assert result.text == "require('Foo')\nrequire(\"shared.Broken"
        assert len(result.warnings) == 1
        assert isinstance(result.warnings[0], UnterminatedReferenceWarning)

    def test_empty_text(self) -> None:
        assert rewrite_references(Scope.CLIENT, "").text == ""

    def test_text_without_references_is_unchanged(self) -> None:
        text = "local M = {}\nreturn M\n"
        assert rewrite_references(Scope.SERVER, text).text == text


class TestCheckReference:
    @pytest.mark.parametrize(
        ("scope", "module", "expected"),
        [
            (Scope.CLIENT, "server.X", True),
            (Scope.SERVER, "client.X", True),
            (Scope.CLIENT, "client.X", False),
            (Scope.SERVER, "shared.X", False),
            (Scope.NONE, "server.X", False),
        ],
    )
    def test_cross_scope_matrix(self, scope: Scope, module: str, expected: bool) -> None:
        assert (check_reference(scope, ModuleReference(module)) is not None) is expected
