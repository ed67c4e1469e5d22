# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for benchmark driver synthesis.

The driver must list every candidate exactly once, in input order, call
each candidate's own module, and bind the user's argument expressions
verbatim.
"""

from pathlib import Path

import pytest

from elmbench.harness.driver import (
    build_driver,
    elm_string,
    parse_function_reference,
    render_driver,
    write_driver,
)
from elmbench.isolation.elm_syntax import parse_header
from elmbench.pipeline.exceptions import DriverError, InputError
from elmbench.pipeline.stages import PipelineStage

CANDIDATES = [
    ("./listRemoveOld", "Version.ListRemoveOld"),
    ("./listRemoveNew", "Version.ListRemoveNew"),
]


class TestParseFunctionReference:
    def test_bare_name_lives_in_main(self) -> None:
        reference = parse_function_reference("remove")
        assert reference.module == "Main"
        assert reference.function == "remove"

    def test_qualified_name(self) -> None:
        reference = parse_function_reference("List.Extra.remove")
        assert reference.module == "List.Extra"
        assert reference.function == "remove"

    @pytest.mark.parametrize("text", ["", "Remove", "remove.it", "1remove", "Remove.", "re move"])
    def test_invalid_names(self, text: str) -> None:
        with pytest.raises(InputError):
            parse_function_reference(text)


class TestBuildDriver:
    def test_entries_in_input_order(self) -> None:
        program = build_driver("remove", "remove", CANDIDATES, ["99", "List.range 0 1000"])
        assert [entry.label for entry in program.entries] == ["./listRemoveOld", "./listRemoveNew"]
        assert [binding.name for binding in program.bindings] == ["arg0", "arg1"]

    def test_no_candidates(self) -> None:
        with pytest.raises(DriverError) as excinfo:
            build_driver("remove", "remove", [], [])
        assert excinfo.value.stage is PipelineStage.STAGED

    def test_duplicate_labels(self) -> None:
        with pytest.raises(DriverError, match="Duplicate"):
            build_driver("remove", "remove", [("a", "Version.A"), ("a", "Version.B")], [])

    def test_blank_argument(self) -> None:
        with pytest.raises(DriverError, match="Argument 1 is empty"):
            build_driver("remove", "remove", CANDIDATES, ["1", "   "])


class TestRenderDriver:
    def test_header_and_imports(self) -> None:
        source = render_driver(build_driver("remove", "remove", CANDIDATES, ["99"]))
        header = parse_header(source)

        assert header.declaration is not None
        assert header.declaration.kind == "port module"
        assert header.declaration.name == "Benchmarks"
        assert header.imported_modules == (
            "Benchmark",
            "Json.Encode",
            "Runner",
            "Version.ListRemoveOld",
            "Version.ListRemoveNew",
        )

    def test_each_candidate_once_in_order(self) -> None:
        source = render_driver(build_driver("remove", "remove", CANDIDATES, ["99", "List.range 0 1000"]))

        old_line = '        [ ( "./listRemoveOld", \\_ -> Version.ListRemoveOld.remove arg0 arg1 )'
        new_line = '        , ( "./listRemoveNew", \\_ -> Version.ListRemoveNew.remove arg0 arg1 )'
        assert source.count(old_line) == 1
        assert source.count(new_line) == 1
        assert source.index(old_line) < source.index(new_line)
        assert '    Benchmark.scale "remove"' in source

    def test_arguments_bound_verbatim(self) -> None:
        source = render_driver(build_driver("remove", "remove", CANDIDATES, ["99", "List.range 0 1000"]))
        assert "\n\narg0 =\n    99\n" in source
        assert "\n\narg1 =\n    List.range 0 1000\n" in source

    def test_multiline_argument_is_indented(self) -> None:
        expression = "let\n    n = 3\nin\nList.repeat n 0"
        source = render_driver(build_driver("f", "f", CANDIDATES[:1], [expression]))
        assert "arg0 =\n    let\n        n = 3\n    in\n    List.repeat n 0\n" in source

    def test_no_arguments_calls_bare_value(self) -> None:
        source = render_driver(build_driver("value", "value", CANDIDATES[:1], []))
        assert "\\_ -> Version.ListRemoveOld.value )" in source
        assert "arg0" not in source

    def test_labels_are_escaped(self) -> None:
        assert elm_string('say "hi"\\') == '"say \\"hi\\"\\\\"'

    def test_main_wires_runner_and_port(self) -> None:
        source = render_driver(build_driver("remove", "remove", CANDIDATES, []))
        assert "port sendOutput : Json.Encode.Value -> Cmd msg" in source
        assert "main : Program () Runner.Model Runner.Msg" in source
        assert "    Runner.program sendOutput suite" in source

    def test_rendering_is_deterministic(self) -> None:
        program = build_driver("remove", "remove", CANDIDATES, ["99"])
        assert render_driver(program) == render_driver(program)


class TestWriteDriver:
    def test_written_to_module_root(self, tmp_path: Path) -> None:
        program = build_driver("remove", "remove", CANDIDATES, ["99"])
        path = write_driver(program, tmp_path / "src")

        assert path == tmp_path / "src" / "Benchmarks.elm"
        assert path.read_text(encoding="utf-8") == render_driver(program)
