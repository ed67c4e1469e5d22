# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Shared pytest fixtures for elm-bench tests.

The main helpers build small Elm application projects on disk and fake
`elm`/`node` executables, so the whole pipeline can be exercised without
the real toolchain installed.
"""

import json
import stat
import textwrap
from pathlib import Path
from typing import Callable, Optional

import pytest

from elmbench.config.schema import ElmBenchConfig

DEFAULT_DIRECT = {"elm/core": "1.0.5"}
DEFAULT_INDIRECT = {"elm/json": "1.1.3"}

MAIN_MODULE = textwrap.dedent("""\
    module Main exposing (remove)

    import Utils


    remove : Int -> List Int -> List Int
    remove x xs =
        List.filter (Utils.notEqual x) xs
""")

UTILS_MODULE = textwrap.dedent("""\
    module Utils exposing (notEqual)


    notEqual : Int -> Int -> Bool
    notEqual a b =
        a /= b
""")


def write_elm_json(
    project_dir: Path,
    direct: Optional[dict[str, str]] = None,
    indirect: Optional[dict[str, str]] = None,
    source_directories: Optional[list[str]] = None,
) -> Path:
    document = {
        "type": "application",
        "source-directories": source_directories or ["src"],
        "elm-version": "0.19.1",
        "dependencies": {
            "direct": DEFAULT_DIRECT if direct is None else direct,
            "indirect": DEFAULT_INDIRECT if indirect is None else indirect,
        },
        "test-dependencies": {"direct": {}, "indirect": {}},
    }
    path = project_dir / "elm.json"
    path.write_text(json.dumps(document, indent=4), encoding="utf-8")
    return path


ProjectFactory = Callable[..., Path]


@pytest.fixture()
def make_project(tmp_path: Path) -> ProjectFactory:
    """
    Factory for Elm application projects under tmp_path.

    make_project("old") gives a project with Main.elm and Utils.elm;
    pass `modules={"Path/To/File.elm": "..."}` to replace the sources.
    """

    def _make(
        name: str,
        modules: Optional[dict[str, str]] = None,
        direct: Optional[dict[str, str]] = None,
        indirect: Optional[dict[str, str]] = None,
    ) -> Path:
        project_dir = tmp_path / name
        src_dir = project_dir / "src"
        src_dir.mkdir(parents=True)
        write_elm_json(project_dir, direct=direct, indirect=indirect)

        sources = modules if modules is not None else {
            "Main.elm": MAIN_MODULE,
            "Utils.elm": UTILS_MODULE,
        }
        for relative, content in sources.items():
            path = src_dir / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return project_dir

    return _make


def _write_script(path: Path, body: str) -> Path:
    path.write_text("#!/bin/sh\n" + body, encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture()
def fake_toolchain(tmp_path: Path) -> Callable[..., ElmBenchConfig]:
    """
    Build a config whose elm and node are shell scripts.

    The fake elm writes an empty artifact to the path after --output and
    exits with `compile_exit`. The fake node prints `stdout` and exits
    with `run_exit`. Both append their working directory to a log file so
    tests can check where they ran.
    """
    bin_dir = tmp_path / "fake-bin"
    bin_dir.mkdir()
    calls_log = bin_dir / "calls.log"

    def _make(
        stdout: str = "",
        run_exit: int = 0,
        run_stderr: str = "",
        compile_exit: int = 0,
        compile_stderr: str = "",
        run_sleep: int = 0,
        run_timeout_seconds: int = 30,
    ) -> ElmBenchConfig:
        output_file = bin_dir / "node-output.json"
        output_file.write_text(stdout, encoding="utf-8")
        compile_stderr_file = bin_dir / "elm-stderr.txt"
        compile_stderr_file.write_text(compile_stderr, encoding="utf-8")
        run_stderr_file = bin_dir / "node-stderr.txt"
        run_stderr_file.write_text(run_stderr, encoding="utf-8")

        elm = _write_script(
            bin_dir / "elm",
            textwrap.dedent(f"""\
                echo "elm $PWD $*" >> "{calls_log}"
                out=""
                while [ $# -gt 0 ]; do
                  if [ "$1" = "--output" ]; then out="$2"; fi
                  shift
                done
                cat "{compile_stderr_file}" >&2
                if [ {compile_exit} -eq 0 ] && [ -n "$out" ]; then : > "$out"; fi
                exit {compile_exit}
            """),
        )
        node = _write_script(
            bin_dir / "node",
            textwrap.dedent(f"""\
                echo "node $PWD $*" >> "{calls_log}"
                sleep {run_sleep}
                cat "{output_file}"
                cat "{run_stderr_file}" >&2
                exit {run_exit}
            """),
        )

        return ElmBenchConfig.model_validate({
            "toolchain": {
                "elm_executable": str(elm),
                "node_executable": str(node),
                "run_timeout_seconds": run_timeout_seconds,
            },
            "workspace": {"base_directory": str(workspace_base(tmp_path))},
            "report": {"color": False},
        })

    return _make


def workspace_base(tmp_path: Path) -> Path:
    """Dedicated parent for temp workspaces, so tests can check it's left empty."""
    base = tmp_path / "workspaces"
    base.mkdir(exist_ok=True)
    return base


def benchmark_json(benchmark: str, timings: list[tuple[str, float]], warning: Optional[str] = None) -> str:
    return json.dumps({
        "results": [
            {"name": [benchmark, label], "nsPerRun": ns} for label, ns in timings
        ],
        "warning": warning,
    })


@pytest.fixture()
def tmp_config_file(tmp_path: Path) -> Path:
    """A minimal valid config file."""
    config_file = tmp_path / "elm-bench.yaml"
    config_file.write_text(
        textwrap.dedent("""\
            global:
              config_version: "1.0.0"
              log_level: "DEBUG"
            report:
              bar_width: 30
        """),
        encoding="utf-8",
    )
    return config_file


@pytest.fixture()
def broken_yaml_file(tmp_path: Path) -> Path:
    """A file that isn't valid YAML at all."""
    config_file = tmp_path / "broken.yaml"
    config_file.write_text("{{not: yaml: at: all:::", encoding="utf-8")
    return config_file


@pytest.fixture()
def elm_json() -> Callable[..., Path]:
    """write_elm_json, for tests that need a bare elm.json without sources."""
    return write_elm_json


@pytest.fixture()
def benchmark_stdout() -> Callable[..., str]:
    """benchmark_json, the stdout the skeleton's main.js would print."""
    return benchmark_json
