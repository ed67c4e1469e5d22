# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
End-to-end pipeline tests with a fake toolchain.

The fake elm "compiles" by touching the output file, the fake node prints a
prepared JSON document. Everything else (resolution, isolation, manifest
merge, driver synthesis, parsing, ranking, rendering, cleanup) is real.

We verify:
  - a successful run produces the report and leaves no workspace behind
  - a compile failure raises CompileError and also leaves no workspace
  - dry runs and ejects never reach the toolchain
  - an ejected workspace contains the merged, isolated project
"""

import json
from pathlib import Path
from typing import Callable

import pytest

from elmbench.candidates.models import CandidateKind, CandidateRequest
from elmbench.config.schema import ElmBenchConfig
from elmbench.pipeline.exceptions import (
    ArtifactOutputError,
    CandidateError,
    CompileError,
    ExecutionError,
    InputError,
    NamespaceCollisionError,
)
from elmbench.pipeline.runner import BenchmarkRequest, run_pipeline
from elmbench.pipeline.stages import PipelineStage


def _request(tmp_path: Path, *labels: str, function: str = "remove", **kwargs: object) -> BenchmarkRequest:
    return BenchmarkRequest(
        function=function,
        candidates=tuple(CandidateRequest(kind=CandidateKind.DIRECTORY, reference=label) for label in labels),
        arguments=("99", "List.range 0 1000"),
        cwd=tmp_path,
        **kwargs,  # type: ignore[arg-type]
    )


def _leftover_workspaces(tmp_path: Path) -> list[Path]:
    return list((tmp_path / "workspaces").iterdir())


@pytest.fixture()
def two_projects(make_project: Callable[..., Path]) -> None:
    make_project("old")
    make_project("new")


@pytest.mark.usefixtures("two_projects")
class TestSuccessfulRun:
    def test_report_and_cleanup(
        self,
        tmp_path: Path,
        fake_toolchain: Callable[..., ElmBenchConfig],
        benchmark_stdout: Callable[..., str],
    ) -> None:
        config = fake_toolchain(stdout=benchmark_stdout("remove", [("./old", 316.0), ("./new", 254.0)]))

        result = run_pipeline(_request(tmp_path, "./old", "./new"), config)

        assert result.stage is PipelineStage.REPORTED
        assert result.report.splitlines()[0] == "Benchmarking function `remove`."
        assert "baseline" in result.report.splitlines()[1]
        assert result.report.splitlines()[2].endswith("254 ns   20% faster")
        assert [entry.label for entry in result.entries] == ["./old", "./new"]
        assert result.advisories == ()
        assert _leftover_workspaces(tmp_path) == []

    def test_toolchain_runs_inside_workspace(
        self,
        tmp_path: Path,
        fake_toolchain: Callable[..., ElmBenchConfig],
        benchmark_stdout: Callable[..., str],
    ) -> None:
        config = fake_toolchain(stdout=benchmark_stdout("remove", [("./old", 1.0), ("./new", 1.0)]))
        run_pipeline(_request(tmp_path, "./old", "./new"), config)

        calls = (tmp_path / "fake-bin" / "calls.log").read_text(encoding="utf-8").splitlines()
        assert calls[0].startswith("elm ")
        assert calls[0].endswith("make src/Benchmarks.elm --optimize --output elm.js")
        assert calls[1].startswith("node ")
        assert str(tmp_path / "workspaces") in calls[0]

    def test_stderr_and_missing_results_become_advisories(
        self,
        tmp_path: Path,
        fake_toolchain: Callable[..., ElmBenchConfig],
        benchmark_stdout: Callable[..., str],
    ) -> None:
        config = fake_toolchain(
            stdout=benchmark_stdout("remove", [("./old", 10.0)], warning="./new failed"),
            run_stderr="(node) some deprecation\n",
        )

        result = run_pipeline(_request(tmp_path, "./old", "./new"), config)

        assert any("some deprecation" in advisory for advisory in result.advisories)
        assert "No results for: ./new" in result.advisories
        assert result.report.splitlines()[-1] == "Warning: ./new failed"

    def test_json_report(
        self,
        tmp_path: Path,
        fake_toolchain: Callable[..., ElmBenchConfig],
        benchmark_stdout: Callable[..., str],
    ) -> None:
        config = fake_toolchain(stdout=benchmark_stdout("remove", [("./old", 2.0), ("./new", 1.0)]))
        json_path = tmp_path / "report.json"

        run_pipeline(_request(tmp_path, "./old", "./new", json_report=json_path), config)

        document = json.loads(json_path.read_text(encoding="utf-8"))
        assert document["benchmark"] == "remove"
        assert [entry["label"] for entry in document["results"]] == ["./old", "./new"]


@pytest.mark.usefixtures("two_projects")
class TestFailedRun:
    def test_compile_failure_cleans_up(
        self, tmp_path: Path, fake_toolchain: Callable[..., ElmBenchConfig]
    ) -> None:
        config = fake_toolchain(compile_exit=1, compile_stderr="-- NAMING ERROR --\n")

        with pytest.raises(CompileError) as excinfo:
            run_pipeline(_request(tmp_path, "./old", "./new"), config)

        assert "NAMING ERROR" in excinfo.value.detail
        assert _leftover_workspaces(tmp_path) == []

    def test_execution_failure(
        self, tmp_path: Path, fake_toolchain: Callable[..., ElmBenchConfig]
    ) -> None:
        config = fake_toolchain(run_exit=1, run_stderr="RangeError: Maximum call stack size exceeded\n")

        with pytest.raises(ExecutionError, match="exit code 1") as excinfo:
            run_pipeline(_request(tmp_path, "./old", "./new"), config)

        assert "RangeError" in excinfo.value.detail
        assert _leftover_workspaces(tmp_path) == []

    def test_garbage_output(
        self, tmp_path: Path, fake_toolchain: Callable[..., ElmBenchConfig]
    ) -> None:
        config = fake_toolchain(stdout="not json at all")

        with pytest.raises(ArtifactOutputError):
            run_pipeline(_request(tmp_path, "./old", "./new"), config)
        assert _leftover_workspaces(tmp_path) == []

    def test_missing_candidate(
        self, tmp_path: Path, fake_toolchain: Callable[..., ElmBenchConfig]
    ) -> None:
        with pytest.raises(CandidateError, match="not found"):
            run_pipeline(_request(tmp_path, "./old", "./missing"), fake_toolchain())
        assert _leftover_workspaces(tmp_path) == []

    def test_namespace_collision(
        self, tmp_path: Path, fake_toolchain: Callable[..., ElmBenchConfig]
    ) -> None:
        with pytest.raises(NamespaceCollisionError):
            run_pipeline(_request(tmp_path, "./old", "old"), fake_toolchain())
        assert not (tmp_path / "fake-bin" / "calls.log").exists()

    def test_bad_function_name(
        self, tmp_path: Path, fake_toolchain: Callable[..., ElmBenchConfig]
    ) -> None:
        with pytest.raises(InputError):
            run_pipeline(_request(tmp_path, "./old", function="Not a name"), fake_toolchain())

    def test_entry_module_missing(
        self, tmp_path: Path, fake_toolchain: Callable[..., ElmBenchConfig]
    ) -> None:
        with pytest.raises(CandidateError, match="no entry module Remove"):
            run_pipeline(_request(tmp_path, "./old", function="Remove.remove"), fake_toolchain())
        assert _leftover_workspaces(tmp_path) == []

    def test_no_candidates(
        self, tmp_path: Path, fake_toolchain: Callable[..., ElmBenchConfig]
    ) -> None:
        with pytest.raises(InputError, match="No versions"):
            run_pipeline(_request(tmp_path), fake_toolchain())

    def test_blank_argument_is_input_error(
        self, tmp_path: Path, fake_toolchain: Callable[..., ElmBenchConfig]
    ) -> None:
        request = BenchmarkRequest(
            function="remove",
            candidates=(CandidateRequest(kind=CandidateKind.DIRECTORY, reference="./old"),),
            arguments=("99", "  "),
            cwd=tmp_path,
        )

        with pytest.raises(InputError, match="Argument 2 is empty"):
            run_pipeline(request, fake_toolchain())
        assert not (tmp_path / "fake-bin" / "calls.log").exists()


@pytest.mark.usefixtures("two_projects")
class TestPrepareOnly:
    def test_dry_run_skips_toolchain(
        self, tmp_path: Path, fake_toolchain: Callable[..., ElmBenchConfig]
    ) -> None:
        result = run_pipeline(_request(tmp_path, "./old", "./new", dry_run=True), fake_toolchain())

        assert result.stage is PipelineStage.STAGED
        assert result.report == ""
        assert result.workspace_root is None
        assert not (tmp_path / "fake-bin" / "calls.log").exists()
        assert _leftover_workspaces(tmp_path) == []

    def test_eject_keeps_generated_project(
        self, tmp_path: Path, fake_toolchain: Callable[..., ElmBenchConfig]
    ) -> None:
        target = tmp_path / "ejected"
        result = run_pipeline(_request(tmp_path, "./old", "./new", eject_dir=target), fake_toolchain())

        assert result.workspace_root == target
        assert not (tmp_path / "fake-bin" / "calls.log").exists()

        driver = (target / "src" / "Benchmarks.elm").read_text(encoding="utf-8")
        assert "import Version.Old\n" in driver
        assert "import Version.New\n" in driver
        assert driver.index('"./old"') < driver.index('"./new"')

        assert (target / "src" / "Version" / "Old.elm").is_file()
        assert (target / "src" / "Version" / "New" / "Utils.elm").is_file()
        assert (target / "src" / "Runner.elm").is_file()
        assert not (target / ".candidates").exists()

        manifest = json.loads((target / "elm.json").read_text(encoding="utf-8"))
        dependencies = manifest["dependencies"]
        assert dependencies["direct"]["elm-explorations/benchmark"] == "1.0.2"
        assert dependencies["direct"]["elm/json"] == "1.1.3"
        assert "elm/json" not in dependencies["indirect"]
        assert not set(dependencies["direct"]) & set(dependencies["indirect"])

    def test_relative_eject_target_is_under_cwd(
        self, tmp_path: Path, fake_toolchain: Callable[..., ElmBenchConfig]
    ) -> None:
        result = run_pipeline(_request(tmp_path, "./old", "./new", eject_dir=Path("out")), fake_toolchain())

        assert result.workspace_root == tmp_path / "out"
        assert (tmp_path / "out" / "src" / "Benchmarks.elm").is_file()

    def test_existing_empty_eject_target_is_used(
        self, tmp_path: Path, fake_toolchain: Callable[..., ElmBenchConfig]
    ) -> None:
        target = tmp_path / "empty"
        target.mkdir()

        result = run_pipeline(_request(tmp_path, "./old", "./new", eject_dir=target), fake_toolchain())

        assert result.workspace_root == target
        assert (target / "elm.json").is_file()


@pytest.mark.usefixtures("two_projects")
class TestEjectTargetSafety:
    def test_candidate_directory_is_refused(
        self, tmp_path: Path, fake_toolchain: Callable[..., ElmBenchConfig]
    ) -> None:
        manifest = tmp_path / "old" / "elm.json"
        before = manifest.read_text(encoding="utf-8")
        sources_before = sorted(path.name for path in (tmp_path / "old" / "src").iterdir())

        with pytest.raises(InputError, match="new or empty directory"):
            run_pipeline(_request(tmp_path, "./old", "./new", eject_dir=tmp_path / "old"), fake_toolchain())

        assert manifest.read_text(encoding="utf-8") == before
        assert sorted(path.name for path in (tmp_path / "old" / "src").iterdir()) == sources_before
        assert not (tmp_path / "old" / "main.js").exists()

    def test_file_is_refused(
        self, tmp_path: Path, fake_toolchain: Callable[..., ElmBenchConfig]
    ) -> None:
        target = tmp_path / "notes.txt"
        target.write_text("keep me", encoding="utf-8")

        with pytest.raises(InputError):
            run_pipeline(_request(tmp_path, "./old", "./new", eject_dir=target), fake_toolchain())
        assert target.read_text(encoding="utf-8") == "keep me"

    def test_created_target_is_removed_on_failure(
        self, tmp_path: Path, fake_toolchain: Callable[..., ElmBenchConfig]
    ) -> None:
        target = tmp_path / "ejected"

        with pytest.raises(CandidateError):
            run_pipeline(_request(tmp_path, "./old", "./missing", eject_dir=target), fake_toolchain())
        assert not target.exists()

    def test_existing_empty_target_is_emptied_on_failure(
        self, tmp_path: Path, fake_toolchain: Callable[..., ElmBenchConfig]
    ) -> None:
        target = tmp_path / "ejected"
        target.mkdir()

        with pytest.raises(NamespaceCollisionError):
            run_pipeline(_request(tmp_path, "./old", "old", eject_dir=target), fake_toolchain())
        assert target.is_dir()
        assert list(target.iterdir()) == []
