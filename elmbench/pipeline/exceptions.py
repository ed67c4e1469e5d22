# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Exceptions raised by the merge-and-harness pipeline.

The hierarchy mirrors who is at fault, because that's what the user needs
to know first:

  InputError          : the candidate projects or arguments are wrong
  ReconciliationError : the candidates are fine alone but can't be merged
  PipelineError       : something downstream of the user's projects broke
                         (compiler, benchmark program, its output, or an
                         internal inconsistency in the harness)

The CLI maps each family to its own exit code.
"""

from elmbench.pipeline.stages import PipelineStage


class ElmBenchError(Exception):
    """Base for every error the pipeline raises on purpose."""


class InputError(ElmBenchError):
    """The user's input can't be used as given."""


class CandidateError(InputError):
    """A candidate project is missing, empty, or has no entry module."""


class ManifestError(InputError):
    """A candidate's elm.json is missing or structurally malformed."""


class ReconciliationError(ElmBenchError):
    """Candidates are individually valid but can't be combined."""


class NamespaceCollisionError(ReconciliationError):
    """Two candidates would be rewritten into the same module namespace."""

    def __init__(self, namespace: str, first: str, second: str) -> None:
        super().__init__(
            f"Candidates '{first}' and '{second}' both map to namespace '{namespace}'"
        )
        self.namespace = namespace
        self.first = first
        self.second = second


class VersionError(ReconciliationError):
    """A package version string isn't MAJOR.MINOR.PATCH."""

    def __init__(self, package: str, value: object) -> None:
        super().__init__(f"Invalid version for package '{package}': {value!r}")
        self.package = package
        self.value = value


class PipelineError(ElmBenchError):
    """
    A failure at a specific pipeline stage.

    `stage` is the state the pipeline was trying to reach; `detail` carries
    the diagnostic text (compiler output, stderr, parse error) verbatim.
    """

    def __init__(self, stage: PipelineStage, message: str, detail: str = "") -> None:
        super().__init__(message)
        self.stage = stage
        self.detail = detail


class DriverError(PipelineError):
    """The harness builder was handed an inconsistent program."""

    def __init__(self, message: str) -> None:
        super().__init__(PipelineStage.STAGED, message)


class CompileError(PipelineError):
    """elm make failed, timed out, or couldn't be started."""

    def __init__(self, message: str, detail: str = "") -> None:
        super().__init__(PipelineStage.COMPILED, message, detail)


class ExecutionError(PipelineError):
    """The benchmark program failed, timed out, or couldn't be started."""

    def __init__(self, message: str, detail: str = "") -> None:
        super().__init__(PipelineStage.EXECUTED, message, detail)


class ArtifactOutputError(PipelineError):
    """The benchmark program's stdout isn't the JSON document we expect."""

    def __init__(self, message: str, detail: str = "") -> None:
        super().__init__(PipelineStage.PARSED, message, detail)
