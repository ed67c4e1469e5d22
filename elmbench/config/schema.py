# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Type-safe configuration schemas for elm-bench.

Every section of the config file gets its own frozen pydantic model.
Frozen means once it's built, it can't be mutated. The pipeline reads
settings, it never writes them.

The models use pydantic v2's ConfigDict with:
  - frozen=True: immutability after construction
  - extra="forbid": unknown fields cause immediate failure
  - validate_default=True: even defaults get type-checked

A config file is optional. Running without one gives you ElmBenchConfig()
with every default below, which is what most people want.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class GlobalConfig(BaseModel):
    """Cross-cutting settings: config identity and logging."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    config_version: str = Field(
        default="1.0.0",
        description="Schema version for compatibility tracking, e.g. '1.0.0'",
    )
    log_level: str = Field(
        default="WARNING",
        description="One of DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )
    log_file: Optional[str] = Field(
        default=None,
        description="Optional path for file-based log output",
    )

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        upper = value.upper()
        if upper not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level '{value}'")
        return upper


class ToolchainConfig(BaseModel):
    """
    The external programs the pipeline shells out to, and how long each one
    may run. Every child process gets a hard timeout; a hung `elm make` or a
    benchmark that never settles fails the run instead of blocking forever.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    elm_executable: str = Field(default="elm", description="Elm compiler command")
    node_executable: str = Field(default="node", description="Node.js command used to run the artifact")
    git_executable: str = Field(default="git", description="git command used for -g/--git candidates")
    compile_timeout_seconds: int = Field(
        default=300,
        ge=1,
        le=3600,
        description="Max seconds to wait for `elm make` before declaring failure",
    )
    run_timeout_seconds: int = Field(
        default=600,
        ge=1,
        le=7200,
        description="Max seconds to wait for the benchmark program to finish",
    )
    optimize: bool = Field(
        default=True,
        description="Pass --optimize to elm make. Benchmarks of unoptimized code are rarely meaningful",
    )


class WorkspaceConfig(BaseModel):
    """Where the scratch project is built and what it's seeded from."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    base_directory: Optional[str] = Field(
        default=None,
        description="Parent directory for temporary workspaces (system temp dir when unset)",
    )
    skeleton_directory: Optional[str] = Field(
        default=None,
        description="Override for the harness skeleton copied into every workspace",
    )
    namespace_root: str = Field(
        default="Version",
        pattern=r"^[A-Z][A-Za-z0-9_]*$",
        description="Top-level module segment every candidate is nested under",
    )


class ReportConfig(BaseModel):
    """How the comparison table looks."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    bar_width: int = Field(
        default=20,
        ge=1,
        le=200,
        description="Bar length (in characters) that represents the baseline",
    )
    color: bool = Field(
        default=True,
        description="Highlight the fastest candidate with ANSI colour",
    )


class ElmBenchConfig(BaseModel):
    """
    Top-level config container.

    A YAML file may hold any subset of the sections. Missing sections just
    fall back to their defaults.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    global_config: GlobalConfig = Field(default_factory=GlobalConfig, alias="global")
    toolchain: ToolchainConfig = Field(default_factory=ToolchainConfig)
    workspace: WorkspaceConfig = Field(default_factory=WorkspaceConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)
