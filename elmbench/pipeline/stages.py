# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""Pipeline states, in the order a successful run passes through them."""

from enum import Enum


class PipelineStage(str, Enum):
    STAGED = "staged"
    COMPILED = "compiled"
    EXECUTED = "executed"
    PARSED = "parsed"
    REPORTED = "reported"


STAGE_ORDER: tuple[PipelineStage, ...] = (
    PipelineStage.STAGED,
    PipelineStage.COMPILED,
    PipelineStage.EXECUTED,
    PipelineStage.PARSED,
    PipelineStage.REPORTED,
)


def next_stage(stage: PipelineStage) -> PipelineStage:
    """
    The state that follows `stage`.

    Raises:
        ValueError: If `stage` is already the terminal state.
    """
    index = STAGE_ORDER.index(stage)
    if index + 1 >= len(STAGE_ORDER):
        raise ValueError(f"'{stage.value}' is the final stage")
    return STAGE_ORDER[index + 1]
