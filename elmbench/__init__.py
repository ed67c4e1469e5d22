# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
elm-bench: benchmark independently written implementations of one Elm
function against each other.

Subsystems:
  - candidates: turning -v/-g arguments into candidate projects
  - isolation: moving each candidate into its own module namespace
  - manifest: reading and reconciling elm.json dependencies
  - harness: the generated benchmark driver and its skeleton project
  - workspace: the scratch directory a run lives in
  - toolchain: elm make and node
  - reporting: parsing, ranking and rendering results
  - pipeline: wiring the stages together
"""

__version__ = "1.0.0"
