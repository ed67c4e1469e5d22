# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Benchmark driver synthesis.

The skeleton/ directory is copied into every workspace as is: the base
elm.json, the Node launcher, and the Runner module that steps the
benchmark and prints its results.
"""
