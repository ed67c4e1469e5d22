# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""Candidate projects: directories on disk or exported git revisions."""
