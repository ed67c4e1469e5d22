# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""Namespace isolation: Elm header parsing, namespace assignment and source rewriting."""
