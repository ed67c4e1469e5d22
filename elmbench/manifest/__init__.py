# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""elm.json loading, semantic version comparison and dependency merging."""
