# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Data models for dependency manifests.

A Manifest is the dependency half of an elm.json: two tiers, `direct` and
`indirect`, each mapping a package name ("elm/core") to one pinned version
("1.0.5"). The rest of the document (source-directories, elm-version,
test-dependencies) rides along untouched in `document` so that writing a
merged manifest back never loses keys we don't care about.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

TIERS: tuple[str, str] = ("direct", "indirect")


@dataclass(frozen=True)
class Manifest:
    """One project's dependency pins, split by tier."""

    direct: Mapping[str, str]
    indirect: Mapping[str, str]
    document: Mapping[str, Any] = field(default_factory=dict)
    origin: str = ""

    def __post_init__(self) -> None:
        # Freeze the tier mappings too, not just the attributes.
        object.__setattr__(self, "direct", MappingProxyType(dict(self.direct)))
        object.__setattr__(self, "indirect", MappingProxyType(dict(self.indirect)))

    def tier(self, name: str) -> Mapping[str, str]:
        """Look up a tier by name ("direct" or "indirect")."""
        if name == "direct":
            return self.direct
        if name == "indirect":
            return self.indirect
        raise KeyError(f"Unknown dependency tier: {name}")

    def overlapping_packages(self) -> set[str]:
        """Package names pinned in both tiers. Empty for a merged manifest."""
        return set(self.direct) & set(self.indirect)

    def to_document(self) -> dict[str, Any]:
        """
        The full elm.json document with this manifest's tiers written in.

        Keys within each tier are sorted, which is also how elm itself
        writes elm.json.
        """
        document = {key: value for key, value in self.document.items()}
        dependencies = dict(document.get("dependencies") or {})
        dependencies["direct"] = dict(sorted(self.direct.items()))
        dependencies["indirect"] = dict(sorted(self.indirect.items()))
        document["dependencies"] = dependencies
        return document
