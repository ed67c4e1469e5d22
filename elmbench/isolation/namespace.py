# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Namespace assignment.

Every candidate's modules get moved under `<Root>.<Name>`, where Name comes
from the label the user passed: `./listRemoveOld` becomes `ListRemoveOld`,
`remove-old` becomes `RemoveOld`. Two candidates that would land on the same
name (compared case-insensitively, since macOS filesystems are) stop the
run: silently merging them would benchmark one implementation twice.
"""

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from elmbench.candidates.models import Candidate
from elmbench.pipeline.exceptions import CandidateError, NamespaceCollisionError

DEFAULT_NAMESPACE_ROOT = "Version"

_WORD_SPLIT = re.compile(r"[^A-Za-z0-9]+")


@dataclass(frozen=True)
class Namespace:
    root: str
    name: str

    @property
    def qualified(self) -> str:
        return f"{self.root}.{self.name}"

    def module_name(self, relative_module: Optional[str] = None) -> str:
        """The new name of a module: the namespace itself for the entry module."""
        if relative_module is None:
            return self.qualified
        return f"{self.qualified}.{relative_module}"

    def entry_file(self, module_root: Path) -> Path:
        return module_root / self.root / f"{self.name}.elm"

    def nested_file(self, module_root: Path, relative_path: Path) -> Path:
        return module_root / self.root / self.name / relative_path


def namespace_name(display_name: str) -> str:
    """
    Turn a candidate label into a valid Elm module segment.

    Path noise is dropped (`./`, `../`, separators), each remaining word is
    capitalized, and a leading digit (a commit hash, say) gets a `V` prefix.

    Raises:
        CandidateError: If the label has no letters or digits at all.
    """
    normalized = os.path.normpath(display_name.strip())
    words = [word for word in _WORD_SPLIT.split(normalized) if word]
    if not words:
        raise CandidateError(f"Cannot derive a module namespace from '{display_name}'")

    name = "".join(word[0].upper() + word[1:] for word in words)
    if name[0].isdigit():
        name = "V" + name
    return name


def derive_namespace(display_name: str, root: str = DEFAULT_NAMESPACE_ROOT) -> Namespace:
    return Namespace(root=root, name=namespace_name(display_name))


def assign_namespaces(
    candidates: Sequence[Candidate],
    root: str = DEFAULT_NAMESPACE_ROOT,
) -> dict[str, Namespace]:
    """
    One namespace per candidate, keyed by display name, in input order.

    Raises:
        NamespaceCollisionError: If two candidates map to the same namespace.
    """
    assigned: dict[str, Namespace] = {}
    owners: dict[str, str] = {}

    for candidate in candidates:
        namespace = derive_namespace(candidate.display_name, root)
        key = namespace.qualified.lower()
        if key in owners:
            raise NamespaceCollisionError(namespace.qualified, owners[key], candidate.display_name)
        owners[key] = candidate.display_name
        assigned[candidate.display_name] = namespace

    return assigned
