# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Dependency reconciliation across candidate manifests.

Each candidate pins its own dependencies; the merged workspace needs one
elm.json that satisfies all of them at once. We only do flat version
reconciliation, never graph solving. The rules, applied in order:

  1. Per tier, combine all candidates: a package seen more than once keeps
     its highest version.
  2. Start from the skeleton's own tiers. Skeleton entries nobody else
     mentions are kept as they are.
  3. For every combined package:
       - if the skeleton pins it as `direct`, the skeleton pin wins outright
         (the runner code in the skeleton was written against that version);
       - else if the skeleton has it in the same tier, the higher version wins;
       - else the combined version is adopted.
  4. A package can't be pinned both directly and transitively, so anything
     that ended up in `direct` is removed from `indirect`.

Every comparison is semantic, through `elmbench.manifest.versions`.
"""

from typing import Iterable, Mapping, Sequence

from elmbench.logging.logger import get_logger
from elmbench.manifest.models import TIERS, Manifest
from elmbench.manifest.versions import higher_version

logger = get_logger(__name__)


def combine_tiers(manifests: Iterable[Manifest]) -> dict[str, dict[str, str]]:
    """
    Fold any number of manifests into one highest-version map per tier.

    Tiers are combined independently: a package that is `direct` in one
    candidate and `indirect` in another shows up in both results.
    """
    combined: dict[str, dict[str, str]] = {tier: {} for tier in TIERS}

    for manifest in manifests:
        for tier in TIERS:
            target = combined[tier]
            for package, version in manifest.tier(tier).items():
                if package in target:
                    target[package] = higher_version(package, target[package], version)
                else:
                    target[package] = version

    return combined


def _resolve_tier(
    tier: str,
    skeleton: Manifest,
    contributed: Mapping[str, str],
) -> dict[str, str]:
    existing = skeleton.tier(tier)
    resolved = dict(existing)

    for package, version in contributed.items():
        pinned = skeleton.direct.get(package)
        if pinned is not None:
            resolved[package] = pinned
        elif package in existing:
            resolved[package] = higher_version(package, existing[package], version)
        else:
            resolved[package] = version

    return resolved


def merge_manifests(skeleton: Manifest, manifests: Sequence[Manifest]) -> Manifest:
    """
    Reconcile candidate manifests onto the skeleton's manifest.

    The returned manifest keeps the skeleton's document (source directories,
    elm version) and satisfies: no package name appears in both tiers.

    Raises:
        VersionError: If any pin being compared isn't MAJOR.MINOR.PATCH.
    """
    combined = combine_tiers(manifests)

    direct = _resolve_tier("direct", skeleton, combined["direct"])
    indirect = _resolve_tier("indirect", skeleton, combined["indirect"])

    demoted = sorted(package for package in indirect if package in direct)
    for package in demoted:
        del indirect[package]

    logger.info(
        "Merged manifests",
        extra={
            "candidates": len(manifests),
            "direct": len(direct),
            "indirect": len(indirect),
            "demoted_from_indirect": demoted,
        },
    )

    return Manifest(
        direct=direct,
        indirect=indirect,
        document=skeleton.document,
        origin="merged",
    )
