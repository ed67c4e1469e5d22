# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for dependency reconciliation.

The merged manifest must:
  - keep the highest version of any package per tier
  - let a skeleton `direct` pin win over anything a candidate asks for
  - never list a package in both tiers
  - compare versions semantically, never as strings
"""

import pytest

from elmbench.manifest.merger import combine_tiers, merge_manifests
from elmbench.manifest.models import Manifest
from elmbench.pipeline.exceptions import VersionError


def _manifest(direct: dict[str, str], indirect: dict[str, str] | None = None) -> Manifest:
    return Manifest(direct=direct, indirect=indirect or {}, document={"type": "application"})


SKELETON = Manifest(
    direct={"elm-explorations/benchmark": "1.0.2", "elm/core": "1.0.5"},
    indirect={"elm/time": "1.0.0"},
    document={"type": "application", "elm-version": "0.19.1"},
)


class TestCombineTiers:
    def test_highest_version_per_tier(self) -> None:
        combined = combine_tiers([
            _manifest({}, {"x/y": "1.2.0"}),
            _manifest({}, {"x/y": "1.5.0"}),
        ])
        assert combined["indirect"] == {"x/y": "1.5.0"}

    def test_tiers_are_combined_independently(self) -> None:
        combined = combine_tiers([
            _manifest({"x/y": "1.0.0"}),
            _manifest({}, {"x/y": "2.0.0"}),
        ])
        assert combined["direct"] == {"x/y": "1.0.0"}
        assert combined["indirect"] == {"x/y": "2.0.0"}

    def test_semantic_not_string_order(self) -> None:
        combined = combine_tiers([_manifest({"a/b": "1.9.0"}), _manifest({"a/b": "1.10.0"})])
        assert combined["direct"]["a/b"] == "1.10.0"


class TestMergeManifests:
    def test_candidate_only_packages_are_adopted(self) -> None:
        merged = merge_manifests(SKELETON, [_manifest({"a/b": "1.0.0"}), _manifest({"c/d": "2.0.0"})])
        assert merged.direct["a/b"] == "1.0.0"
        assert merged.direct["c/d"] == "2.0.0"

    def test_indirect_takes_max_of_candidates(self) -> None:
        merged = merge_manifests(
            SKELETON,
            [_manifest({}, {"x/y": "1.2.0"}), _manifest({}, {"x/y": "1.5.0"})],
        )
        assert merged.indirect["x/y"] == "1.5.0"

    def test_skeleton_direct_pin_wins(self) -> None:
        merged = merge_manifests(SKELETON, [_manifest({"elm/core": "9.0.0"})])
        assert merged.direct["elm/core"] == "1.0.5"

    def test_skeleton_direct_pin_wins_over_candidate_indirect(self) -> None:
        merged = merge_manifests(SKELETON, [_manifest({}, {"elm-explorations/benchmark": "2.0.0"})])
        assert merged.direct["elm-explorations/benchmark"] == "1.0.2"
        assert "elm-explorations/benchmark" not in merged.indirect

    def test_skeleton_indirect_is_raised_when_candidate_has_newer(self) -> None:
        merged = merge_manifests(SKELETON, [_manifest({}, {"elm/time": "1.0.3"})])
        assert merged.indirect["elm/time"] == "1.0.3"

    def test_skeleton_indirect_kept_when_candidate_is_older(self) -> None:
        skeleton = Manifest(direct={}, indirect={"elm/time": "1.0.5"})
        merged = merge_manifests(skeleton, [_manifest({}, {"elm/time": "1.0.0"})])
        assert merged.indirect["elm/time"] == "1.0.5"

    def test_direct_beats_indirect_for_same_package(self) -> None:
        merged = merge_manifests(
            SKELETON,
            [_manifest({"elm/json": "1.1.3"}), _manifest({}, {"elm/json": "1.1.2"})],
        )
        assert merged.direct["elm/json"] == "1.1.3"
        assert "elm/json" not in merged.indirect

    def test_no_package_in_both_tiers(self) -> None:
        merged = merge_manifests(
            SKELETON,
            [
                _manifest({"a/b": "1.0.0", "elm/json": "1.1.3"}, {"elm/time": "1.0.0"}),
                _manifest({"elm/time": "1.0.0"}, {"a/b": "1.2.0", "c/d": "3.0.0"}),
            ],
        )
        assert merged.overlapping_packages() == set()
        assert merged.indirect["c/d"] == "3.0.0"

    def test_skeleton_only_entries_survive(self) -> None:
        merged = merge_manifests(SKELETON, [])
        assert dict(merged.direct) == dict(SKELETON.direct)
        assert dict(merged.indirect) == dict(SKELETON.indirect)

    def test_skeleton_document_is_kept(self) -> None:
        merged = merge_manifests(SKELETON, [_manifest({"a/b": "1.0.0"})])
        assert merged.document["elm-version"] == "0.19.1"

    def test_merge_is_deterministic(self) -> None:
        inputs = [_manifest({"a/b": "1.0.0"}, {"x/y": "1.0.0"}), _manifest({"a/b": "1.1.0"})]
        assert merge_manifests(SKELETON, inputs).to_document() == merge_manifests(SKELETON, inputs).to_document()

    def test_invalid_version_names_package(self) -> None:
        with pytest.raises(VersionError, match="a/b"):
            merge_manifests(SKELETON, [_manifest({"a/b": "1.0.0"}), _manifest({"a/b": "one"})])
