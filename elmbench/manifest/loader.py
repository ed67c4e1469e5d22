# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
elm.json reading and writing.

Loading is strict. A candidate's elm.json must be an *application* manifest
with `dependencies.direct` and `dependencies.indirect` objects, and every
version must be a valid pin. Anything else stops the run before we've
spent time compiling, since the merge can't be trusted on a manifest we
only half understood.
"""

import json
from pathlib import Path
from typing import Any

from elmbench.logging.logger import get_logger
from elmbench.manifest.models import TIERS, Manifest
from elmbench.manifest.versions import parse_version
from elmbench.pipeline.exceptions import ManifestError
from elmbench.utils.filesystem import atomic_write

logger = get_logger(__name__)

MANIFEST_FILENAME = "elm.json"


def read_elm_json(manifest_path: Path) -> dict[str, Any]:
    """
    Read an elm.json file into a plain dict.

    Raises:
        ManifestError: If the file is missing, unreadable, or not a JSON object.
    """
    if not manifest_path.is_file():
        raise ManifestError(f"Manifest not found: {manifest_path}")

    try:
        raw_text = manifest_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as err:
        raise ManifestError(f"Cannot read manifest {manifest_path}: {err}") from err

    try:
        document = json.loads(raw_text)
    except json.JSONDecodeError as err:
        raise ManifestError(f"Invalid JSON in {manifest_path}: {err}") from err

    if not isinstance(document, dict):
        raise ManifestError(
            f"Manifest {manifest_path} must contain a JSON object, got {type(document).__name__}"
        )

    return document


def source_directories(document: dict[str, Any], manifest_path: Path) -> list[str]:
    """
    The `source-directories` list of an application elm.json.

    Defaults to ["src"] when the key is absent, which is what `elm init`
    generates.

    Raises:
        ManifestError: If the key is present but isn't a list of strings.
    """
    directories = document.get("source-directories", ["src"])
    if not isinstance(directories, list) or not all(isinstance(d, str) for d in directories):
        raise ManifestError(
            f"'source-directories' in {manifest_path} must be a list of strings"
        )
    return directories


def _read_tier(dependencies: dict[str, Any], tier: str, manifest_path: Path) -> dict[str, str]:
    pins = dependencies.get(tier)
    if not isinstance(pins, dict):
        raise ManifestError(
            f"'dependencies.{tier}' in {manifest_path} must be an object of package → version"
        )

    for package, version in pins.items():
        parse_version(package, version)

    return dict(pins)


def manifest_from_document(document: dict[str, Any], manifest_path: Path) -> Manifest:
    """
    Build a Manifest from an already-parsed elm.json document.

    Raises:
        ManifestError: If the document isn't an application manifest with
            both dependency tiers.
        VersionError: If any pin isn't MAJOR.MINOR.PATCH.
    """
    project_type = document.get("type")
    if project_type != "application":
        raise ManifestError(
            f"{manifest_path} is a '{project_type}' project; only applications can be benchmarked"
        )

    dependencies = document.get("dependencies")
    if not isinstance(dependencies, dict):
        raise ManifestError(f"'dependencies' in {manifest_path} must be an object")

    tiers = {tier: _read_tier(dependencies, tier, manifest_path) for tier in TIERS}

    return Manifest(
        direct=tiers["direct"],
        indirect=tiers["indirect"],
        document=document,
        origin=str(manifest_path),
    )


def load_manifest(manifest_path: Path) -> Manifest:
    """
    Load and validate one elm.json.

    Raises:
        ManifestError: Missing file, bad JSON, or wrong structure.
        VersionError: A pin that isn't MAJOR.MINOR.PATCH.
    """
    document = read_elm_json(manifest_path)
    manifest = manifest_from_document(document, manifest_path)

    logger.debug(
        "Manifest loaded",
        extra={
            "path": str(manifest_path),
            "direct": len(manifest.direct),
            "indirect": len(manifest.indirect),
        },
    )
    return manifest


def write_manifest(manifest: Manifest, manifest_path: Path) -> None:
    """Write a manifest back as elm.json (4-space indent, like elm's own output)."""
    content = json.dumps(manifest.to_document(), indent=4) + "\n"
    atomic_write(manifest_path, content)
    logger.debug("Manifest written", extra={"path": str(manifest_path)})
