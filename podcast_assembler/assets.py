"""Resolve logical audio asset names to files on disk."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from podcast_assembler.constants import ASSET_DIR, ASSET_SETS, LAUGH_SFX

logger = logging.getLogger(__name__)

ASSET_KEYS = ("opening", "ending", "jingle", "continuous", "laugh", "countdown")


@dataclass
class AssetPaths:
    opening: Path | None = None
    ending: Path | None = None
    jingle: Path | None = None
    continuous: Path | None = None
    laugh: Path | None = None
    countdown: Path | None = None


def asset_candidate_path(
    candidate: str,
    project_root: str | Path = ".",
    asset_dir: str = ASSET_DIR,
) -> Path:
    """Map a candidate to a path without touching the filesystem.

    A candidate with a directory separator is used as-is (absolute, or
    relative to project_root); a bare filename lives under asset_dir.
    """
    normalized = candidate.strip()
    if "/" in normalized or "\\" in normalized:
        rel = Path(normalized)
    else:
        rel = Path(asset_dir) / normalized
    return rel if rel.is_absolute() else Path(project_root) / rel


def resolve_asset(
    candidate: str | None,
    project_root: str | Path = ".",
    asset_dir: str = ASSET_DIR,
) -> Path | None:
    """Resolve an asset to an existing file, or None.

    Missing files are logged, never raised, so callers can skip the insertion.
    """
    if not candidate or not candidate.strip():
        return None
    path = asset_candidate_path(candidate, project_root, asset_dir)
    if not os.path.isfile(path):
        logger.warning("Audio asset not found: %s (from %r)", path, candidate)
        return None
    return path


def asset_names(program_type: str, overrides: dict[str, str] | None = None) -> dict[str, str]:
    """Asset candidates for a program type, with per-key overrides."""
    names = {"laugh": LAUGH_SFX, **ASSET_SETS.get(program_type, ASSET_SETS["podcast"])}
    for key, value in (overrides or {}).items():
        if key not in ASSET_KEYS:
            logger.warning("Ignoring unknown asset key: %s", key)
            continue
        names[key] = value
    return names


def resolve_assets(config) -> AssetPaths:
    """Resolve only the assets the config will actually insert."""
    names = asset_names(config.program_type, config.assets)
    wanted = {
        "opening": config.insert_opening_bgm,
        "ending": config.insert_ending_bgm,
        "jingle": config.insert_jingles and config.jingle_interval > 0
                  and config.program_type != "quiz",
        "continuous": config.insert_continuous_bgm,
        "laugh": config.laughter_mode == "audio",
        "countdown": True,
    }
    return AssetPaths(**{
        key: resolve_asset(names.get(key), config.project_root, config.asset_dir) if enabled else None
        for key, enabled in wanted.items()
    })
