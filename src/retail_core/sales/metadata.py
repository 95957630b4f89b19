"""Metadata tracking for sales pipeline stages.

This module handles idempotence by recording which stage produced the data in
a layer directory, with which schema version, and whether it succeeded.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass
class StageMetadata:
    """Metadata for a completed stage.

    Attributes:
        stage: Stage name (e.g. "enrich" or a report name).
        version: Version string for the stage logic.
        last_run: ISO timestamp of when stage was run.
        status: "ok" or "failed".
        row_count: Rows written by the stage.
    """

    stage: str
    version: str
    last_run: str
    status: str
    row_count: int = 0


def _meta_path(stage_dir: Path, stage: str) -> Path:
    """Get path to metadata file for a stage."""
    meta_dir = stage_dir / "_meta"
    meta_dir.mkdir(parents=True, exist_ok=True)
    return meta_dir / f"{stage}.json"


def write_metadata(stage_dir: Path, metadata: StageMetadata) -> None:
    """Write metadata file for a stage completion."""
    path = _meta_path(stage_dir, metadata.stage)
    path.write_text(json.dumps(asdict(metadata), indent=2))
    logger.debug("Wrote metadata: %s", path)


def read_metadata(stage_dir: Path, stage: str) -> Optional[StageMetadata]:
    """Read metadata file for a stage, if it exists."""
    path = _meta_path(stage_dir, stage)
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text())
        return StageMetadata(**data)
    except (ValueError, TypeError) as e:
        logger.warning("Error reading metadata %s: %s", path, e)
        return None


def should_run_stage(stage_dir: Path, stage: str, version: str) -> bool:
    """Check if a stage needs to run based on metadata.

    Returns True if:
    - No metadata exists for this stage
    - Metadata status is not "ok"
    - Metadata version doesn't match current version
    """
    meta = read_metadata(stage_dir, stage)
    if meta is None:
        return True
    if meta.status != "ok":
        return True
    if meta.version != version:
        return True
    return False
