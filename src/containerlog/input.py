"""Locate per-container log files under the Docker data root.

The json-file driver writes ``<path>/<container id>/<container id>-json.log``
(rotated files get a numeric suffix and are not matched).
"""

from __future__ import annotations

import glob
import os
from pathlib import Path

from containerlog.config import ContainersConfig


def validate_container_ids(config: ContainersConfig) -> None:
    if not config.ids:
        raise ValueError("Docker input requires at least one entry under 'containers.ids'")


def container_log_globs(config: ContainersConfig) -> list[str]:
    """One ``<path>/<id>/*.log`` pattern per configured container."""
    validate_container_ids(config)
    return [os.path.join(config.path, container_id, "*.log") for container_id in config.ids]


def container_log_paths(config: ContainersConfig) -> list[Path]:
    """Existing log files for the configured containers, sorted and de-duplicated."""
    found: set[str] = set()
    for pattern in container_log_globs(config):
        found.update(glob.glob(pattern))
    return [Path(p) for p in sorted(found)]
