"""Sink writing artifacts into a local directory."""

import logging
import os

from .base import ArtifactSink
from ..config import get_config
from ..exceptions import SinkFailure

logger = logging.getLogger(__name__)


def resolve_output_dir(output_dir: str, base_dir: str = "") -> str:
    """Absolute paths are kept; relative ones are joined to base_dir (default: cwd)."""
    if os.path.isabs(output_dir):
        return output_dir
    return os.path.join(base_dir or os.getcwd(), output_dir)


def check_output_dir(output_dir: str) -> str:
    """
    Resolve a client-chosen output directory.

    When ``SAVE_OUTPUT_ROOT`` is configured the directory must lie inside it.

    Raises:
        ValueError: If the directory falls outside the configured root
    """
    resolved = resolve_output_dir(output_dir)
    root = get_config().save.output_root
    if not root:
        return resolved

    root = os.path.realpath(resolve_output_dir(root))
    real = os.path.realpath(resolved)
    if os.path.commonpath([root, real]) != root:
        raise ValueError(f"Output directory '{output_dir}' is outside the allowed root")
    return real


class DirectorySink(ArtifactSink):
    """Writes each artifact to <output_dir>/<name>, overwriting existing files."""

    def __init__(self, output_dir: str):
        self.output_dir = resolve_output_dir(output_dir)

    def save(self, name: str, data: bytes) -> str:
        if os.path.basename(name) != name or name in ("", ".", ".."):
            raise SinkFailure(f"Invalid artifact name '{name}'")

        path = os.path.join(self.output_dir, name)
        try:
            os.makedirs(self.output_dir, exist_ok=True)
            with open(path, "wb") as f:
                f.write(data)
        except OSError as e:
            raise SinkFailure(f"Failed to write to selected folder. {e}") from e

        logger.debug(f"Wrote {len(data)} bytes to {path}")
        return path
