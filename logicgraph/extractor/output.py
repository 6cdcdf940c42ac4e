"""
Output Manager - Creates output files under one directory.

Writes made inside staged() go to a temporary sibling directory and are
moved into the output directory only when the block completes. A failure
inside the block leaves the output directory as it was.
"""

from __future__ import annotations
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, TextIO
import logging
import os
import shutil
import tempfile

logger = logging.getLogger(__name__)


class OutputManager:
    """
    Owns the output directory of a run.

    The directory is created on first write, never before.

    Usage:
        manager = OutputManager("out")
        with manager.staged():
            with manager.create_output_file_text("regions.json") as f:
                f.write(...)
    """

    def __init__(self, output_dir: str | Path):
        self.output_dir = Path(output_dir)
        self.written: list[Path] = []
        self._staging: Path | None = None

    def path_for(self, name: str) -> Path:
        return self.output_dir / name

    def create_output_file_text(self, name: str) -> TextIO:
        directory = self._staging or self.output_dir
        directory.mkdir(parents=True, exist_ok=True)
        self.written.append(self.path_for(name))
        return open(directory / name, "w", encoding="utf-8", newline="\n")

    def write_text(self, name: str, content: str) -> Path:
        with self.create_output_file_text(name) as f:
            f.write(content)
        return self.path_for(name)

    @contextmanager
    def staged(self) -> Iterator[OutputManager]:
        """Collect the block's writes and publish them together."""
        parent = self.output_dir.parent
        parent.mkdir(parents=True, exist_ok=True)
        staging = Path(tempfile.mkdtemp(prefix=f".{self.output_dir.name}-", dir=parent))
        written_before = len(self.written)
        self._staging = staging
        try:
            yield self
        except BaseException:
            self._staging = None
            del self.written[written_before:]
            shutil.rmtree(staging, ignore_errors=True)
            raise
        self._staging = None
        self._publish(staging)

    def _publish(self, staging: Path):
        if not self.output_dir.exists():
            staging.rename(self.output_dir)
        else:
            for path in staging.iterdir():
                os.replace(path, self.output_dir / path.name)
            staging.rmdir()
        logger.debug("Published outputs to %s", self.output_dir)
