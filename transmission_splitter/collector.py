import logging
import os
import shutil
from pathlib import Path
from typing import Optional

from .errors import NoOutputError
from .fanout import run_all
from .models import Stem
from .workspace import Workspace

LOG = logging.getLogger(__name__)


class StemCollector:
    """Moves the stems demucs left in its own output tree into the job's `split/` zone."""

    def __init__(self, workspace: Workspace, tool_output_dir, max_workers: Optional[int] = None):
        self.workspace = workspace
        # callable job_id -> Path, see Separator.output_dir
        self.tool_output_dir = tool_output_dir
        self.max_workers = max_workers

    def collect(self, job_id: str) -> set[Stem]:
        output_dir = Path(self.tool_output_dir(job_id))
        try:
            return self._relocate(job_id, output_dir)
        finally:
            self._remove_tool_output(output_dir)

    def _relocate(self, job_id: str, output_dir: Path) -> set[Stem]:
        entries = sorted(output_dir.iterdir()) if output_dir.is_dir() else []
        if not entries:
            raise NoOutputError(job_id, output_dir)

        split_dir = self.workspace.ensure(self.workspace.split_dir(job_id))

        def _move(src: Path) -> Stem:
            dst = split_dir / src.name
            os.replace(src, dst)
            LOG.debug("Moved %s -> %s", src, dst)
            return Stem(name=src.name, path=dst)

        moved = run_all(
            "collect",
            {src.name: (lambda src=src: _move(src)) for src in entries},
            max_workers=self.max_workers,
        )
        LOG.info("Collected %d stem(s) for %s: %s", len(moved), job_id, ", ".join(sorted(moved)))
        return set(moved.values())

    @staticmethod
    def _remove_tool_output(output_dir: Path) -> None:
        if not output_dir.exists():
            return
        try:
            shutil.rmtree(output_dir)
        except OSError:
            LOG.exception("Failed to remove tool output %s", output_dir)
