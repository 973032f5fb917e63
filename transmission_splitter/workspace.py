import logging
import shutil
from contextlib import contextmanager
from pathlib import Path

LOG = logging.getLogger(__name__)


class Workspace:
    """
    Per-job scratch tree on local disk:

        <tmp_root>/<id>/source/<id>      staged source audio
        <tmp_root>/<id>/split/<stem>     collected stems

    A job owns its root exclusively; concurrent jobs must use distinct ids.
    """

    def __init__(self, tmp_root: Path):
        self.tmp_root = Path(tmp_root)

    def root(self, job_id: str) -> Path:
        return self.tmp_root / job_id

    def source_dir(self, job_id: str) -> Path:
        return self.root(job_id) / "source"

    def split_dir(self, job_id: str) -> Path:
        return self.root(job_id) / "split"

    @staticmethod
    def ensure(path: Path) -> Path:
        path = Path(path)
        path.mkdir(parents=True, exist_ok=True)
        return path

    def teardown(self, job_id: str) -> None:
        root = self.root(job_id)
        if not root.exists():
            LOG.debug("Workspace %s already clean", root)
            return
        try:
            shutil.rmtree(root)
        except OSError:
            # Usually runs while another error unwinds; never replace it.
            LOG.exception("Failed to remove workspace %s", root)
        else:
            LOG.info("Removed workspace %s", root)

    @contextmanager
    def claim(self, job_id: str):
        try:
            yield self.root(job_id)
        finally:
            self.teardown(job_id)
