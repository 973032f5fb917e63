import logging
import mimetypes
from pathlib import Path
from typing import Optional

from .fanout import run_all
from .s3io import ObjectStore, channel_key
from .workspace import Workspace

LOG = logging.getLogger(__name__)


class ChannelUploader:
    def __init__(self, store: ObjectStore, workspace: Workspace, max_workers: Optional[int] = None):
        self.store = store
        self.workspace = workspace
        self.max_workers = max_workers

    def _upload_one(self, job_id: str, path: Path) -> str:
        key = channel_key(job_id, path.name)
        content_type, _ = mimetypes.guess_type(path.name)
        with path.open("rb") as f:
            self.store.put(key, f, content_type=content_type)
        LOG.info("Uploaded %s to s3://%s/%s", path.name, self.store.bucket, key)
        return key

    def upload_all(self, job_id: str) -> int:
        """Upload every file of the job's `split/` zone as a transmission channel."""
        split_dir = self.workspace.split_dir(job_id)
        files = sorted(p for p in split_dir.iterdir() if p.is_file())

        uploaded = run_all(
            "upload",
            {p.name: (lambda p=p: self._upload_one(job_id, p)) for p in files},
            max_workers=self.max_workers,
        )
        return len(uploaded)
