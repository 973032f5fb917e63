import logging

from .errors import InvalidBodyError
from .models import StagedAsset
from .s3io import ObjectStore, source_key
from .workspace import Workspace

LOG = logging.getLogger(__name__)

MiB = 1024 ** 2
DL_CHUNK = 8 * MiB


def _pipe_body_to_file(body, file_path) -> int:
    if body is None:
        raise InvalidBodyError("No body found")
    if not callable(getattr(body, "read", None)):
        raise InvalidBodyError(f"Body isn't a readable stream: {type(body).__name__}")

    written = 0
    try:
        with open(file_path, "wb") as f:
            while True:
                chunk = body.read(DL_CHUNK)
                if not chunk:
                    break
                f.write(chunk)
                written += len(chunk)
    finally:
        close = getattr(body, "close", None)
        if callable(close):
            close()
    return written


class SourceFetcher:
    def __init__(self, store: ObjectStore, workspace: Workspace):
        self.store = store
        self.workspace = workspace

    def fetch(self, job_id: str) -> StagedAsset:
        """
        Download the transmission's source audio to `source/<id>` in the workspace.

        A partially written file is left behind on failure; workspace teardown removes it.
        """
        source_dir = self.workspace.ensure(self.workspace.source_dir(job_id))
        key = source_key(job_id)

        body = self.store.get(key)
        target = source_dir / job_id
        size = _pipe_body_to_file(body, target)

        LOG.info("Fetched s3://%s/%s to %s (%d bytes)", self.store.bucket, key, target, size)
        return StagedAsset(job_id=job_id, path=target, size=size)
