import io
import logging
import sys
import threading
from pathlib import Path

import pytest
from botocore.exceptions import ClientError

from transmission_splitter.s3io import ObjectStore
from transmission_splitter.separator import Separator
from transmission_splitter.workspace import Workspace

BUCKET = "dev-emptystream-mainBucket"
FAKE_TOOLS_DIR = Path(__file__).parent / "fake_tools"


class FakeBody:
    """Mimics botocore's StreamingBody."""

    def __init__(self, data: bytes):
        self._buf = io.BytesIO(data)
        self.closed = False

    def read(self, amt=None):
        return self._buf.read(amt) if amt else self._buf.read()

    def close(self):
        self.closed = True


class FakeS3Client:
    """In-memory replacement of a boto3 S3 client (get_object/put_object only)."""

    def __init__(self, objects: dict | None = None, fail_keys=(), put_barrier=None):
        self.objects = dict(objects or {})
        self.fail_keys = set(fail_keys)
        self.put_barrier = put_barrier
        self.put_calls = []
        self.get_calls = []
        self.bodies = []
        self._lock = threading.Lock()

    def get_object(self, Bucket, Key):
        self.get_calls.append(Key)
        if Key not in self.objects:
            raise ClientError(
                {"Error": {"Code": "NoSuchKey", "Message": "The specified key does not exist."}},
                "GetObject",
            )
        body = FakeBody(self.objects[Key])
        self.bodies.append(body)
        return {"Body": body, "ContentLength": len(self.objects[Key])}

    def put_object(self, Bucket, Key, Body, **kwargs):
        with self._lock:
            self.put_calls.append((Key, kwargs))
        if self.put_barrier is not None:
            self.put_barrier.wait()
        if Key in self.fail_keys:
            raise ClientError({"Error": {"Code": "InternalError", "Message": "boom"}}, "PutObject")
        data = Body.read()
        with self._lock:
            self.objects[Key] = data
        return {"ETag": '"fake"'}


@pytest.fixture
def s3_client():
    return FakeS3Client()


@pytest.fixture
def store(s3_client):
    return ObjectStore(BUCKET, client=s3_client)


@pytest.fixture
def workspace(tmp_path):
    return Workspace(tmp_path / "tmp")


@pytest.fixture
def fake_demucs(monkeypatch):
    """Put the fake `demucs` package first on the path of child interpreters."""
    monkeypatch.setenv("PYTHONPATH", str(FAKE_TOOLS_DIR))
    for var in (
        "FAKE_DEMUCS_EXIT", "FAKE_DEMUCS_STEMS", "FAKE_DEMUCS_SLEEP", "FAKE_DEMUCS_SIGNAL", "FAKE_DEMUCS_ORPHAN",
    ):
        monkeypatch.delenv(var, raising=False)
    return monkeypatch


@pytest.fixture
def separator(tmp_path, fake_demucs):
    return Separator(output_root=tmp_path / "separated", executable=sys.executable)


@pytest.fixture
def restore_logging():
    """setup_logging() rewires the root logger; put it back for the next tests."""
    from transmission_splitter.logging_setup import TOOL_LOGGER

    root = logging.getLogger()
    tool = logging.getLogger(TOOL_LOGGER)
    handlers, level, tool_level = root.handlers[:], root.level, tool.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    tool.setLevel(tool_level)
