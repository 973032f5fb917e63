import logging
import posixpath

from botocore.client import BaseClient
from botocore.exceptions import ClientError

from . import configs
from .errors import NotFoundError

LOG = logging.getLogger(__name__)

TRANSMISSIONS_PREFIX = "transmissions"
_MISSING_CODES = {"NoSuchKey", "NotFound", "404"}


def source_key(transmission_id: str) -> str:
    return posixpath.join(TRANSMISSIONS_PREFIX, transmission_id, "sourceAudio")


def channel_key(transmission_id: str, channel_name: str) -> str:
    return posixpath.join(TRANSMISSIONS_PREFIX, transmission_id, "channels", channel_name)


class ObjectStore:
    """Get/put access to one bucket. The boto3 client is shared between threads."""

    def __init__(self, bucket: str, client: BaseClient | None = None):
        self.bucket = bucket
        self.client = client if client is not None else configs.create_boto3_client()

    def get(self, key: str):
        """Return the streaming body of `key`, or None when the response carries no body."""
        LOG.debug("get s3://%s/%s", self.bucket, key)
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in _MISSING_CODES:
                raise NotFoundError(self.bucket, key) from e
            raise
        return response.get("Body")

    def put(self, key: str, body, content_type: str | None = None):
        LOG.debug("put s3://%s/%s", self.bucket, key)
        kwargs = dict(Bucket=self.bucket, Key=key, Body=body)
        if content_type:
            kwargs["ContentType"] = content_type
        return self.client.put_object(**kwargs)
