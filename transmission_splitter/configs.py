import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import boto3
from botocore.client import BaseClient
from botocore.config import Config
from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()

OFFLINE_ENDPOINT_URL = "http://localhost:4569"
OFFLINE_CREDENTIALS = "S3RVER"


@dataclass(frozen=True)
class Settings:
    job_id: str
    bucket: str
    tmp_root: Path
    tool_output_root: Path
    model: str = "htdemucs"
    executable: str = sys.executable
    separator_timeout: Optional[float] = None
    max_workers: Optional[int] = None


class S3Config(BaseModel):
    access_key: str | None = Field(None, description="S3 access key ID")
    secret_key: str | None = Field(None, description="S3 secret access key")
    endpoint_url: str | None = Field(None, description="Custom S3 endpoint URL (if any)")
    region: str = Field("us-east-1", description="S3 region")


_SETTINGS: Optional[Settings] = None


def critical_env(key: str) -> str:
    value = os.getenv(key)
    if not value:
        raise RuntimeError(f"{key} must be set")
    return value


def _bucket_from_env() -> str:
    bucket = os.getenv("BUCKET_NAME")
    if bucket:
        return bucket
    stage = os.getenv("SLS_STAGE")
    service = os.getenv("SERVICE_NAME")
    if stage and service:
        return f"{stage}-{service}-mainBucket"
    raise RuntimeError("BUCKET_NAME (or SLS_STAGE and SERVICE_NAME) must be set")


def _optional_number(key: str, cast):
    raw = os.getenv(key)
    if raw is None or raw.strip() == "":
        return None
    try:
        value = cast(raw)
    except ValueError:
        raise RuntimeError(f"{key} must be a number, got {raw!r}")
    if value <= 0:
        raise RuntimeError(f"{key} must be positive, got {raw!r}")
    return value


def init_settings(**overrides) -> Settings:
    global _SETTINGS

    values = dict(
        job_id=overrides.pop("job_id", None) or critical_env("ID"),
        bucket=overrides.pop("bucket", None) or _bucket_from_env(),
        tmp_root=Path(os.getenv("SPLITTER_TMP_ROOT", "tmp")),
        tool_output_root=Path(os.getenv("DEMUCS_OUTPUT_DIR", "split")),
        model=os.getenv("DEMUCS_MODEL", "htdemucs"),
        executable=os.getenv("SEPARATOR_EXECUTABLE") or sys.executable,
        separator_timeout=_optional_number("SEPARATOR_TIMEOUT", float),
        max_workers=_optional_number("SPLITTER_MAX_WORKERS", int),
    )
    values.update(overrides)
    _SETTINGS = Settings(**values)
    return _SETTINGS


def get_settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = init_settings()
    return _SETTINGS


def load_s3_config() -> S3Config:
    if os.getenv("IS_OFFLINE"):
        # Local S3rver started next to the serverless-offline stack.
        return S3Config(
            access_key=OFFLINE_CREDENTIALS,
            secret_key=OFFLINE_CREDENTIALS,
            endpoint_url=OFFLINE_ENDPOINT_URL,
        )

    # Without explicit keys boto3 falls back to its credential chain (task role on Fargate).
    return S3Config(
        access_key=os.getenv("S3_ACCESS_KEY"),
        secret_key=os.getenv("S3_SECRET_KEY"),
        endpoint_url=os.getenv("S3_ENDPOINT_URL"),
        region=os.getenv("S3_REGION", "us-east-1"),
    )


def create_boto3_client(cfg: S3Config | None = None) -> BaseClient:
    cfg = cfg or load_s3_config()
    s3_options = {"addressing_style": "path"} if cfg.endpoint_url else {}
    config = Config(
        signature_version="s3v4",
        s3=s3_options,
        retries={"max_attempts": 3, "mode": "standard"},
    )
    return boto3.client(
        "s3",
        aws_access_key_id=cfg.access_key,
        aws_secret_access_key=cfg.secret_key,
        endpoint_url=cfg.endpoint_url,
        region_name=cfg.region,
        config=config,
    )
