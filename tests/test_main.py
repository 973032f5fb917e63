import pytest

from transmission_splitter import configs
from transmission_splitter.main import main
from transmission_splitter.s3io import source_key

from conftest import FakeS3Client


@pytest.fixture
def env(tmp_path, monkeypatch, fake_demucs, restore_logging):
    monkeypatch.setattr(configs, "_SETTINGS", None)
    monkeypatch.setenv("ID", "abc123")
    monkeypatch.setenv("BUCKET_NAME", "test-bucket")
    monkeypatch.setenv("SPLITTER_TMP_ROOT", str(tmp_path / "tmp"))
    monkeypatch.setenv("DEMUCS_OUTPUT_DIR", str(tmp_path / "split"))
    monkeypatch.delenv("SEPARATOR_EXECUTABLE", raising=False)
    monkeypatch.delenv("SEPARATOR_TIMEOUT", raising=False)
    monkeypatch.delenv("SPLITTER_MAX_WORKERS", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.delenv("TOOL_LOG_LEVEL", raising=False)
    return monkeypatch


def _use_client(monkeypatch, client):
    monkeypatch.setattr(configs, "create_boto3_client", lambda cfg=None: client)


def test_main_success(env, tmp_path, capsys):
    client = FakeS3Client(objects={source_key("abc123"): b"source audio"})
    _use_client(env, client)

    assert main() == 0

    out = capsys.readouterr().out
    assert "OK - Uploaded TransmissionChannels for abc123" in out
    assert set(client.objects) == {
        "transmissions/abc123/sourceAudio",
        "transmissions/abc123/channels/vocals.wav",
        "transmissions/abc123/channels/drums.wav",
    }
    assert not (tmp_path / "tmp" / "abc123").exists()


def test_main_failure_exits_non_zero(env, tmp_path, capsys):
    _use_client(env, FakeS3Client())

    assert main() == 1

    out = capsys.readouterr().out
    assert "OK - Uploaded" not in out
    assert "NotFoundError" in out
    assert not (tmp_path / "tmp" / "abc123").exists()


def test_main_without_id(env, capsys):
    env.delenv("ID")
    assert main() == 1
    assert "ID must be set" in capsys.readouterr().out
