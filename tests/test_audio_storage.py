import os
import time
from unittest.mock import patch

import pytest

from call_assistant.errors import SynthesisError
from call_assistant.services.audio_storage import AudioFileStore


@pytest.fixture
def store(tmp_path):
    return AudioFileStore(tmp_path / "audio", "https://example.ngrok.io/")


def test_creates_directory(tmp_path):
    AudioFileStore(tmp_path / "nested" / "audio", "https://example.ngrok.io")
    assert (tmp_path / "nested" / "audio").is_dir()


@pytest.mark.asyncio
async def test_save_writes_file_and_returns_url(store):
    url = await store.save("CA123", 2, b"ID3audio")

    assert url.startswith("https://example.ngrok.io/audio/CA123_2_")
    assert url.endswith(".mp3")
    filename = url.rsplit("/", 1)[1]
    assert (store.audio_dir / filename).read_bytes() == b"ID3audio"


@pytest.mark.asyncio
async def test_save_sanitizes_call_id(store):
    url = await store.save("../CA 1", 0, b"audio")

    filename = url.rsplit("/", 1)[1]
    assert filename.startswith("___CA_1_0_")
    assert (store.audio_dir / filename).exists()


@pytest.mark.asyncio
async def test_save_failure_raises_synthesis_error(store):
    with patch("pathlib.Path.write_bytes", side_effect=OSError("disk full")):
        with pytest.raises(SynthesisError):
            await store.save("CA123", 1, b"audio")


def test_cleanup_old_files(store):
    old_file = store.audio_dir / "old.mp3"
    new_file = store.audio_dir / "new.mp3"
    old_file.write_bytes(b"old")
    new_file.write_bytes(b"new")
    three_hours_ago = time.time() - 3 * 60 * 60
    os.utime(old_file, (three_hours_ago, three_hours_ago))

    deleted = store.cleanup_old_files(max_age_hours=2)

    assert deleted == 1
    assert not old_file.exists()
    assert new_file.exists()


def test_cleanup_with_no_files(store):
    assert store.cleanup_old_files() == 0
