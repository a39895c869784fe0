import pytest

from src.functions.content_pipeline.core.contracts.content_record import Voice, parse_timestamp
from src.functions.content_pipeline.core.contracts.errors import RecordStoreError
from src.functions.content_pipeline.core.db.audio_storage import AudioStorage
from src.functions.content_pipeline.core.db.event_log import EventLogger
from src.functions.content_pipeline.core.db.record_store import SupabaseRecordStore
from src.functions.content_pipeline.core.workers.audio_worker import AudioWorker, estimate_duration
from tests.content_pipeline.fakes import (
    BASE_TIME,
    FakeClock,
    FakeSupabaseClient,
    FakeSynthesizer,
    make_block,
    no_sleep,
)


@pytest.fixture
def client():
    return FakeSupabaseClient()


def _worker(client, synthesizer, **kwargs):
    store = SupabaseRecordStore(client, clock=FakeClock())
    storage = AudioStorage(client, clock=lambda: BASE_TIME)
    return AudioWorker(store, EventLogger(client), synthesizer, storage, sleep=no_sleep, **kwargs)


def _scripted(client, **overrides):
    values = {
        "status": "script_generated",
        "voice": "voice_2",
        "script": "It's Thursday. Move!",
        "script_generated_at": "2025-01-15T06:00:00.500Z",
    }
    values.update(overrides)
    return make_block(client, **values)


def test_script_is_synthesized_uploaded_and_marked_ready(client):
    original = _scripted(client)
    synthesizer = FakeSynthesizer()

    result = _worker(client, synthesizer).run_batch()

    row = client.row(original["id"])
    assert row["status"] == "ready"
    assert row["audio_url"] == (
        f"https://storage.example.test/audio-files/wake_up/{original['id']}_voice_2_2025-01-15T06-00-00-000000Z.aac"
    )
    assert row["duration_seconds"] == estimate_duration("It's Thursday. Move!") == 2
    assert row["parameters"]["audio_generated"] is True
    assert row["parameters"]["voice_used"] == "voice_2"
    assert parse_timestamp(row["audio_generated_at"]) > parse_timestamp(row["script_generated_at"])
    assert synthesizer.calls == [("It's Thursday. Move!", Voice.VOICE_2)]
    assert result.processed_count == 1


def test_transient_synthesis_failure_is_retried(client):
    original = _scripted(client)
    synthesizer = FakeSynthesizer(fail_times=2)

    result = _worker(client, synthesizer, max_attempts=3).run_batch()

    assert len(synthesizer.calls) == 3
    assert client.row(original["id"])["status"] == "ready"
    assert result.failed_count == 0


def test_exhausted_synthesis_marks_audio_failed(client):
    original = _scripted(client)
    synthesizer = FakeSynthesizer(fail_times=10)

    result = _worker(client, synthesizer, max_attempts=3).run_batch()

    row = client.row(original["id"])
    assert row["status"] == "audio_failed"
    assert row["retry_count"] == 3
    assert row["audio_url"] is None
    assert row["parameters"]["audio_generated"] is False
    assert "ElevenLabs API error" in row["parameters"]["audio_error"]
    assert result.failed_count == 1
    assert client.events("audio_generation_failed")


def test_upload_failure_counts_as_capability_failure(client):
    original = _scripted(client)
    client.fail_uploads = 10

    _worker(client, FakeSynthesizer(), max_attempts=2).run_batch()

    row = client.row(original["id"])
    assert row["status"] == "audio_failed"
    assert row["retry_count"] == 2


def test_record_without_script_fails_validation(client):
    original = _scripted(client, script="")
    synthesizer = FakeSynthesizer()

    _worker(client, synthesizer).run_batch()

    assert client.row(original["id"])["status"] == "audio_failed"
    assert synthesizer.calls == []


def test_record_with_unknown_voice_fails_validation(client):
    original = _scripted(client, voice="voice_9")

    _worker(client, FakeSynthesizer()).run_batch()

    row = client.row(original["id"])
    assert row["status"] == "audio_failed"
    assert "Invalid voice: voice_9" in row["parameters"]["audio_error"]


def test_batch_size_defaults_to_five(client):
    for _ in range(7):
        _scripted(client)

    result = _worker(client, FakeSynthesizer()).run_batch()

    assert result.processed_count == 5


def test_synthesizer_is_closed_after_each_batch(client):
    _scripted(client)
    synthesizer = FakeSynthesizer()

    _worker(client, synthesizer).run_batch()

    assert synthesizer.closed is True


def test_synthesizer_is_closed_when_batch_read_fails(client):
    client.failing_tables.add("content_blocks")
    synthesizer = FakeSynthesizer()

    with pytest.raises(RecordStoreError):
        _worker(client, synthesizer).run_batch()

    assert synthesizer.closed is True
