"""A shared record driven through all three stages against one in-memory store."""

from src.functions.content_pipeline.core.contracts.content_record import parse_timestamp
from src.functions.content_pipeline.core.db.audio_storage import AudioStorage
from src.functions.content_pipeline.core.db.event_log import EventLogger
from src.functions.content_pipeline.core.db.record_store import SupabaseRecordStore
from src.functions.content_pipeline.core.workers.audio_worker import AudioWorker
from src.functions.content_pipeline.core.workers.content_worker import ContentWorker
from src.functions.content_pipeline.core.workers.script_worker import ScriptWorker
from tests.content_pipeline.fakes import (
    FakeClock,
    FakeSupabaseClient,
    FakeSynthesizer,
    ScriptedGenerator,
    make_block,
    no_sleep,
)


def test_shared_record_reaches_ready_in_every_voice():
    client = FakeSupabaseClient()
    clock = FakeClock()
    store = SupabaseRecordStore(client, clock=clock)
    events = EventLogger(client)
    original = make_block(client, status="pending", content=None, content_type="stretch")

    versions = [original["updated_at"]]
    ContentWorker(store, events, sleep=no_sleep).run_batch()
    versions.append(client.row(original["id"])["updated_at"])
    ScriptWorker(store, events, ScriptedGenerator(), sleep=no_sleep).run_batch()
    versions.append(client.row(original["id"])["updated_at"])
    result = AudioWorker(
        store, events, FakeSynthesizer(), AudioStorage(client, clock=clock), sleep=no_sleep
    ).run_batch()
    versions.append(client.row(original["id"])["updated_at"])

    assert result.processed_count == 3
    assert {row["status"] for row in client.rows()} == {"ready"}
    assert {row["voice"] for row in client.rows()} == {"voice_1", "voice_2", "voice_3"}
    parsed = [parse_timestamp(value) for value in versions]
    assert parsed == sorted(parsed)
    assert len(set(parsed)) == len(parsed)
    for row in client.rows():
        created = parse_timestamp(row["created_at"])
        assert parse_timestamp(row["script_generated_at"]) > created
        assert parse_timestamp(row["audio_generated_at"]) > parse_timestamp(row["script_generated_at"])
