import pytest

from src.functions.content_pipeline.core.contracts.content_record import LINEAGE_KEY, Voice, parse_timestamp
from src.functions.content_pipeline.core.contracts.errors import CapabilityUnavailableError, RecordStoreError
from src.functions.content_pipeline.core.db.event_log import EventLogger
from src.functions.content_pipeline.core.db.record_store import SupabaseRecordStore
from src.functions.content_pipeline.core.workers.script_worker import FAN_OUT_EVENT, ScriptWorker
from tests.content_pipeline.fakes import (
    FakeClock,
    FakeSupabaseClient,
    ScriptedGenerator,
    make_block,
    no_sleep,
)


@pytest.fixture
def client():
    return FakeSupabaseClient()


def _worker(client, generator, **kwargs):
    store = SupabaseRecordStore(client, clock=FakeClock())
    return ScriptWorker(store, EventLogger(client), generator, sleep=no_sleep, **kwargs)


def _by_voice(client):
    return {row["voice"]: row for row in client.rows()}


def test_shared_record_fans_out_into_three_voices(client):
    original = make_block(client)
    generator = ScriptedGenerator()

    result = _worker(client, generator).run_batch()

    assert result.processed_count == 3
    assert result.failed_count == 0
    rows = _by_voice(client)
    assert set(rows) == {"voice_1", "voice_2", "voice_3"}
    assert rows["voice_1"]["id"] == original["id"]
    for voice, row in rows.items():
        assert row["status"] == "script_generated"
        assert row["script"] == f"Good morning from {voice}."
        assert row["user_id"] is None
        assert row["retry_count"] == 0
        assert parse_timestamp(row["script_generated_at"]) > parse_timestamp(row["created_at"])
    for voice in ("voice_2", "voice_3"):
        assert rows[voice]["parameters"][LINEAGE_KEY] == original["id"]
        assert rows[voice]["content"] == original["content"]
        assert rows[voice]["date"] == original["date"]

    fan_out = client.events(FAN_OUT_EVENT)
    assert fan_out[-1]["metadata"]["fan_out_outcome"] == "complete"


def test_failed_voice_is_omitted_without_blocking_the_others(client):
    original = make_block(client)
    generator = ScriptedGenerator(failing=[Voice.VOICE_2])

    result = _worker(client, generator, max_attempts=3).run_batch()

    rows = _by_voice(client)
    assert set(rows) == {"voice_1", "voice_3"}
    assert rows["voice_1"]["id"] == original["id"]
    assert rows["voice_1"]["status"] == "script_generated"
    assert rows["voice_3"]["status"] == "script_generated"
    assert generator.calls.count(Voice.VOICE_2) == 3
    assert result.processed_count == 2
    assert result.failed_count == 1
    assert "voice_2" in result.errors[0]

    failures = client.events("script_generation_failed")
    assert failures[-1]["metadata"]["voice"] == "voice_2"
    assert failures[-1]["metadata"]["retry_count"] == 3
    assert client.events(FAN_OUT_EVENT)[-1]["metadata"]["fan_out_outcome"] == "partial"


def test_failed_primary_voice_marks_original_failed_but_keeps_siblings(client):
    original = make_block(client)
    generator = ScriptedGenerator(failing=[Voice.VOICE_1])

    result = _worker(client, generator).run_batch()

    row = client.row(original["id"])
    assert row["status"] == "script_failed"
    assert row["retry_count"] == 3
    assert "script_error" in row["parameters"]
    assert row["script"] is None
    siblings = [r for r in client.rows() if r["id"] != original["id"]]
    assert {r["voice"] for r in siblings} == {"voice_2", "voice_3"}
    assert result.processed_count == 2
    assert result.failed_count == 1


def test_owner_record_gets_single_script_in_owner_voice(client):
    original = make_block(client, user_id="user-42", content_type="user_reminders", voice="voice_2")
    generator = ScriptedGenerator()

    result = _worker(client, generator).run_batch()

    assert len(client.rows()) == 1
    row = client.row(original["id"])
    assert row["status"] == "script_generated"
    assert row["voice"] == "voice_2"
    assert row["script"] == "Good morning from voice_2."
    assert generator.calls == [Voice.VOICE_2]
    assert result.processed_count == 1
    assert not client.events(FAN_OUT_EVENT)


def test_owner_record_without_voice_uses_default(client):
    original = make_block(client, user_id="user-42", content_type="user_reminders", voice=None)

    _worker(client, ScriptedGenerator()).run_batch()

    assert client.row(original["id"])["voice"] == "voice_1"


def test_owner_record_failure_is_bounded_by_max_attempts(client):
    original = make_block(client, user_id="user-42", content_type="user_reminders")
    generator = ScriptedGenerator(failing=list(Voice))

    result = _worker(client, generator, max_attempts=2).run_batch()

    assert len(generator.calls) == 2
    row = client.row(original["id"])
    assert row["status"] == "script_failed"
    assert row["retry_count"] == 2
    assert result.failed_count == 1


def test_missing_capability_fails_without_retrying(client):
    original = make_block(client, user_id="user-42", content_type="user_reminders")
    generator = ScriptedGenerator(
        failing=list(Voice),
        error=CapabilityUnavailableError("OpenAI API key not configured"),
    )

    _worker(client, generator, max_attempts=3).run_batch()

    assert len(generator.calls) == 1
    row = client.row(original["id"])
    assert row["status"] == "script_failed"
    assert row["retry_count"] == 1


def test_concurrent_worker_losing_claim_skips_record(client):
    make_block(client)
    first = _worker(client, ScriptedGenerator())
    second = _worker(client, ScriptedGenerator())
    snapshot_fetch = first.store.fetch_eligible

    def fetch_then_let_second_worker_run(status, limit):
        records = snapshot_fetch(status, limit)
        second.run_batch()
        return records

    first.store.fetch_eligible = fetch_then_let_second_worker_run
    result = first.run_batch()

    assert result.skipped_count == 1
    assert result.processed_count == 0
    assert result.failed_count == 0
    assert first.generator.calls == []
    assert len(client.rows()) == 3


def test_invalid_record_fails_validation_without_generation(client):
    original = make_block(client, content="   ", retry_count=1)
    generator = ScriptedGenerator()

    result = _worker(client, generator).run_batch()

    row = client.row(original["id"])
    assert row["status"] == "script_failed"
    assert row["retry_count"] == 1
    assert "Missing or empty content" in row["parameters"]["script_error"]
    assert generator.calls == []
    assert result.failed_count == 1


def test_batch_read_failure_propagates(client):
    client.failing_tables.add("content_blocks")

    with pytest.raises(RecordStoreError):
        _worker(client, ScriptedGenerator()).run_batch()


def test_event_sink_failure_does_not_change_outcome(client):
    original = make_block(client, user_id="user-42", content_type="user_reminders")
    client.failing_tables.add("logs")

    result = _worker(client, ScriptedGenerator()).run_batch()

    assert result.processed_count == 1
    assert client.row(original["id"])["status"] == "script_generated"


def test_limit_bounds_batch(client):
    for _ in range(3):
        make_block(client, user_id="user-42", content_type="user_reminders")

    result = _worker(client, ScriptedGenerator(), batch_size=100).run_batch(limit=2)

    assert result.processed_count == 2
    assert sorted(row["status"] for row in client.rows()) == ["content_ready", "script_generated", "script_generated"]


def test_type_without_narration_prompt_fails_validation(client):
    original = make_block(client, user_id="user-42", content_type="user_intro")

    _worker(client, ScriptedGenerator()).run_batch()

    row = client.row(original["id"])
    assert row["status"] == "script_failed"
    assert "Unsupported content type: user_intro" in row["parameters"]["script_error"]


def test_owner_record_with_empty_content_fails_validation(client):
    original = make_block(client, user_id="user-42", content_type="user_reminders", content="")
    generator = ScriptedGenerator()

    result = _worker(client, generator).run_batch()

    assert len(client.rows()) == 1
    row = client.row(original["id"])
    assert row["status"] == "script_failed"
    assert "Missing or empty content" in row["parameters"]["script_error"]
    assert generator.calls == []
    assert result.failed_count == 1


class _ExpiringGenerator(ScriptedGenerator):
    """Housekeeping expires the record while its script is being written."""

    def __init__(self, client, record_id):
        super().__init__()
        self.client = client
        self.record_id = record_id

    def generate(self, messages):
        self.client.row(self.record_id)["status"] = "expired"
        return super().generate(messages)


def test_record_expired_during_generation_is_failed_and_logged(client):
    original = make_block(client, user_id="user-42", content_type="user_reminders")

    result = _worker(client, _ExpiringGenerator(client, original["id"])).run_batch()

    assert result.processed_count == 0
    assert result.failed_count == 1
    assert client.row(original["id"])["status"] == "expired"
    failures = client.events("script_generation_failed")
    assert len(failures) == 1
    assert failures[0]["content_block_id"] == original["id"]
    assert failures[0]["metadata"]["category"] == "store"
    assert not client.events("script_generation_success")


def test_sibling_insert_failure_is_logged(client):
    original = make_block(client)
    worker = _worker(client, ScriptedGenerator())

    def refuse_insert(row):
        raise RecordStoreError("insert rejected")

    worker.store.insert = refuse_insert
    result = worker.run_batch()

    assert client.row(original["id"])["status"] == "script_generated"
    assert len(client.rows()) == 1
    assert result.processed_count == 1
    assert result.failed_count == 2
    failures = client.events("script_generation_failed")
    assert {event["metadata"]["voice"] for event in failures} == {"voice_2", "voice_3"}
    assert all(event["metadata"]["category"] == "store" for event in failures)
    assert all(event["metadata"]["original_content_block_id"] == original["id"] for event in failures)


def test_unexpected_error_after_claim_moves_record_to_failure_status(client):
    original = make_block(client, user_id="user-42", content_type="user_reminders")
    worker = _worker(client, ScriptedGenerator())

    def broken_variant(record, voice):
        raise KeyError("voice_settings")

    worker.generate_variant = broken_variant
    result = worker.run_batch()

    row = client.row(original["id"])
    assert row["status"] == "script_failed"
    assert "Unexpected error" in row["parameters"]["script_error"]
    assert result.failed_count == 1
    failures = client.events("script_generation_failed")
    assert failures[-1]["metadata"]["category"] == "unexpected"
