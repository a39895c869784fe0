import pytest

from src.functions.content_pipeline.core.contracts.status import (
    AUDIO_STAGE,
    CONTENT_STAGE,
    FAILURE_STATUS_FOR_IN_PROGRESS,
    NON_TERMINAL_STATUSES,
    SCRIPT_STAGE,
    TRANSITIONS,
    ContentStatus,
    InvalidTransitionError,
    StageDefinition,
    ensure_transition,
    is_valid_transition,
)


def test_every_status_has_transition_entry():
    assert set(TRANSITIONS) == set(ContentStatus)


@pytest.mark.parametrize(
    "status",
    [
        ContentStatus.READY,
        ContentStatus.CONTENT_FAILED,
        ContentStatus.SCRIPT_FAILED,
        ContentStatus.AUDIO_FAILED,
        ContentStatus.EXPIRED,
    ],
)
def test_terminal_statuses_have_no_exits(status):
    assert status.is_terminal
    assert status not in NON_TERMINAL_STATUSES
    for target in ContentStatus:
        assert not is_valid_transition(status, target)


def test_every_non_terminal_status_can_expire():
    for status in NON_TERMINAL_STATUSES:
        assert is_valid_transition(status, ContentStatus.EXPIRED)


def test_stages_chain_output_into_next_input():
    assert CONTENT_STAGE.output_status == SCRIPT_STAGE.input_status
    assert SCRIPT_STAGE.output_status == AUDIO_STAGE.input_status
    assert AUDIO_STAGE.output_status == ContentStatus.READY


def test_in_progress_statuses_map_to_their_failure_status():
    assert FAILURE_STATUS_FOR_IN_PROGRESS == {
        ContentStatus.CONTENT_GENERATING: ContentStatus.CONTENT_FAILED,
        ContentStatus.SCRIPT_GENERATING: ContentStatus.SCRIPT_FAILED,
        ContentStatus.AUDIO_GENERATING: ContentStatus.AUDIO_FAILED,
    }
    assert all(status.is_in_progress for status in FAILURE_STATUS_FOR_IN_PROGRESS)


def test_skipping_a_stage_is_rejected():
    with pytest.raises(InvalidTransitionError) as excinfo:
        ensure_transition(ContentStatus.CONTENT_READY, ContentStatus.SCRIPT_GENERATED)

    assert excinfo.value.current == ContentStatus.CONTENT_READY
    assert "content_ready -> script_generated" in str(excinfo.value)


def test_stage_definition_rejects_edges_outside_table():
    with pytest.raises(InvalidTransitionError):
        StageDefinition(
            name="broken",
            input_status=ContentStatus.PENDING,
            in_progress_status=ContentStatus.SCRIPT_GENERATING,
            output_status=ContentStatus.SCRIPT_GENERATED,
            failure_status=ContentStatus.SCRIPT_FAILED,
            event_prefix="broken",
        )
