"""Content block status values and the pipeline transition table."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet


class ContentStatus(str, Enum):
    """Position of a content block in the generation pipeline."""

    PENDING = "pending"
    CONTENT_GENERATING = "content_generating"
    CONTENT_READY = "content_ready"
    CONTENT_FAILED = "content_failed"
    SCRIPT_GENERATING = "script_generating"
    SCRIPT_GENERATED = "script_generated"
    SCRIPT_FAILED = "script_failed"
    AUDIO_GENERATING = "audio_generating"
    READY = "ready"
    AUDIO_FAILED = "audio_failed"
    EXPIRED = "expired"

    @property
    def is_terminal(self) -> bool:
        return not TRANSITIONS[self]

    @property
    def is_in_progress(self) -> bool:
        return self in IN_PROGRESS_STATUSES


class InvalidTransitionError(ValueError):
    """Raised when a write would move a record along an edge not in the table."""

    def __init__(self, current: ContentStatus, target: ContentStatus) -> None:
        super().__init__(f"Invalid status transition: {current.value} -> {target.value}")
        self.current = current
        self.target = target


_S = ContentStatus

TRANSITIONS: Dict[ContentStatus, FrozenSet[ContentStatus]] = {
    _S.PENDING: frozenset({_S.CONTENT_GENERATING, _S.EXPIRED}),
    _S.CONTENT_GENERATING: frozenset({_S.CONTENT_READY, _S.CONTENT_FAILED, _S.EXPIRED}),
    _S.CONTENT_READY: frozenset({_S.SCRIPT_GENERATING, _S.EXPIRED}),
    _S.SCRIPT_GENERATING: frozenset({_S.SCRIPT_GENERATED, _S.SCRIPT_FAILED, _S.EXPIRED}),
    _S.SCRIPT_GENERATED: frozenset({_S.AUDIO_GENERATING, _S.EXPIRED}),
    _S.AUDIO_GENERATING: frozenset({_S.READY, _S.AUDIO_FAILED, _S.EXPIRED}),
    _S.READY: frozenset(),
    _S.CONTENT_FAILED: frozenset(),
    _S.SCRIPT_FAILED: frozenset(),
    _S.AUDIO_FAILED: frozenset(),
    _S.EXPIRED: frozenset(),
}

IN_PROGRESS_STATUSES: FrozenSet[ContentStatus] = frozenset(
    {_S.CONTENT_GENERATING, _S.SCRIPT_GENERATING, _S.AUDIO_GENERATING}
)

FAILURE_STATUSES: FrozenSet[ContentStatus] = frozenset(
    {_S.CONTENT_FAILED, _S.SCRIPT_FAILED, _S.AUDIO_FAILED}
)

NON_TERMINAL_STATUSES: FrozenSet[ContentStatus] = frozenset(
    status for status, targets in TRANSITIONS.items() if targets
)


def _verify_transition_table() -> None:
    missing = set(ContentStatus) - set(TRANSITIONS)
    if missing:
        names = ", ".join(sorted(status.value for status in missing))
        raise RuntimeError(f"Transition table is missing statuses: {names}")
    for source, targets in TRANSITIONS.items():
        if source in targets:
            raise RuntimeError(f"Status {source.value} may not transition to itself")


_verify_transition_table()


def is_valid_transition(current: ContentStatus, target: ContentStatus) -> bool:
    return target in TRANSITIONS[current]


def ensure_transition(current: ContentStatus, target: ContentStatus) -> None:
    """Raise InvalidTransitionError unless *current* -> *target* is an allowed edge."""
    if not is_valid_transition(current, target):
        raise InvalidTransitionError(current, target)


@dataclass(frozen=True)
class StageDefinition:
    """Input/output status pair and bookkeeping for one pipeline stage."""

    name: str
    input_status: ContentStatus
    in_progress_status: ContentStatus
    output_status: ContentStatus
    failure_status: ContentStatus
    event_prefix: str

    def __post_init__(self) -> None:
        ensure_transition(self.input_status, self.in_progress_status)
        ensure_transition(self.in_progress_status, self.output_status)
        ensure_transition(self.in_progress_status, self.failure_status)


CONTENT_STAGE = StageDefinition(
    name="content",
    input_status=_S.PENDING,
    in_progress_status=_S.CONTENT_GENERATING,
    output_status=_S.CONTENT_READY,
    failure_status=_S.CONTENT_FAILED,
    event_prefix="content_generation",
)

SCRIPT_STAGE = StageDefinition(
    name="script",
    input_status=_S.CONTENT_READY,
    in_progress_status=_S.SCRIPT_GENERATING,
    output_status=_S.SCRIPT_GENERATED,
    failure_status=_S.SCRIPT_FAILED,
    event_prefix="script_generation",
)

AUDIO_STAGE = StageDefinition(
    name="audio",
    input_status=_S.SCRIPT_GENERATED,
    in_progress_status=_S.AUDIO_GENERATING,
    output_status=_S.READY,
    failure_status=_S.AUDIO_FAILED,
    event_prefix="audio_generation",
)

STAGES = (CONTENT_STAGE, SCRIPT_STAGE, AUDIO_STAGE)

FAILURE_STATUS_FOR_IN_PROGRESS: Dict[ContentStatus, ContentStatus] = {
    stage.in_progress_status: stage.failure_status for stage in STAGES
}
