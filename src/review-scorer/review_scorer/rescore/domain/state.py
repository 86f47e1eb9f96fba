"""RescoreState — states of the batch rescorer state machine."""

from enum import StrEnum


class RescoreState(StrEnum):
    """idle -> loading-batch -> scoring-batch -> validating-batch ->
    committing-batch -> loading-batch ... -> completed, or halted after validation.
    """

    IDLE = "idle"
    LOADING_BATCH = "loading-batch"
    SCORING_BATCH = "scoring-batch"
    VALIDATING_BATCH = "validating-batch"
    COMMITTING_BATCH = "committing-batch"
    HALTED = "halted"
    COMPLETED = "completed"


_TRANSITIONS: dict[RescoreState, frozenset[RescoreState]] = {
    RescoreState.IDLE: frozenset({RescoreState.LOADING_BATCH, RescoreState.COMPLETED}),
    RescoreState.LOADING_BATCH: frozenset(
        {RescoreState.SCORING_BATCH, RescoreState.COMPLETED}
    ),
    RescoreState.SCORING_BATCH: frozenset({RescoreState.VALIDATING_BATCH}),
    RescoreState.VALIDATING_BATCH: frozenset(
        {
            RescoreState.COMMITTING_BATCH,
            RescoreState.HALTED,
            # Dry runs validate and move straight on without committing.
            RescoreState.LOADING_BATCH,
        }
    ),
    RescoreState.COMMITTING_BATCH: frozenset({RescoreState.LOADING_BATCH}),
    RescoreState.HALTED: frozenset(),
    RescoreState.COMPLETED: frozenset(),
}


def can_transition(current: RescoreState, target: RescoreState) -> bool:
    return target in _TRANSITIONS[current]
