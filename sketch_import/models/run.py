# =============================================================================
# Import Run Model
# =============================================================================
# Tracks the state and outcome of a single shapefile import run.
# =============================================================================

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from .sketch import PendingRecord


__all__ = ["RunState", "CommitChoice", "FeatureError", "ImportRun"]


class RunState(str, Enum):
    """Lifecycle state of an import run."""

    NOT_STARTED = "not_started"
    VALIDATING_PROJECTION = "validating_projection"
    READING = "reading"
    ERRORS_FOUND = "errors_found"
    AWAITING_COMMIT_CHOICE = "awaiting_commit_choice"
    ABORTED = "aborted"
    CANCELLED = "cancelled"
    COMMITTED_SAMPLE = "committed_sample"
    COMMITTED_ALL = "committed_all"

    @property
    def is_terminal(self) -> bool:
        return self in (
            RunState.ABORTED,
            RunState.CANCELLED,
            RunState.COMMITTED_SAMPLE,
            RunState.COMMITTED_ALL,
        )


_TRANSITIONS: dict[RunState, frozenset[RunState]] = {
    RunState.NOT_STARTED: frozenset({RunState.VALIDATING_PROJECTION}),
    RunState.VALIDATING_PROJECTION: frozenset({RunState.ABORTED, RunState.READING}),
    RunState.READING: frozenset(
        {RunState.ERRORS_FOUND, RunState.AWAITING_COMMIT_CHOICE, RunState.ABORTED}
    ),
    RunState.ERRORS_FOUND: frozenset({RunState.ABORTED}),
    # ABORTED here means a commit write failed part way through
    RunState.AWAITING_COMMIT_CHOICE: frozenset(
        {
            RunState.CANCELLED,
            RunState.COMMITTED_SAMPLE,
            RunState.COMMITTED_ALL,
            RunState.ABORTED,
        }
    ),
}


class CommitChoice(str, Enum):
    """Mutually exclusive ways to finish a run that found no errors."""

    CANCEL = "cancel"
    SAMPLE = "sample"
    ALL = "all"


class FeatureError(BaseModel):
    """
    Error raised while mapping, converting or building one feature.

    Attributes:
        index: Zero-based position of the feature in the source
        error_type: Exception class name
        message: Exception message
    """

    index: int = Field(..., description="Feature position in the source")
    error_type: str = Field(..., description="Exception class name")
    message: str = Field(..., description="Exception message")

    @classmethod
    def from_exception(cls, index: int, exc: BaseException) -> "FeatureError":
        return cls(index=index, error_type=type(exc).__name__, message=str(exc))

    def __str__(self) -> str:
        return f"Feature {self.index}: {self.error_type}: {self.message}"


class ImportRun(BaseModel):
    """
    Outcome of an import run.

    Attributes:
        state: Current run state
        processed: Number of features read from the source
        accepted: Pending records built from accepted features, in source order
        rejected: Number of features declined by the mapping function
        errors: Per-feature errors collected during reading
        committed_ids: ObjectIds of sketches persisted by the commit step
        projection_verified: Result of the projection check (None until run)
    """

    state: RunState = Field(RunState.NOT_STARTED, description="Run state")
    processed: int = Field(0, description="Features read")
    accepted: list[PendingRecord] = Field(default_factory=list)
    rejected: int = Field(0, description="Features declined by the mapping")
    errors: list[FeatureError] = Field(default_factory=list)
    committed_ids: list[str] = Field(default_factory=list)
    projection_verified: Optional[bool] = Field(None)

    def advance(self, state: RunState) -> None:
        """
        Move the run to a new state.

        Raises:
            ValueError: If the transition is not allowed from the current state
        """
        allowed = _TRANSITIONS.get(self.state, frozenset())
        if state not in allowed:
            raise ValueError(
                f"Cannot move import run from {self.state.value} to {state.value}"
            )
        self.state = state
