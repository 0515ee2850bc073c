import enum
import random
from typing import List, NamedTuple, Optional, Sequence

from .constants import (
    MIN_ROULETTE_PARTICIPANTS,
    ROULETTE_BASE_STEPS,
    ROULETTE_DELAY_STEP_MS,
    ROULETTE_START_DELAY_MS,
)


class SelectionError(Exception):
    pass


class SelectionInProgress(SelectionError):
    pass


class SelectionSettled(SelectionError):
    pass


class SelectionState(enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    SETTLED = "settled"


class Frame(NamedTuple):
    index: int
    delay_ms: int


def build_frames(participant_count: int, winner_index: int) -> List[Frame]:
    """Decelerating highlight sequence whose last frame is the winner.

    Runs ``20 + winner_index`` steps, moving one participant per step.
    """
    steps = ROULETTE_BASE_STEPS + winner_index
    start = (-ROULETTE_BASE_STEPS) % participant_count
    frames = []
    for step in range(1, steps + 1):
        frames.append(
            Frame(
                index=(start + step) % participant_count,
                delay_ms=ROULETTE_START_DELAY_MS + ROULETTE_DELAY_STEP_MS * (step - 1),
            )
        )
    return frames


class TreasurerSelection:
    def __init__(self, participants: Sequence[str], treasurer: Optional[str] = None, rng=None):
        self.participants = list(participants)
        self.rng = rng or random.SystemRandom()
        self.winner_index: Optional[int] = None
        self.frames: List[Frame] = []
        self.winner: Optional[str] = treasurer
        self.state = SelectionState.SETTLED if treasurer else SelectionState.IDLE
        self._reported = bool(treasurer)

    @property
    def can_start(self) -> bool:
        return (
            self.state is SelectionState.IDLE
            and len(self.participants) >= MIN_ROULETTE_PARTICIPANTS
        )

    def start(self) -> Optional[List[Frame]]:
        if self.state is SelectionState.RUNNING:
            raise SelectionInProgress("selection already running")
        if self.state is SelectionState.SETTLED:
            raise SelectionSettled(f"treasurer already chosen: {self.winner}")
        if len(self.participants) < MIN_ROULETTE_PARTICIPANTS:
            return None

        self.winner_index = self.rng.randrange(len(self.participants))
        self.frames = build_frames(len(self.participants), self.winner_index)
        self.state = SelectionState.RUNNING
        return self.frames

    def settle(self) -> str:
        if self.state is SelectionState.IDLE:
            raise SelectionError("selection has not started")
        if self._reported:
            raise SelectionSettled(f"treasurer already chosen: {self.winner}")
        self.winner = self.participants[self.winner_index]
        self.state = SelectionState.SETTLED
        self._reported = True
        return self.winner

    def run(self) -> Optional[str]:
        if self.start() is None:
            return None
        return self.settle()
