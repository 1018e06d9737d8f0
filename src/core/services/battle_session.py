"""Presentation state machine for one interactive face-off session.

The session owns the two free-text inputs, the loading/error status and the
current result slot. It performs no I/O of its own: the outcome service, the
audio cue and the image resolver are injected, so views (CLI, tests) only read
state and call `submit`/`randomize`.

Transitions::

    IDLE/SUCCESS/FAILED --submit--> SUBMITTING --> SUCCESS | FAILED
    IDLE/SUCCESS/FAILED --randomize--> RANDOMIZING --> IDLE | FAILED

Both actions are no-ops while a request is pending.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from core.domain.models import BattleInput, BattleResult, RandomMatchup, Slot
from core.errors import GenerationError, ValidationError
from core.interfaces.media import DICE_CUE, AudioPlayer, ImageUrlResolver

logger = logging.getLogger(__name__)

BATTLE_ERROR_MESSAGE = "SIMULATION ERROR: Neural link severed. Reconnect and try again."
RANDOMIZE_ERROR_MESSAGE = "RANDOMIZER FAILED: Unit archives unavailable."


class SessionStatus(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    RANDOMIZING = "randomizing"
    SUCCESS = "success"
    FAILED = "failed"


class OutcomeProvider(Protocol):
    async def predict_battle_outcome(self, animal1: str, animal2: str) -> BattleResult:
        ...

    async def get_random_matchup(self) -> RandomMatchup:
        ...


@dataclass
class SessionState:
    animal1: str = ""
    animal2: str = ""
    status: SessionStatus = SessionStatus.IDLE
    result: BattleResult | None = None
    error: str | None = None
    # Input pair the current result was produced for.
    result_input: BattleInput | None = field(default=None, repr=False)


class BattleSession:
    """Drives the idle/loading/success/error flow around an `OutcomeProvider`."""

    def __init__(
        self,
        service: OutcomeProvider,
        *,
        image_resolver: ImageUrlResolver,
        audio: AudioPlayer | None = None,
    ) -> None:
        self._service = service
        self._image_resolver = image_resolver
        self._audio = audio
        self.state = SessionState()

    @property
    def busy(self) -> bool:
        return self.state.status in (SessionStatus.SUBMITTING, SessionStatus.RANDOMIZING)

    @property
    def can_submit(self) -> bool:
        return not self.busy and bool(self.state.animal1.strip()) and bool(self.state.animal2.strip())

    def set_inputs(self, animal1: str, animal2: str) -> bool:
        if self.busy:
            return False
        self.state.animal1 = animal1
        self.state.animal2 = animal2
        return True

    async def submit(self) -> bool:
        """Run one battle for the current inputs.

        Returns False when the submission was blocked (busy or empty input),
        in which case the service is never invoked.
        """

        if not self.can_submit:
            return False

        self.state.error = None
        self.state.result = None
        self.state.result_input = None
        try:
            battle_input = BattleInput.create(self.state.animal1, self.state.animal2)
        except ValidationError as exc:
            self.state.status = SessionStatus.FAILED
            self.state.error = str(exc)
            return True

        self.state.status = SessionStatus.SUBMITTING
        try:
            outcome = await self._service.predict_battle_outcome(battle_input.animal1, battle_input.animal2)
        except GenerationError:
            logger.exception("battle prediction failed for %r vs %r", battle_input.animal1, battle_input.animal2)
            self.state.status = SessionStatus.FAILED
            self.state.error = BATTLE_ERROR_MESSAGE
            return True

        self.state.result = outcome
        self.state.result_input = battle_input
        self.state.status = SessionStatus.SUCCESS
        return True

    async def randomize(self) -> bool:
        """Replace both inputs with a model-suggested matchup."""

        if self.busy:
            return False

        if self._audio is not None:
            self._audio.play(DICE_CUE)
        self.state.status = SessionStatus.RANDOMIZING
        self.state.error = None
        try:
            matchup = await self._service.get_random_matchup()
        except GenerationError:
            logger.exception("random matchup failed")
            self.state.status = SessionStatus.FAILED
            self.state.error = RANDOMIZE_ERROR_MESSAGE
            return True

        self.state.animal1 = matchup.animal1
        self.state.animal2 = matchup.animal2
        self.state.status = SessionStatus.IDLE
        logger.debug("randomized matchup %r vs %r", matchup.animal1, matchup.animal2)
        return True

    def input_for(self, slot: Slot) -> str:
        return self.state.animal1 if slot == "animal1" else self.state.animal2

    def is_dominant(self, slot: Slot) -> bool:
        """True when the current winner is exactly the name submitted in `slot`."""

        result, submitted = self.state.result, self.state.result_input
        if result is None or submitted is None:
            return False
        return result.winner == submitted.name_for(slot)

    def dominant_slots(self) -> list[Slot]:
        return [slot for slot in ("animal1", "animal2") if self.is_dominant(slot)]

    def image_for(self, slot: Slot) -> str:
        return self._image_resolver.resolve(self.input_for(slot))
