import asyncio
import logging

import pytest

from conftest import battle_payload
from core.domain.models import RandomMatchup
from core.errors import GenerationError
from core.interfaces.media import DICE_CUE
from core.services.battle_session import (
    BATTLE_ERROR_MESSAGE,
    RANDOMIZE_ERROR_MESSAGE,
    BattleSession,
    SessionStatus,
)


class RecordingAudio:
    def __init__(self):
        self.cues = []

    def play(self, cue):
        self.cues.append(cue)


class CountingService:
    """Wraps a real service and counts invocations."""

    def __init__(self, inner):
        self.inner = inner
        self.battles = 0
        self.matchups = 0

    async def predict_battle_outcome(self, animal1, animal2):
        self.battles += 1
        return await self.inner.predict_battle_outcome(animal1, animal2)

    async def get_random_matchup(self):
        self.matchups += 1
        return await self.inner.get_random_matchup()


@pytest.fixture
def session_for(make_service, resolver):
    def _build(*responses, audio=None):
        service, generator = make_service(*responses)
        counting = CountingService(service)
        session = BattleSession(counting, image_resolver=resolver, audio=audio)
        return session, counting, generator

    return _build


@pytest.mark.asyncio
@pytest.mark.parametrize(("animal1", "animal2"), [("", "Tiger"), ("Lion", ""), ("   ", "Tiger")])
async def test_empty_input_blocks_submission(session_for, animal1, animal2):
    session, counting, _ = session_for(battle_payload())
    session.set_inputs(animal1, animal2)

    submitted = await session.submit()

    assert submitted is False
    assert counting.battles == 0
    assert session.state.status is SessionStatus.IDLE


@pytest.mark.asyncio
async def test_lion_vs_tiger_highlights_exactly_one_dominant_slot(session_for):
    session, _, _ = session_for(battle_payload(winner="Lion", loser="Tiger", probability=62))
    session.set_inputs("Lion", "Tiger")

    assert await session.submit() is True

    assert session.state.status is SessionStatus.SUCCESS
    assert session.state.result.winner == "Lion"
    assert session.dominant_slots() == ["animal1"]
    assert session.is_dominant("animal2") is False


@pytest.mark.asyncio
async def test_consecutive_submissions_replace_the_result(session_for):
    second = battle_payload(winner="Tiger", loser="Lion", probability=55)
    second["stats"] = {key: 40 for key in second["stats"]}
    session, counting, _ = session_for(battle_payload(), second)
    session.set_inputs("Lion", "Tiger")

    await session.submit()
    first_result = session.state.result
    await session.submit()

    assert counting.battles == 2
    assert session.state.result is not first_result
    assert session.state.result.winner == "Tiger"
    assert session.state.result.stats.values() == [40] * 10
    assert session.dominant_slots() == ["animal2"]


@pytest.mark.asyncio
async def test_network_failure_surfaces_one_error_and_keeps_inputs(session_for, caplog):
    session, counting, _ = session_for(ConnectionError("network unreachable"))
    session.set_inputs("Lion", "Tiger")

    with caplog.at_level(logging.ERROR, logger="core.services.battle_session"):
        await session.submit()

    assert counting.battles == 1
    assert session.state.status is SessionStatus.FAILED
    assert session.state.error == BATTLE_ERROR_MESSAGE
    assert session.state.result is None
    assert (session.state.animal1, session.state.animal2) == ("Lion", "Tiger")
    assert len([r for r in caplog.records if r.name == "core.services.battle_session"]) == 1


@pytest.mark.asyncio
async def test_failure_after_success_clears_previous_result(session_for):
    session, _, _ = session_for(battle_payload(), battle_payload(probability=999))
    session.set_inputs("Lion", "Tiger")

    await session.submit()
    await session.submit()

    assert session.state.status is SessionStatus.FAILED
    assert session.state.result is None
    assert session.dominant_slots() == []


@pytest.mark.asyncio
async def test_same_contender_twice_fails_without_calling_service(session_for):
    session, counting, _ = session_for(battle_payload())
    session.set_inputs("Lion", "lion")

    await session.submit()

    assert counting.battles == 0
    assert session.state.status is SessionStatus.FAILED


@pytest.mark.asyncio
async def test_actions_are_blocked_while_a_request_is_pending(resolver):
    release = asyncio.Event()

    class GatedService:
        calls = 0

        async def predict_battle_outcome(self, animal1, animal2):
            GatedService.calls += 1
            await release.wait()
            raise GenerationError("boom", reason="transport")

        async def get_random_matchup(self):
            raise AssertionError("randomize must be blocked")

    session = BattleSession(GatedService(), image_resolver=resolver)
    session.set_inputs("Lion", "Tiger")

    pending = asyncio.create_task(session.submit())
    await asyncio.sleep(0)

    assert session.state.status is SessionStatus.SUBMITTING
    assert await session.submit() is False
    assert await session.randomize() is False
    assert session.set_inputs("Bear", "Wolf") is False

    release.set()
    await pending
    assert GatedService.calls == 1
    assert session.state.status is SessionStatus.FAILED


@pytest.mark.asyncio
async def test_randomize_overwrites_inputs_and_returns_to_idle(session_for):
    audio = RecordingAudio()
    session, counting, _ = session_for({"animal1": "Axolotl", "animal2": "Secretary Bird"}, audio=audio)
    session.set_inputs("Lion", "Tiger")

    await session.randomize()

    assert counting.matchups == 1
    assert counting.battles == 0
    assert session.state.status is SessionStatus.IDLE
    assert (session.state.animal1, session.state.animal2) == ("Axolotl", "Secretary Bird")
    assert session.state.result is None
    assert audio.cues == [DICE_CUE]


@pytest.mark.asyncio
async def test_randomize_keeps_last_result_for_display(session_for, resolver):
    session, _, _ = session_for(battle_payload(), {"animal1": "Axolotl", "animal2": "Wolverine"})
    session.set_inputs("Lion", "Tiger")
    await session.submit()

    await session.randomize()

    assert session.state.result.winner == "Lion"
    assert session.dominant_slots() == ["animal1"]
    assert session.image_for("animal1") == resolver.resolve("Axolotl")


@pytest.mark.asyncio
async def test_randomize_failure_keeps_inputs(session_for):
    session, _, _ = session_for({"animal1": "Wolverine", "animal2": "Wolverine"})
    session.set_inputs("Lion", "Tiger")

    await session.randomize()

    assert session.state.status is SessionStatus.FAILED
    assert session.state.error == RANDOMIZE_ERROR_MESSAGE
    assert (session.state.animal1, session.state.animal2) == ("Lion", "Tiger")


@pytest.mark.asyncio
async def test_submit_after_failure_recovers(session_for):
    session, _, _ = session_for(ConnectionError("offline"), battle_payload())
    session.set_inputs("Lion", "Tiger")

    await session.submit()
    assert session.state.status is SessionStatus.FAILED
    await session.submit()

    assert session.state.status is SessionStatus.SUCCESS
    assert session.state.error is None


def test_random_matchup_model_rejects_duplicates():
    with pytest.raises(ValueError):
        RandomMatchup(animal1="Orca", animal2=" orca ")


@pytest.mark.asyncio
async def test_overlong_random_name_is_rejected_before_reaching_inputs(session_for):
    session, _, _ = session_for({"animal1": "A" * 201, "animal2": "Tiger"})
    session.set_inputs("Lion", "Tiger")

    await session.randomize()

    assert session.state.status is SessionStatus.FAILED
    assert session.state.error == RANDOMIZE_ERROR_MESSAGE
    assert (session.state.animal1, session.state.animal2) == ("Lion", "Tiger")
