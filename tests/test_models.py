import pytest
from pydantic import ValidationError as PydanticValidationError

from conftest import battle_payload
from core.domain.models import TRAITS, BattleInput, BattlePayload, BattleResult
from core.errors import ValidationError


def test_battle_input_is_trimmed():
    battle_input = BattleInput.create("  Lion ", "\tTiger")

    assert (battle_input.animal1, battle_input.animal2) == ("Lion", "Tiger")
    assert battle_input.name_for("animal2") == "Tiger"


@pytest.mark.parametrize(("animal1", "animal2"), [(None, "Tiger"), ("Lion", ""), ("Orca", "ORCA"), ("Snow Leopard", "snow  leopard"), ("A" * 201, "Tiger")])
def test_battle_input_rejects_missing_or_identical_names(animal1, animal2):
    with pytest.raises(ValidationError):
        BattleInput.create(animal1, animal2)


def test_stats_iterate_in_display_order():
    stats = BattlePayload.model_validate(battle_payload()).stats

    pairs = list(stats.trait_pairs())

    assert [trait for trait, _, _ in pairs] == ["strength", "speed", "intelligence", "defense", "agility"]
    assert pairs[0] == ("strength", 88, 85)


def test_result_is_immutable_and_knows_the_winner_slot():
    payload = BattlePayload.model_validate(battle_payload(winner="Tiger", loser="Lion"))
    result = BattleResult(
        winner=payload.winner,
        loser=payload.loser,
        probability=payload.probability,
        reasoning=payload.reasoning,
        stats=payload.stats,
    )

    assert result.winner_slot(BattleInput.create("Lion", "Tiger")) == "animal2"
    with pytest.raises(PydanticValidationError):
        result.probability = 10


def test_stats_reject_snake_case_keys():
    payload = battle_payload()
    payload["stats"] = {f"animal{slot}_{trait}": 50 for slot in (1, 2) for trait in TRAITS}

    with pytest.raises(PydanticValidationError):
        BattlePayload.model_validate(payload)


def test_payload_rejects_blank_reasoning():
    with pytest.raises(PydanticValidationError):
        BattlePayload.model_validate(battle_payload(reasoning="   "))
