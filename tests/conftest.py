"""Shared fixtures: a scripted stand-in for the model provider."""

from __future__ import annotations

import json
from typing import Any

import pytest

from adapters.media import PicsumImageResolver
from core.domain.models import GroundingLink
from core.interfaces.generator import GenerationRequest, GenerationResponse
from core.services.outcome_service import OutcomeService


def battle_payload(winner: str = "Lion", loser: str = "Tiger", probability: Any = 62, **overrides: Any) -> dict[str, Any]:
    stats = {
        "animal1Strength": 88,
        "animal1Speed": 70,
        "animal1Intelligence": 55,
        "animal1Defense": 60,
        "animal1Agility": 65,
        "animal2Strength": 85,
        "animal2Speed": 72,
        "animal2Intelligence": 50,
        "animal2Defense": 58,
        "animal2Agility": 80,
    }
    payload: dict[str, Any] = {
        "winner": winner,
        "loser": loser,
        "probability": probability,
        "reasoning": "Coalition tactics and a heavier mane-protected neck tip the scales.",
        "stats": stats,
    }
    payload.update(overrides)
    return payload


class FakeGenerator:
    """Replays scripted responses; an Exception item is raised instead."""

    def __init__(self, *responses: Any) -> None:
        self._responses = list(responses)
        self.requests: list[GenerationRequest] = []

    async def generate(self, request: GenerationRequest) -> GenerationResponse:
        self.requests.append(request)
        item = self._responses.pop(0) if len(self._responses) > 1 else self._responses[0]
        if isinstance(item, BaseException):
            raise item
        if isinstance(item, GenerationResponse):
            return item
        if isinstance(item, (dict, list)):
            return GenerationResponse(text=json.dumps(item))
        return GenerationResponse(text=str(item))


@pytest.fixture
def resolver() -> PicsumImageResolver:
    return PicsumImageResolver()


@pytest.fixture
def make_service(resolver):
    def _make(*responses: Any, timeout_seconds: float = 5.0, **kwargs: Any) -> tuple[OutcomeService, FakeGenerator]:
        generator = FakeGenerator(*responses)
        service = OutcomeService(
            generator=generator,
            image_resolver=resolver,
            timeout_seconds=timeout_seconds,
            **kwargs,
        )
        return service, generator

    return _make


@pytest.fixture
def wiki_links() -> list[GroundingLink]:
    return [
        GroundingLink(uri="https://en.wikipedia.org/wiki/Lion", title="Lion - Wikipedia"),
        GroundingLink(uri="https://www.nationalgeographic.com/animals/mammals/facts/tiger", title=""),
    ]
