"""Adaptador de generación estructurada (SDK OpenAI, proveedores compatibles).

Responsabilidad:
- Traducir un `GenerationRequest` a una llamada de Chat Completions con
  `response_format` JSON Schema estricto (y búsqueda web opcional).
- Devolver el texto crudo y las citas (`url_citation`) como `GenerationResponse`.
- Mapear los errores del SDK a `GenerationError`.

No reintenta: `max_retries=0` en el cliente y una sola llamada por request.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from openai import APIConnectionError, APIStatusError, APITimeoutError, AsyncOpenAI, OpenAIError

from adapters.http_client import build_async_client
from core.config import AppSettings
from core.domain.models import GroundingLink
from core.errors import GenerationError
from core.interfaces.generator import GenerationRequest, GenerationResponse

logger = logging.getLogger(__name__)


def build_openai_client(
    settings: AppSettings,
    *,
    http_client: httpx.AsyncClient | None = None,
) -> AsyncOpenAI:
    """Crea el cliente del proveedor IA a partir de la configuración.

    Sin API key: si el proveedor es local (Ollama, LM Studio...) se usa una key
    dummy; en proveedores hosted es un error de configuración.
    """

    api_key = (settings.ai_api_key or "").strip()
    if not api_key:
        if not settings.is_local_provider():
            raise GenerationError(
                "No AI API key configured (set FACEOFF_AI_API_KEY or run `faceoff doctor setup-ai`).",
                reason="missing_api_key",
            )
        api_key = "local"

    return AsyncOpenAI(
        api_key=api_key,
        base_url=settings.ai_base_url,
        timeout=settings.ai_timeout_seconds,
        max_retries=0,
        http_client=http_client or build_async_client(settings, timeout_seconds=settings.ai_timeout_seconds),
    )


def extract_citations(message: Any) -> list[GroundingLink]:
    """Lee las anotaciones `url_citation` del mensaje (canal lateral de grounding)."""

    links: list[GroundingLink] = []
    for annotation in getattr(message, "annotations", None) or []:
        if getattr(annotation, "type", None) != "url_citation":
            continue
        citation = getattr(annotation, "url_citation", None)
        url = getattr(citation, "url", None)
        if not isinstance(url, str) or not url.strip():
            continue
        title = getattr(citation, "title", None)
        links.append(GroundingLink(uri=url.strip(), title=title.strip() if isinstance(title, str) else ""))
    return links


class OpenAIStructuredGenerator:
    """`StructuredGenerator` backed by an OpenAI-compatible Chat Completions API."""

    def __init__(self, *, client: AsyncOpenAI, model: str) -> None:
        self._client = client
        self._model = model

    @classmethod
    def from_settings(cls, settings: AppSettings | None = None) -> "OpenAIStructuredGenerator":
        settings = settings or AppSettings()
        return cls(client=build_openai_client(settings), model=settings.ai_model)

    def build_params(self, request: GenerationRequest) -> dict[str, Any]:
        params: dict[str, Any] = {
            "model": self._model,
            "messages": [
                {"role": "system", "content": request.system_prompt},
                {"role": "user", "content": request.user_prompt},
            ],
            "response_format": {
                "type": "json_schema",
                "json_schema": {
                    "name": request.schema_name,
                    "strict": True,
                    "schema": request.schema,
                },
            },
        }
        if request.web_search:
            # Los modelos *-search-preview no aceptan `temperature`.
            params["web_search_options"] = {}
        elif request.temperature is not None:
            params["temperature"] = request.temperature
        return params

    async def generate(self, request: GenerationRequest) -> GenerationResponse:
        params = self.build_params(request)
        try:
            response = await self._client.chat.completions.create(**params)
        except APIStatusError as exc:
            raise GenerationError(
                f"AI provider answered HTTP {exc.status_code}.", reason="transport"
            ) from exc
        except APITimeoutError as exc:
            raise GenerationError("AI provider timed out.", reason="timeout") from exc
        except APIConnectionError as exc:
            raise GenerationError("Could not reach the AI provider.", reason="transport") from exc
        except OpenAIError as exc:
            raise GenerationError(f"AI provider error: {type(exc).__name__}.", reason="transport") from exc

        if not response.choices:
            raise GenerationError("AI provider returned no choices.", reason="invalid_json")
        message = response.choices[0].message
        refusal = getattr(message, "refusal", None)
        if refusal:
            raise GenerationError(f"AI provider refused the request: {refusal}", reason="schema")

        content = (message.content or "").strip()
        citations = extract_citations(message)
        logger.debug(
            "%s: %d chars, %d citations (model=%s)",
            request.schema_name,
            len(content),
            len(citations),
            getattr(response, "model", self._model),
        )
        return GenerationResponse(
            text=content,
            citations=citations,
            model=getattr(response, "model", None) or self._model,
        )
