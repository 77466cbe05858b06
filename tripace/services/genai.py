"""HTTP client for the generative-text service (Gemini generateContent REST API).

The service is an opaque collaborator: every failure mode (timeout, transport
error, non-2xx status, empty candidates, output that does not parse into the
requested model) surfaces as GenerativeServiceError. Nothing is retried.
"""

from __future__ import annotations

import logging
import re
import time
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from tripace.config import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$")


class GenerativeServiceError(RuntimeError):
    pass


def _extract_text(payload: dict[str, Any]) -> str:
    candidates = payload.get("candidates") or []
    if not candidates:
        reason = (payload.get("promptFeedback") or {}).get("blockReason")
        raise GenerativeServiceError(f"Generative service returned no candidates{f' ({reason})' if reason else ''}")
    parts = (candidates[0].get("content") or {}).get("parts") or []
    text = "".join(p.get("text", "") for p in parts if isinstance(p, dict)).strip()
    if not text:
        raise GenerativeServiceError("Generative service returned an empty response")
    return text


class GenerativeTextClient:
    """Thin synchronous wrapper around one model endpoint."""

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.0-flash",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: float = 30.0,
        temperature: float = 0.4,
        transport: httpx.BaseTransport | None = None,
    ):
        if not api_key:
            raise GenerativeServiceError("Generative service API key is not configured")
        self.model = model
        self.temperature = temperature
        self._http = httpx.Client(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={"x-goog-api-key": api_key},
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> GenerativeTextClient:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def generate_text(self, prompt: str, *, json_mode: bool = False) -> str:
        generation_config: dict[str, Any] = {"temperature": self.temperature}
        if json_mode:
            generation_config["responseMimeType"] = "application/json"
        body = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": generation_config,
        }

        started = time.perf_counter()
        try:
            resp = self._http.post(f"/models/{self.model}:generateContent", json=body)
            resp.raise_for_status()
            payload = resp.json()
        except httpx.TimeoutException as exc:
            raise GenerativeServiceError("Generative service timed out") from exc
        except httpx.HTTPStatusError as exc:
            raise GenerativeServiceError(f"Generative service returned HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise GenerativeServiceError(f"Generative service request failed: {exc}") from exc
        except ValueError as exc:
            raise GenerativeServiceError("Generative service returned a non-JSON body") from exc
        finally:
            duration_ms = round((time.perf_counter() - started) * 1000.0, 2)

        logger.info("genai_call", extra={"model": self.model, "json_mode": json_mode, "duration_ms": duration_ms})
        return _extract_text(payload)

    def generate_structured(self, prompt: str, output_model: type[T]) -> T:
        """Ask for JSON output and validate it against a pydantic model."""
        text = self.generate_text(prompt, json_mode=True)
        try:
            return output_model.model_validate_json(_FENCE_RE.sub("", text))
        except ValidationError as exc:
            logger.warning("genai_invalid_payload", extra={"model": self.model, "output_model": output_model.__name__})
            raise GenerativeServiceError(f"Generative service returned an invalid {output_model.__name__}") from exc


def build_genai_client(settings: Settings, transport: httpx.BaseTransport | None = None) -> GenerativeTextClient | None:
    """Return a client when an API key is configured, otherwise None."""
    if not settings.genai_configured:
        return None
    return GenerativeTextClient(
        api_key=settings.genai_api_key,
        model=settings.genai_model,
        base_url=settings.genai_base_url,
        timeout=settings.genai_timeout_seconds,
        temperature=settings.genai_temperature,
        transport=transport,
    )
