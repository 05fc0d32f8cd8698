"""Thin Bedrock client wrapper for the generative capability.

Two operations are exposed: audio + instruction -> text (transcription) and
prompt -> text/JSON (analysis). Structured output is obtained through a forced
tool call whose input schema is the expected JSON document.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping

from fastapi.concurrency import run_in_threadpool

from callscore.config.settings import settings
from callscore.services.aws import create_bedrock_runtime_client

logger = logging.getLogger(__name__)

_AUDIO_FORMATS = {
    "audio/mpeg": "mp3",
    "audio/wav": "wav",
}
_STRUCTURED_TOOL_NAME = "submit_structured_output"


class LlmInvocationError(RuntimeError):
    """Raised when the Bedrock invocation fails."""


def _collect_text(response: Mapping[str, Any]) -> str:
    content_blocks = (
        response.get("output", {})
        .get("message", {})
        .get("content", [])
    )
    texts = [block.get("text", "") for block in content_blocks if block.get("text")]
    return "\n".join(texts).strip()


def _collect_tool_input(response: Mapping[str, Any]) -> str | None:
    content_blocks = (
        response.get("output", {})
        .get("message", {})
        .get("content", [])
    )
    for block in content_blocks:
        tool_use = block.get("toolUse")
        if isinstance(tool_use, Mapping) and tool_use.get("name") == _STRUCTURED_TOOL_NAME:
            return json.dumps(tool_use.get("input"), ensure_ascii=False)
    return None


class BedrockLlmClient:
    """Invoke Amazon Bedrock models with standard configuration."""

    def __init__(self, client: Any | None = None) -> None:
        self._model_id = settings.bedrock.model_id
        self._audio_model_id = settings.bedrock.audio_model_id or settings.bedrock.model_id

        if client is not None:
            self._client = client
            return

        try:
            self._client = create_bedrock_runtime_client()
        except Exception as exc:  # pragma: no cover - configuration issue
            logger.warning("Could not initialise Bedrock client: %s", exc)
            self._client = None

    def _inference_config(self, temperature: float | None) -> dict[str, Any]:
        return {
            "maxTokens": settings.bedrock.max_tokens,
            "temperature": (
                temperature
                if temperature is not None
                else settings.bedrock.temperature
            ),
            "topP": settings.bedrock.top_p,
        }

    async def _converse(self, **request: Any) -> Mapping[str, Any]:
        if not self._client:
            raise LlmInvocationError("Bedrock client is not configured.")

        try:
            return await run_in_threadpool(lambda: self._client.converse(**request))
        except Exception as exc:
            raise LlmInvocationError(str(exc)) from exc

    async def generate_from_audio(
        self,
        audio_bytes: bytes,
        mime_type: str,
        instruction: str,
    ) -> str:
        """Send inline audio plus an instruction and return the text output."""

        audio_format = _AUDIO_FORMATS.get(mime_type)
        if audio_format is None:
            raise LlmInvocationError(f"Unsupported audio encoding: {mime_type}")

        response = await self._converse(
            modelId=self._audio_model_id,
            messages=[
                {
                    "role": "user",
                    "content": [
                        {"audio": {"format": audio_format, "source": {"bytes": audio_bytes}}},
                        {"text": instruction},
                    ],
                }
            ],
            inferenceConfig=self._inference_config(None),
        )
        return _collect_text(response)

    async def generate_from_text(
        self,
        prompt: str,
        *,
        structured_output: bool = False,
        temperature: float | None = None,
        json_schema: Mapping[str, Any] | None = None,
    ) -> str:
        """Run a text prompt; in structured mode the reply is a JSON document."""

        request: dict[str, Any] = {
            "modelId": self._model_id,
            "messages": [{"role": "user", "content": [{"text": prompt}]}],
            "inferenceConfig": self._inference_config(temperature),
        }
        if structured_output:
            request["toolConfig"] = {
                "tools": [
                    {
                        "toolSpec": {
                            "name": _STRUCTURED_TOOL_NAME,
                            "description": "Return the requested JSON object.",
                            "inputSchema": {"json": dict(json_schema or {"type": "object"})},
                        }
                    }
                ],
                "toolChoice": {"tool": {"name": _STRUCTURED_TOOL_NAME}},
            }

        response = await self._converse(**request)
        if structured_output:
            tool_payload = _collect_tool_input(response)
            if tool_payload is not None:
                return tool_payload
            logger.warning("Structured call returned no tool payload; falling back to text")
        return _collect_text(response)


__all__ = ["BedrockLlmClient", "LlmInvocationError"]
