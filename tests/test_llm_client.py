"""Bedrock request shaping, exercised with a stubbed runtime client."""

from __future__ import annotations

import asyncio
import base64
import json
from unittest.mock import MagicMock

import pytest
from pydantic import SecretStr

from callscore.config.settings import BedrockConfig
from callscore.services.aws import bedrock_client_kwargs
from callscore.services.llm_client import BedrockLlmClient, LlmInvocationError


def _text_response(text: str) -> dict:
    return {"output": {"message": {"content": [{"text": text}]}}}


def test_generate_from_audio_sends_inline_audio_block() -> None:
    runtime = MagicMock()
    runtime.converse.return_value = _text_response("Agent: Hello\nCustomer: Hi")
    client = BedrockLlmClient(client=runtime)

    text = asyncio.run(client.generate_from_audio(b"ID3", "audio/mpeg", "Transcribe"))

    assert text == "Agent: Hello\nCustomer: Hi"
    request = runtime.converse.call_args.kwargs
    audio_block, text_block = request["messages"][0]["content"]
    assert audio_block == {"audio": {"format": "mp3", "source": {"bytes": b"ID3"}}}
    assert text_block == {"text": "Transcribe"}


def test_generate_from_audio_rejects_unknown_encoding() -> None:
    runtime = MagicMock()
    client = BedrockLlmClient(client=runtime)

    with pytest.raises(LlmInvocationError):
        asyncio.run(client.generate_from_audio(b"OggS", "audio/ogg", "Transcribe"))
    runtime.converse.assert_not_called()


def test_structured_output_returns_tool_input_as_json() -> None:
    runtime = MagicMock()
    runtime.converse.return_value = {
        "output": {
            "message": {
                "content": [
                    {
                        "toolUse": {
                            "toolUseId": "t-1",
                            "name": "submit_structured_output",
                            "input": {"scores": {"greeting": 5}, "overallFeedback": "ok", "observation": "ok"},
                        }
                    }
                ]
            }
        }
    }
    client = BedrockLlmClient(client=runtime)
    schema = {"type": "object", "required": ["scores"]}

    raw = asyncio.run(
        client.generate_from_text("Score it", structured_output=True, temperature=0.1, json_schema=schema)
    )

    assert json.loads(raw)["scores"] == {"greeting": 5}
    request = runtime.converse.call_args.kwargs
    assert request["inferenceConfig"]["temperature"] == 0.1
    tool_config = request["toolConfig"]
    assert tool_config["toolChoice"] == {"tool": {"name": "submit_structured_output"}}
    assert tool_config["tools"][0]["toolSpec"]["inputSchema"] == {"json": schema}


def test_plain_text_generation_has_no_tool_config() -> None:
    runtime = MagicMock()
    runtime.converse.return_value = _text_response("  hello  ")
    client = BedrockLlmClient(client=runtime)

    assert asyncio.run(client.generate_from_text("Say hello")) == "hello"
    assert "toolConfig" not in runtime.converse.call_args.kwargs


def test_runtime_errors_are_wrapped() -> None:
    runtime = MagicMock()
    runtime.converse.side_effect = RuntimeError("AccessDeniedException")
    client = BedrockLlmClient(client=runtime)

    with pytest.raises(LlmInvocationError, match="AccessDenied"):
        asyncio.run(client.generate_from_text("Score it"))


def test_api_key_takes_precedence_over_key_pair() -> None:
    config = BedrockConfig.model_construct(
        region="eu-west-1",
        api_key=SecretStr(base64.b64encode(b"AKIAKEY:topsecret").decode()),
        access_key="other",
        secret_key="pair",
    )

    assert bedrock_client_kwargs(config) == {
        "region_name": "eu-west-1",
        "aws_access_key_id": "AKIAKEY",
        "aws_secret_access_key": "topsecret",
    }


def test_key_pair_used_when_api_key_unusable() -> None:
    config = BedrockConfig.model_construct(
        region="us-east-1",
        api_key=SecretStr("no-separator"),
        access_key="AKIAPAIR",
        secret_key="pairsecret",
    )

    kwargs = bedrock_client_kwargs(config)

    assert kwargs["aws_access_key_id"] == "AKIAPAIR"
    assert kwargs["aws_secret_access_key"] == "pairsecret"


def test_default_credential_chain_without_keys() -> None:
    config = BedrockConfig.model_construct(region="us-east-1", api_key=None, access_key=None, secret_key=None)

    assert bedrock_client_kwargs(config) == {"region_name": "us-east-1"}
