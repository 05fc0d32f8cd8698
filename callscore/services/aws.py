"""Credential resolution and client construction for Bedrock runtime."""

from __future__ import annotations

import base64
from typing import Any

import boto3

from callscore.config.settings import BedrockConfig, settings


def _decode_bedrock_api_key(secret_value: str | None) -> tuple[str, str] | None:
    """Decode the BEDROCK_API_KEY secret into access/secret key components."""

    if not secret_value:
        return None

    try:
        decoded_bytes = base64.b64decode(secret_value.strip(), validate=True)
    except ValueError:
        decoded_bytes = secret_value.encode("utf-8", "ignore")

    filtered = "".join(chr(b) for b in decoded_bytes if 31 < b < 127)
    if ":" not in filtered:
        return None
    access_key, secret_key = filtered.split(":", 1)
    return access_key, secret_key


def bedrock_client_kwargs(config: BedrockConfig) -> dict[str, Any]:
    """Pick credentials: BEDROCK_API_KEY, then AWS key pair, then boto3's default chain."""

    kwargs: dict[str, Any] = {"region_name": config.region}
    api_key = config.api_key.get_secret_value() if config.api_key else None
    pair = _decode_bedrock_api_key(api_key)
    if pair is None and config.access_key and config.secret_key:
        pair = (config.access_key, config.secret_key)
    if pair is not None:
        kwargs["aws_access_key_id"], kwargs["aws_secret_access_key"] = pair
    return kwargs


def create_bedrock_runtime_client(config: BedrockConfig | None = None):
    return boto3.client("bedrock-runtime", **bedrock_client_kwargs(config or settings.bedrock))


__all__ = ["bedrock_client_kwargs", "create_bedrock_runtime_client"]
