"""Payload codec — wraps the booking form for transport.

Development builds send the form as plain JSON. Production builds send
``{"encrypted": "<token>"}`` where the token is the JSON form encrypted with
the shared passphrase (see ``src.booking.crypto``). The server accepts both
shapes in either mode.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Optional

import structlog

from src.booking import crypto
from src.booking.errors import ConfigurationError, DecodeError

logger = structlog.get_logger()

ENVELOPE_FIELD = "encrypted"


class Mode(str, Enum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"

    @classmethod
    def from_environment(cls, environment: str) -> "Mode":
        """Anything other than "production" runs as development."""
        if environment.strip().lower() == cls.PRODUCTION.value:
            return cls.PRODUCTION
        return cls.DEVELOPMENT


class PayloadCodec(ABC):
    """Encodes outgoing payloads and decodes incoming envelopes."""

    mode: Mode

    def __init__(self, secret_key: Optional[str] = None):
        self.secret_key = secret_key or None

    @abstractmethod
    def encode(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Wrap a payload for transport."""
        ...

    def decode(self, envelope: Any) -> dict[str, Any]:
        """Unwrap an envelope of either shape into the payload dict.

        Raises:
            DecodeError: envelope is not an object, or the encrypted field
                cannot be decrypted into a JSON object
        """
        if not isinstance(envelope, dict):
            raise DecodeError("Envelope must be a JSON object")

        if ENVELOPE_FIELD not in envelope:
            return dict(envelope)

        token = envelope[ENVELOPE_FIELD]
        if not isinstance(token, str) or not token:
            raise DecodeError("Encrypted field must be a non-empty string")
        if not self.secret_key:
            raise DecodeError("Encrypted payload received but no key is configured")

        text = crypto.decrypt(token, self.secret_key)
        try:
            payload = json.loads(text)
        except (json.JSONDecodeError, RecursionError) as e:
            raise DecodeError("Decrypted payload is not valid JSON") from e

        if not isinstance(payload, dict):
            raise DecodeError("Decrypted payload must be a JSON object")
        return payload


class PlainCodec(PayloadCodec):
    """Development codec: payload travels as-is."""

    mode = Mode.DEVELOPMENT

    def encode(self, payload: dict[str, Any]) -> dict[str, Any]:
        return dict(payload)


class AESCodec(PayloadCodec):
    """Production codec: payload travels encrypted with the shared passphrase."""

    mode = Mode.PRODUCTION

    def __init__(self, secret_key: str):
        if not secret_key:
            raise ConfigurationError("BOOKING_SECRET_KEY is required in production mode")
        super().__init__(secret_key)

    def encode(self, payload: dict[str, Any]) -> dict[str, Any]:
        text = json.dumps(payload, ensure_ascii=False, separators=(",", ":"))
        return {ENVELOPE_FIELD: crypto.encrypt(text, self.secret_key)}


def get_codec(mode: Mode, secret_key: Optional[str] = None) -> PayloadCodec:
    """Select the codec for a deployment mode.

    Raises:
        ConfigurationError: production mode without a secret key
    """
    if mode is Mode.PRODUCTION:
        return AESCodec(secret_key or "")
    if not secret_key:
        logger.info("codec_plain_only", reason="no_secret_key")
    return PlainCodec(secret_key)
