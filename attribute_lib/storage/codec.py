"""Record packet codec.

A packet is a JSON frame carrying a compression flag and the base64 encoded
inner payload. The inner payload is the serialized pair
``[record_key, attributes]``, Brotli-compressed when the flag is set.
Because every packet says whether it was compressed, records written under
either compression setting stay readable after the setting changes.
"""
from __future__ import annotations
import base64
import binascii
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import brotli

from attribute_lib.errors import CodecError
from .serializer import JSONSerializer, Serializer

logger = logging.getLogger(__name__)

FRAME_VERSION = 1


@dataclass(frozen=True)
class DecodeResult:
    attributes: Dict[str, Any] = field(default_factory=dict)
    ok: bool = False
    key: Optional[str] = None


class RecordCodec:
    def __init__(self, serializer: Serializer | None = None, quality: int = 5) -> None:
        self.serializer = serializer or JSONSerializer()
        self.quality = quality

    def encode(self, record_key: str, attributes: Dict[str, Any], compress: bool) -> bytes:
        inner = self.serializer.dump([record_key, attributes])
        if compress:
            inner = brotli.compress(inner, quality=self.quality)
        frame = {
            "v": FRAME_VERSION,
            "compressed": bool(compress),
            "payload": base64.b64encode(inner).decode("ascii"),
        }
        return json.dumps(frame).encode("utf-8")

    def unpack(self, data: bytes) -> tuple[str, Dict[str, Any]]:
        """Decode `data` into ``(record_key, attributes)``.

        Raises `CodecError` for anything that is not a well-formed packet.
        """
        try:
            frame = json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, ValueError, RecursionError) as e:
            raise CodecError(f"unreadable packet frame: {e}") from e
        if not isinstance(frame, dict) or not isinstance(frame.get("compressed"), bool) \
                or not isinstance(frame.get("payload"), str):
            raise CodecError("malformed packet frame")

        try:
            inner = base64.b64decode(frame["payload"].encode("ascii"), validate=True)
        except (binascii.Error, ValueError) as e:
            raise CodecError(f"bad packet payload: {e}") from e

        if frame["compressed"]:
            try:
                inner = brotli.decompress(inner)
            except brotli.error as e:
                raise CodecError(f"payload decompression failed: {e}") from e

        try:
            pair = self.serializer.load(inner)
        except Exception as e:
            # Serializers raise a wide range of types on garbage input.
            raise CodecError(f"payload deserialization failed: {e}") from e

        if not isinstance(pair, (list, tuple)) or len(pair) != 2:
            raise CodecError("payload is not a (key, attributes) pair")
        key, attributes = pair
        if not isinstance(key, str) or not isinstance(attributes, dict):
            raise CodecError("payload is not a (key, attributes) pair")
        return key, attributes

    def decode(self, data: bytes) -> DecodeResult:
        """Decode `data`, failing closed to an empty, not-ok result."""
        try:
            key, attributes = self.unpack(data)
        except CodecError as e:
            logger.debug("Packet rejected: %s", e)
            return DecodeResult()
        return DecodeResult(attributes=attributes, ok=True, key=key)
