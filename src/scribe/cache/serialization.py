"""Canonical wire format for cached values.

Values are stored as orjson-encoded JSON with UTC timestamps rendered as
ISO 8601 ("Z" suffix). Decoding goes back through the pydantic model, so a
cache hit yields the same types as a direct store read (datetimes, not
strings).
"""

from __future__ import annotations

from typing import TypeVar

import orjson
from pydantic import BaseModel, ValidationError

M = TypeVar("M", bound=BaseModel)

ORJSON_OPTIONS = orjson.OPT_NON_STR_KEYS | orjson.OPT_UTC_Z


class CorruptCacheValue(ValueError):
    """Cached bytes could not be decoded into the expected model."""


def encode(model: BaseModel) -> bytes:
    """Serialize a model to canonical JSON bytes."""
    return orjson.dumps(model.model_dump(exclude_none=True), option=ORJSON_OPTIONS)


def decode(model_type: type[M], data: bytes | str) -> M:
    """Deserialize cached bytes into model_type.

    Raises:
        CorruptCacheValue: if the payload is not valid JSON for model_type.
    """
    try:
        return model_type.model_validate(orjson.loads(data))
    except (orjson.JSONDecodeError, ValidationError) as e:
        raise CorruptCacheValue(str(e)) from e
