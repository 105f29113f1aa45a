"""Shared fixtures: a real opusenc summary and the record shape that scrapes it."""

from __future__ import annotations

from typing import Annotated

import pytest
from pydantic import BaseModel, Field, PrivateAttr

from shapes import FieldKind

OPUSENC_OUTPUT = """
Encoding complete
-----------------------------------------------------
       Encoded: 4 minutes and 31.64 seconds
       Runtime: 4 seconds
                (67.91x realtime)
         Wrote: 3853633 bytes, 13582 packets, 275 pages
       Bitrate: 109.64 kbit/s (without overhead)
 Instant rates: 1.2 to 193.2 kbit/s
                (3 to 483 bytes per packet)
      Overhead: 3.39% (container+metadata)
"""


class Opusenc(BaseModel):
    empty: str = ""
    more_empty: str = Field("", description="-")
    even_more_empty: str = Field("", json_schema_extra={"match": "-"})

    encoded: str = Field("", json_schema_extra={"match": r"Encoded: (.+)"})
    runtime: str = Field("", json_schema_extra={"match": r"Runtime: (.+)"})
    realtime_mult: Annotated[float, FieldKind.FLOAT32] = Field(0.0, description=r"\((.+)x realtime\)")

    # private, must never be matched
    _non_exported: str = PrivateAttr("untouched")

    wrote_bytes: Annotated[int, FieldKind.UINT64] = Field(0, description=r"Wrote: (\d+) bytes")
    bitrate: Annotated[float, FieldKind.FLOAT32] = Field(
        0.0, description=r"Bitrate: (.+) kbit/s \(without overhead\)"
    )
    overhead: Annotated[float, FieldKind.FLOAT32] = Field(
        0.0, description=r"Overhead: (.+)% \(container\+metadata\)"
    )


@pytest.fixture
def opusenc_output() -> str:
    return OPUSENC_OUTPUT


@pytest.fixture
def opusenc_model() -> type[Opusenc]:
    return Opusenc
