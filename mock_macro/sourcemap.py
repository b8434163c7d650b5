"""Source map v3 model and Base64 VLQ mapping codec."""

from __future__ import annotations

import base64

from pydantic import BaseModel, ConfigDict, Field

__all__ = [
    "Segment",
    "SourceMap",
    "decode_mappings",
    "decode_vlq",
    "encode_mappings",
    "encode_vlq",
    "utf16_len",
]

# (generated column, source index, original line, original column), all 0-based.
Segment = tuple[int, int, int, int]

_B64 = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
_B64_INDEX = {ch: i for i, ch in enumerate(_B64)}

_VLQ_SHIFT = 5
_VLQ_BASE = 1 << _VLQ_SHIFT
_VLQ_MASK = _VLQ_BASE - 1
_VLQ_CONTINUATION = _VLQ_BASE


def utf16_len(text: str) -> int:
    """Length of *text* in UTF-16 code units, the unit of map and editor columns."""
    return len(text) + sum(1 for ch in text if ord(ch) > 0xFFFF)


def encode_vlq(value: int) -> str:
    """Encode one signed integer as Base64 VLQ."""
    vlq = (-value << 1) | 1 if value < 0 else value << 1
    out = []
    while True:
        digit = vlq & _VLQ_MASK
        vlq >>= _VLQ_SHIFT
        if vlq:
            digit |= _VLQ_CONTINUATION
        out.append(_B64[digit])
        if not vlq:
            return "".join(out)


def decode_vlq(segment: str) -> list[int]:
    """Decode a run of Base64 VLQ digits into signed integers."""
    values: list[int] = []
    value = shift = 0
    for ch in segment:
        digit = _B64_INDEX[ch]
        value += (digit & _VLQ_MASK) << shift
        if digit & _VLQ_CONTINUATION:
            shift += _VLQ_SHIFT
            continue
        values.append(-(value >> 1) if value & 1 else value >> 1)
        value = shift = 0
    return values


def encode_mappings(lines: list[list[Segment]]) -> str:
    """Encode absolute segments, one list per generated line."""
    prev_source = prev_line = prev_col = 0
    encoded_lines = []
    for segments in lines:
        prev_gen_col = 0
        encoded = []
        for gen_col, source, line, col in segments:
            encoded.append(
                encode_vlq(gen_col - prev_gen_col)
                + encode_vlq(source - prev_source)
                + encode_vlq(line - prev_line)
                + encode_vlq(col - prev_col)
            )
            prev_gen_col, prev_source, prev_line, prev_col = gen_col, source, line, col
        encoded_lines.append(",".join(encoded))
    return ";".join(encoded_lines)


def decode_mappings(mappings: str) -> list[list[Segment]]:
    """Decode a mappings string back to absolute segments."""
    prev_source = prev_line = prev_col = 0
    lines: list[list[Segment]] = []
    for encoded_line in mappings.split(";"):
        gen_col = 0
        segments: list[Segment] = []
        for encoded in filter(None, encoded_line.split(",")):
            fields = decode_vlq(encoded)
            gen_col += fields[0]
            if len(fields) >= 4:
                prev_source += fields[1]
                prev_line += fields[2]
                prev_col += fields[3]
                segments.append((gen_col, prev_source, prev_line, prev_col))
        lines.append(segments)
    return lines


class SourceMap(BaseModel):
    """A version 3 source map."""

    model_config = ConfigDict(populate_by_name=True)

    version: int = 3
    file: str | None = None
    sources: list[str] = Field(default_factory=list)
    sources_content: list[str | None] | None = Field(default=None, alias="sourcesContent")
    names: list[str] = Field(default_factory=list)
    mappings: str = ""

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)

    def to_url(self) -> str:
        """Return the map as a base64 ``data:`` URL."""
        payload = base64.b64encode(self.to_json().encode("utf-8")).decode("ascii")
        return f"data:application/json;charset=utf-8;base64,{payload}"

    def comment(self, url: str | None = None) -> str:
        """Return a ``//# sourceMappingURL=`` comment for this map."""
        return f"//# sourceMappingURL={url or self.to_url()}"

    @property
    def segments(self) -> list[list[Segment]]:
        return decode_mappings(self.mappings)
