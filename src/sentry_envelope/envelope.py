"""
Envelope framing for the collector's ingestion endpoint.

An envelope is newline-separated compact JSON:

  {"event_id":"<32 hex chars>"}
  {"type":"event","length":<N>}
  <event document, exactly N bytes>
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from .errors import SerializationError
from .event import BuiltEvent
from .models import EnvelopeHeader, ItemHeader


@dataclass
class EnvelopeItem:
  header: Dict[str, Any]
  payload: bytes


@dataclass
class ParsedEnvelope:
  header: Dict[str, Any]
  items: List[EnvelopeItem]


def encode(event_id: str, event_document: bytes, length: int) -> bytes:
  header = EnvelopeHeader(event_id=event_id).model_dump_json().encode("utf-8")
  item_header = ItemHeader(length=length).model_dump_json().encode("utf-8")
  return b"\n".join([header, item_header, event_document])


def encode_event(event: BuiltEvent) -> bytes:
  return encode(event.event_id, event.body, event.length)


def _read_line(buf: bytes, start: int) -> Tuple[Optional[bytes], int]:
  if start >= len(buf):
    return None, start
  end = buf.find(b"\n", start)
  if end == -1:
    return buf[start:], len(buf)
  return buf[start:end], end + 1


def _load_json(line: bytes, what: str) -> Dict[str, Any]:
  try:
    value = json.loads(line.decode("utf-8"))
  except (UnicodeDecodeError, ValueError) as exc:
    raise SerializationError(f"invalid {what} (not valid JSON): {exc}") from exc
  if not isinstance(value, dict):
    raise SerializationError(f"invalid {what}: expected a JSON object")
  return value


def decode_envelope(payload: bytes) -> ParsedEnvelope:
  """
  Parse an envelope back into its header and items.

  Each item payload is cut by its declared byte `length`; a payload that is
  shorter than declared, or not followed by a newline or the end of the
  envelope, is rejected.
  """
  if not payload:
    raise SerializationError("envelope is empty")

  header_line, i = _read_line(payload, 0)
  if header_line is None:
    raise SerializationError("invalid envelope: missing header line")
  header = _load_json(header_line, "envelope header")

  items: List[EnvelopeItem] = []
  while i < len(payload):
    item_header_line, i = _read_line(payload, i)
    if item_header_line is None or item_header_line.strip() == b"":
      break
    item_header = _load_json(item_header_line, "item header")

    length = item_header.get("length")
    if not isinstance(length, int) or length < 0:
      raise SerializationError("invalid envelope: item header missing 'length' field")
    if i + length > len(payload):
      raise SerializationError(
        f"invalid envelope: item declares {length} bytes, "
        f"only {len(payload) - i} available"
      )
    item_payload = payload[i : i + length]
    i += length
    if i < len(payload):
      if payload[i : i + 1] != b"\n":
        raise SerializationError("invalid envelope: item longer than its declared length")
      i += 1
    items.append(EnvelopeItem(header=item_header, payload=item_payload))

  return ParsedEnvelope(header=header, items=items)
