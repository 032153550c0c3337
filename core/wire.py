"""JSON wire format for snapshots

The payload is the snapshot dumped by alias:
  {"gamepads": {"0": {"name": ..., "button_down_event_counter": {...}, ...}},
   "time": "2024-01-01T00:00:00.000000Z"}
"""
from pydantic import ValidationError
from pydantic_core import PydanticSerializationError

from core.errors import SerializationError
from core.state import Snapshot


def to_wire(snapshot: Snapshot) -> bytes:
    try:
        return snapshot.model_dump_json(by_alias=True).encode("utf-8")
    except PydanticSerializationError as e:
        raise SerializationError(f"cannot serialize snapshot: {e}") from e


def from_wire(payload) -> Snapshot:
    try:
        return Snapshot.model_validate_json(payload)
    except ValidationError as e:
        raise SerializationError(f"invalid snapshot payload: {e}") from e


def snapshot_schema() -> dict:
    """JSON Schema of the published message, using wire field names."""
    return Snapshot.model_json_schema(by_alias=True)
