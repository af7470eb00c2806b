"""
Text to document decoding for filter, update, replacement and command arguments.

Arguments are JSON text. MongoDB Extended JSON is understood as well, so typed
values can be written as {"$oid": "..."}, {"$date": "..."} or {"$numberLong": "..."}.
Query and update operators such as $set or $gt are left untouched.
"""

from collections.abc import Mapping
from typing import Any, Dict, List, Union

from bson import json_util
from bson.errors import BSONError
from bson.json_util import JSONOptions, JSONMode
from bson.son import SON

from .exceptions import DecodeError

_UNORDERED_OPTIONS = JSONOptions(json_mode=JSONMode.RELAXED, document_class=dict)
_ORDERED_OPTIONS = JSONOptions(json_mode=JSONMode.RELAXED, document_class=SON)

Text = Union[str, bytes, bytearray]


def _loads(text: Text, options: JSONOptions) -> Any:
    if not isinstance(text, (str, bytes, bytearray)):
        raise DecodeError(text, message=f"Document text must be a string, got {type(text).__name__}")
    try:
        return json_util.loads(text, json_options=options)
    except (ValueError, TypeError, OverflowError, RecursionError, BSONError) as e:
        raise DecodeError(text, e, f"Invalid document text: {e}") from e


def decode_document(text: Text) -> Dict[str, Any]:
    """Decode text into an unordered document (filter, update, replacement or record)."""
    value = _loads(text, _UNORDERED_OPTIONS)
    if not isinstance(value, Mapping):
        raise DecodeError(text, message=f"Expected a JSON object, got {type(value).__name__}")
    return value


def decode_command(text: Text) -> SON:
    """
    Decode text into an order-preserving command document.

    The first key of a command document names the command, so key order
    from the text is kept exactly.
    """
    value = _loads(text, _ORDERED_OPTIONS)
    if not isinstance(value, Mapping):
        raise DecodeError(text, message=f"Expected a JSON object, got {type(value).__name__}")
    return value


def decode_documents(text: Text) -> List[Dict[str, Any]]:
    """Decode text into a list of documents, keeping array order."""
    value = _loads(text, _UNORDERED_OPTIONS)
    if not isinstance(value, list):
        raise DecodeError(text, message=f"Expected a JSON array, got {type(value).__name__}")
    for index, item in enumerate(value):
        if not isinstance(item, Mapping):
            raise DecodeError(
                text, message=f"Expected a JSON object at index {index}, got {type(item).__name__}"
            )
    return value


def decode_value(text: Text) -> Any:
    """Decode any JSON value, e.g. an identifier written as '{"$oid": "..."}' or '42'."""
    return _loads(text, _UNORDERED_OPTIONS)


def encode(value: Any, indent: Union[int, None] = None) -> str:
    """Serialize a result as relaxed Extended JSON."""
    return json_util.dumps(value, json_options=_UNORDERED_OPTIONS, indent=indent)
