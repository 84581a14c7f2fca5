"""General Utility Functions."""

from __future__ import annotations

import base64
import math
from collections.abc import Mapping
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Union

from google.cloud.firestore_v1 import DocumentReference, GeoPoint

__all__ = ["convert_to_json_safe"]


JsonSafeType = Union[
    None,
    str,
    int,
    bool,
    float,
    Dict[str, "JsonSafeType"],
    List["JsonSafeType"],
]
"""The set of types that are natively representable in JSON."""


def convert_to_json_safe(data: Any) -> JsonSafeType:
    """Recursively convert a Firestore document body to JSON-safe types.

    Firestore hands back a few types that ``json`` cannot encode:

    - ``DatetimeWithNanoseconds`` (a ``datetime``) and ``date`` -> ISO string
    - ``DocumentReference`` -> its document path
    - ``GeoPoint`` -> ``{"latitude": ..., "longitude": ...}``
    - ``bytes`` -> base64 string

    ``Decimal`` becomes ``float``; NaN and infinities become ``None``.
    Mappings, lists, tuples and sets are converted element-wise; anything
    else is stringified so an export never stops on one odd field.
    """
    if data is None or isinstance(data, (str, bool, int)):
        return data

    if isinstance(data, (float, Decimal)):
        number = float(data)
        return None if math.isnan(number) or math.isinf(number) else number

    if isinstance(data, date):
        return data.isoformat()

    if isinstance(data, DocumentReference):
        return data.path

    if isinstance(data, GeoPoint):
        return {"latitude": data.latitude, "longitude": data.longitude}

    if isinstance(data, (bytes, bytearray)):
        return base64.b64encode(bytes(data)).decode("ascii")

    if isinstance(data, Mapping):
        return {str(key): convert_to_json_safe(value) for key, value in data.items()}

    if isinstance(data, (list, tuple, set, frozenset)):
        return [convert_to_json_safe(item) for item in data]

    return str(data)
