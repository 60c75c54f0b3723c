"""JSON renderer support for the web API."""
import datetime
import json
import math
from enum import Enum
from typing import Any, Mapping

from dataclasses_json.core import Json
from dataclasses_json.utils import _isinstance_safe


def replace_non_finite(obj: Any) -> Any:
    """Walk decoded JSON and turn NaN and Infinity into None.

    Mappings come out as dicts and tuples as lists.
    """
    if isinstance(obj, float):
        return obj if math.isfinite(obj) else None
    if isinstance(obj, Mapping):
        return {k: replace_non_finite(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [replace_non_finite(v) for v in obj]
    return obj


class NaNToNullEncoder(json.JSONEncoder):
    """Encoder for :py:class:`pyramid.renderers.JSON` that only emits strict JSON.

    Pass-through fields of the bot snapshot may hold `NaN`, which
    :py:func:`json.loads` accepts but browsers do not.
    """

    def default(self, o) -> Json:
        if _isinstance_safe(o, datetime.datetime):
            return o.isoformat()
        if _isinstance_safe(o, Enum):
            return o.value
        return super().default(o)

    def encode(self, o) -> str:
        return super().encode(replace_non_finite(o))
