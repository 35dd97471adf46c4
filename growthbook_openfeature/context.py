"""
This submodule converts OpenFeature evaluation contexts into the attribute dictionaries that
GrowthBook evaluates features against.
"""

import json
import math
from collections.abc import Mapping, Sequence
from datetime import date, datetime
from typing import Any, Dict, Optional

from openfeature.evaluation_context import EvaluationContext

from growthbook_openfeature.impl.util import log

TARGETING_KEY_ATTRIBUTE = 'targetingKey'
USER_ID_ATTRIBUTE = 'userId'


def map_context(context: Optional[EvaluationContext]) -> Dict[str, Any]:
    """Builds a GrowthBook attribute dictionary from an OpenFeature evaluation context.

    The targeting key, if it is a non-empty string, becomes the ``userId`` attribute. All other
    attributes are copied with their type preserved as far as JSON allows; structured values
    (mappings and sequences) are converted to plain nested dicts and lists, or to their string
    form if they cannot be converted.

    The context is not modified, and the same context always produces an equal dictionary.

    :param context: the evaluation context, or None
    :return: a new attribute dictionary; empty if ``context`` is None
    """
    attributes = {}  # type: Dict[str, Any]
    if context is None:
        return attributes

    targeting_key = context.targeting_key
    has_targeting_key = isinstance(targeting_key, str) and targeting_key != ''
    if has_targeting_key:
        attributes[USER_ID_ATTRIBUTE] = targeting_key

    for name, value in (context.attributes or {}).items():
        if name == TARGETING_KEY_ATTRIBUTE:
            continue
        if name == USER_ID_ATTRIBUTE and has_targeting_key:
            log.debug("Ignoring \"%s\" attribute in favor of the context's targeting key" % USER_ID_ATTRIBUTE)
            continue
        attributes[name] = _attribute_value(value)

    return attributes


def _attribute_value(value: Any) -> Any:
    if value is None or isinstance(value, (str, bool)):
        return value
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return int(value)
        return value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (Mapping, Sequence)) and not isinstance(value, (bytes, bytearray)):
        return _structured_value(value)
    return str(value)


def _structured_value(value: Any) -> Any:
    try:
        return json.loads(json.dumps(value, default=_json_default))
    except (TypeError, ValueError) as e:
        log.debug("Could not convert structured attribute value to JSON (%s); using its string form" % repr(e))
        return str(value)


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Mapping):
        return dict(value)
    if isinstance(value, Sequence) and not isinstance(value, (bytes, bytearray)):
        return list(value)
    raise TypeError("Object of type %s is not JSON serializable" % value.__class__.__name__)


__all__ = ['map_context']
