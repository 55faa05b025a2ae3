# storefront/utils/validation.py
from flask import request

from ..errors import ValidationError


def json_body():
    """The request's JSON object, ``{}`` when absent; anything else is a 400."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def str_field(data, key, strip=True):
    """String value of ``data[key]`` ("" when missing or null)."""
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be a string")
    return value.strip() if strip else value
