"""
HTTP blueprints.
"""
from flask import request
from healthwallet.errors import ValidationError


def json_object(required=False):
    """
    The request body as a dict. A body that is not a JSON object is a 400;
    a missing or empty one is a 400 only when ``required``.
    """
    data = request.get_json(silent=True)
    if data is not None and not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    if not data:
        if required:
            raise ValidationError('Request body is required')
        return {}
    return data
