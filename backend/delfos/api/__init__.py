from flask import request

from delfos.errors import InvalidInput


def json_body(optional=False) -> dict:
    data = request.get_json(silent=True)
    if data is None and optional:
        return {}
    if not isinstance(data, dict):
        raise InvalidInput('Invalid JSON body')
    return data
