"""Helpers turning service results into JSON responses."""

from flask import jsonify, request
from mindquest.exceptions import MindQuestException


def _status_by_code():
    statuses = {}
    pending = list(MindQuestException.__subclasses__())
    while pending:
        cls = pending.pop()
        statuses[cls.code] = cls.status_code
        pending.extend(cls.__subclasses__())
    return statuses


ERROR_STATUS = _status_by_code()


def result_response(result, success_status=200):
    """
    Success results use `success_status`; failures use the HTTP status of
    the matching exception (already_completed stays 200).
    """
    if result.get('success'):
        return jsonify(result), success_status
    return jsonify(result), ERROR_STATUS.get(result.get('error'), 400)


def get_json_body():
    """Request JSON as a dict, empty when missing or malformed."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}
