"""Shared request helpers for the blueprints."""

from flask import request

from submission_review.core.exceptions import ValidationError


def json_body() -> dict:
    """Return the request's JSON object, or ``{}`` when there is no body.

    Raises:
        ValidationError: the body parsed to something other than an object.
    """
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError(
            "Request body must be a JSON object",
            details={"body": f"got {type(data).__name__}"},
        )
    return data
