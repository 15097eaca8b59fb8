"""
Request guards for the JSON API.

Mutating ``/api/`` calls that carry a body must declare a JSON content type;
anything else is refused with 415 before it reaches a blueprint.  Body size
is capped separately through ``MAX_CONTENT_LENGTH`` (413).
"""

from flask import abort, request

_MUTATING_METHODS = frozenset({"POST", "PUT", "PATCH"})


def init_request_guards(app):
    @app.before_request
    def _require_json_body():
        if request.method not in _MUTATING_METHODS or not request.path.startswith("/api/"):
            return
        if request.get_data(cache=True) and not request.is_json:
            abort(415, description="Content-Type must be application/json")
