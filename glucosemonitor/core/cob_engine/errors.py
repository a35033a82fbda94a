"""COB/IOB engine exceptions."""

from typing import Any


class ConfigValidationError(ValueError):
    """An engine configuration update was rejected.

    Subclasses ValueError so routers translate it into a 422 like any
    other invalid settings update. ``errors`` holds one dict per offending
    field with ``field`` and ``message`` keys.
    """

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None):
        super().__init__(message)
        self.errors = errors or []
