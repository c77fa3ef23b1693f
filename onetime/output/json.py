"""
JsonRenderer — Render lint results as JSON for piping and editor integration

Internal keys (starting with _) are stripped before serializing.
"""

import json
from typing import TYPE_CHECKING, Any

from .base import BaseRenderer

if TYPE_CHECKING:
    from . import OutputSpec


class JsonRenderer(BaseRenderer):
    """
    Render data as JSON.

    Useful for:
    - Piping to jq or other tools
    - Editor and CI integrations
    """

    def __init__(self, *args, compact: bool = False, **kwargs):
        """
        Initialize JSON renderer.

        Args:
            compact: If True, output single line (no indentation)
            *args, **kwargs: Passed to BaseRenderer
        """
        super().__init__(*args, **kwargs)
        self.compact = compact

    def render(self, spec: "OutputSpec") -> str:
        data = self._clean_data(spec.data)
        output = {"title": spec.title, "data": data} if spec.title else data

        if self.compact:
            return json.dumps(output, default=self._json_serializer, ensure_ascii=False)
        return json.dumps(output, indent=2, default=self._json_serializer, ensure_ascii=False)

    def _clean_data(self, data: Any) -> Any:
        if isinstance(data, dict):
            return {
                k: self._clean_data(v)
                for k, v in data.items()
                if not str(k).startswith("_")
            }
        if isinstance(data, (list, tuple)):
            return [self._clean_data(item) for item in data]
        return data

    def _json_serializer(self, obj: Any) -> Any:
        """Fallback for Finding/Fix objects, enums and paths."""
        if hasattr(obj, "to_dict"):
            return obj.to_dict()
        if hasattr(obj, "value"):  # Enum
            return obj.value
        return str(obj)
