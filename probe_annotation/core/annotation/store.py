"""
In-memory marker store, keyed by surface and tool name.
"""

import logging
from typing import Any, Dict, List, Optional

from .state import Marker

logger = logging.getLogger(__name__)


class ToolStateStore:
    """
    Ordered marker lists per surface and tool.

    ``get`` returns None when nothing was ever registered for the pair,
    which callers treat as "no markers".
    """

    def __init__(self):
        self._state: Dict[int, Dict[str, List[Marker]]] = {}
        self._surfaces: Dict[int, Any] = {}

    def get(self, surface: Any, tool_name: str) -> Optional[List[Marker]]:
        return self._state.get(id(surface), {}).get(tool_name)

    def add(self, surface: Any, tool_name: str, marker: Marker):
        key = id(surface)
        # Keep the surface alive while we key by its id
        self._surfaces[key] = surface
        self._state.setdefault(key, {}).setdefault(tool_name, []).append(marker)

    def remove(self, surface: Any, tool_name: str, marker: Marker) -> bool:
        markers = self.get(surface, tool_name)
        if not markers or marker not in markers:
            return False
        markers.remove(marker)
        return True

    def clear(self, surface: Optional[Any] = None):
        """Forget the markers of one surface, or of all surfaces."""
        if surface is None:
            self._state.clear()
            self._surfaces.clear()
            return
        self._state.pop(id(surface), None)
        self._surfaces.pop(id(surface), None)
