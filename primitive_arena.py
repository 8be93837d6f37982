# RBN Overlay
# Copyright (C) 2025 Peter Hirst (WU2C)

import logging
from typing import Any, Dict, List

from rbn_models import DrawablePrimitive

logger = logging.getLogger(__name__)


class PrimitiveArena:
    """
    Tracks the handles drawn on a surface, grouped by redraw generation.

    Each redraw pass calls begin_pass(), which disposes every handle of
    the previous generations and opens a new one. add() always files the
    handle under the current generation, so a pass only ever disposes
    what earlier passes drew.
    """

    def __init__(self, surface):
        self.surface = surface
        self.generation = 0
        self._handles: Dict[int, List[Any]] = {}

    def begin_pass(self) -> int:
        self.dispose_all()
        self.generation += 1
        self._handles[self.generation] = []
        return self.generation

    def add(self, primitive: DrawablePrimitive):
        handle = self.surface.add_primitive(primitive)
        self._handles.setdefault(self.generation, []).append(handle)
        return handle

    def dispose_all(self) -> int:
        """Remove every tracked handle from the surface. Returns the count."""
        removed = 0
        for generation in sorted(self._handles):
            for handle in self._handles[generation]:
                self._remove(handle)
                removed += 1
        self._handles.clear()
        return removed

    def _remove(self, handle):
        try:
            self.surface.remove_primitive(handle)
        except Exception as e:
            # Surface may already be torn down
            logger.debug(f"Ignoring removal failure for {handle!r}: {e}")

    def count(self) -> int:
        return sum(len(h) for h in self._handles.values())

    def handles(self) -> List[Any]:
        return [h for gen in sorted(self._handles) for h in self._handles[gen]]
