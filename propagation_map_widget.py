# RBN Overlay
# Copyright (C) 2025 Peter Hirst (WU2C)
#
# World map drawing surface (equirectangular projection).
# - Paint objects (QColor, QFont, QPen) cached to avoid per-frame allocation
# - update() instead of repaint() so Qt can batch paints

import logging
from typing import Dict, List, Optional, Tuple

from PyQt6.QtWidgets import QWidget, QToolTip
from PyQt6.QtGui import QPainter, QColor, QPen, QBrush, QFont, QPainterPath
from PyQt6.QtCore import Qt, QPointF, QRectF

from grid_locator import Coordinate
from rbn_models import DrawablePrimitive, PrimitiveKind

logger = logging.getLogger(__name__)

GRATICULE_STEP = 30  # degrees
HOVER_SLOP = 4       # extra pixels around a marker for tooltips


class PropagationMapWidget(QWidget):
    """Renders overlay primitives on a plain lat/lon world grid."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setMinimumSize(480, 260)
        self.setMouseTracking(True)
        self.setStyleSheet("background-color: #101010;")

        self._primitives: Dict[int, DrawablePrimitive] = {}
        self._next_handle = 1
        self.home: Optional[Coordinate] = None
        self.placeholder_text = "RBN overlay is off"

        self._init_paint_cache()

    def _init_paint_cache(self):
        """Pre-create paint objects used every frame."""
        self._colors = {
            'background': QColor("#101010"),
            'graticule': QColor("#222"),
            'equator': QColor("#333"),
            'placeholder': QColor("#555"),
            'label_dim': QColor("#666"),
            'home': QColor("#00FFFF"),
        }
        self._fonts = {
            'normal': QFont("Segoe UI", 11),
            'small': QFont("Segoe UI", 8),
        }
        self._pens = {
            'graticule': QPen(self._colors['graticule'], 1),
            'equator': QPen(self._colors['equator'], 1, Qt.PenStyle.DotLine),
            'home': QPen(self._colors['home'], 2),
        }
        # (hex, alpha) -> QColor
        self._color_cache: Dict[Tuple[str, int], QColor] = {}

    def _color(self, hex_color: str, opacity: float = 1.0) -> QColor:
        alpha = int(max(0.0, min(1.0, opacity)) * 255)
        key = (hex_color, alpha)
        if key not in self._color_cache:
            color = QColor(hex_color)
            color.setAlpha(alpha)
            self._color_cache[key] = color
        return self._color_cache[key]

    # ------------------------------------------------------------------
    # Drawing surface interface
    # ------------------------------------------------------------------

    def add_primitive(self, primitive: DrawablePrimitive) -> int:
        handle = self._next_handle
        self._next_handle += 1
        self._primitives[handle] = primitive
        self.update()
        return handle

    def remove_primitive(self, handle):
        """Remove a primitive; unknown handles are ignored."""
        if self._primitives.pop(handle, None) is not None:
            self.update()

    def clear(self):
        self._primitives.clear()
        self.update()

    def primitive_count(self) -> int:
        return len(self._primitives)

    def primitives(self) -> List[DrawablePrimitive]:
        return list(self._primitives.values())

    def set_home(self, home: Optional[Coordinate]):
        self.home = home
        self.update()

    # ------------------------------------------------------------------
    # Projection
    # ------------------------------------------------------------------

    def project(self, c: Coordinate) -> QPointF:
        w, h = self.width(), self.height()
        x = (c.longitude + 180.0) / 360.0 * w
        y = (90.0 - c.latitude) / 180.0 * h
        return QPointF(x, y)

    def _polyline_path(self, points) -> QPainterPath:
        """Polyline, broken where it crosses the antimeridian."""
        path = QPainterPath()
        prev = None
        for c in points:
            pt = self.project(c)
            if prev is None or abs(c.longitude - prev.longitude) > 180:
                path.moveTo(pt)
            else:
                path.lineTo(pt)
            prev = c
        return path

    # ------------------------------------------------------------------
    # Painting
    # ------------------------------------------------------------------

    def paintEvent(self, event):
        qp = QPainter(self)
        qp.setRenderHint(QPainter.RenderHint.Antialiasing)
        w = self.width()
        h = self.height()

        qp.fillRect(0, 0, w, h, self._colors['background'])

        # Graticule
        qp.setPen(self._pens['graticule'])
        for lon in range(-180, 181, GRATICULE_STEP):
            x = (lon + 180) / 360 * w
            qp.drawLine(int(x), 0, int(x), h)
        for lat in range(-90, 91, GRATICULE_STEP):
            y = (90 - lat) / 180 * h
            qp.drawLine(0, int(y), w, int(y))
        qp.setPen(self._pens['equator'])
        qp.drawLine(0, h // 2, w, h // 2)

        if not self._primitives and self.placeholder_text:
            qp.setPen(self._colors['placeholder'])
            qp.setFont(self._fonts['normal'])
            qp.drawText(QRectF(0, 0, w, h), Qt.AlignmentFlag.AlignCenter, self.placeholder_text)

        # Paths under markers
        qp.setBrush(Qt.BrushStyle.NoBrush)
        for prim in self._primitives.values():
            if prim.kind is PrimitiveKind.PATH_LINE:
                self._draw_path(qp, prim)

        for prim in self._primitives.values():
            if prim.kind is PrimitiveKind.MARKER:
                self._draw_marker(qp, prim)

        if self.home is not None:
            pt = self.project(self.home)
            qp.setPen(self._pens['home'])
            qp.setBrush(Qt.BrushStyle.NoBrush)
            qp.drawLine(QPointF(pt.x() - 6, pt.y()), QPointF(pt.x() + 6, pt.y()))
            qp.drawLine(QPointF(pt.x(), pt.y() - 6), QPointF(pt.x(), pt.y() + 6))

        qp.end()

    def _draw_path(self, qp: QPainter, prim: DrawablePrimitive):
        style = prim.style
        pen = QPen(self._color(style.get('color', '#888888'), style.get('opacity', 1.0)),
                   style.get('weight', 2))
        if style.get('dashed'):
            pen.setStyle(Qt.PenStyle.DashLine)
        qp.setPen(pen)
        qp.drawPath(self._polyline_path(prim.geometry))

    def _draw_marker(self, qp: QPainter, prim: DrawablePrimitive):
        style = prim.style
        radius = style.get('radius', 6)
        opacity = style.get('opacity', 1.0)
        qp.setPen(QPen(self._color(style.get('color', '#ffffff'), opacity), style.get('weight', 2)))
        qp.setBrush(QBrush(self._color(style.get('fill_color', '#888888'),
                                       style.get('fill_opacity', opacity))))
        qp.drawEllipse(self.project(prim.geometry[0]), radius, radius)

    # ------------------------------------------------------------------
    # Tooltips
    # ------------------------------------------------------------------

    def marker_at(self, pos: QPointF) -> Optional[DrawablePrimitive]:
        """Topmost marker under a widget position."""
        hit = None
        for prim in self._primitives.values():
            if prim.kind is not PrimitiveKind.MARKER:
                continue
            center = self.project(prim.geometry[0])
            r = prim.style.get('radius', 6) + HOVER_SLOP
            dx = center.x() - pos.x()
            dy = center.y() - pos.y()
            if dx * dx + dy * dy <= r * r:
                hit = prim
        return hit

    def mouseMoveEvent(self, event):
        prim = self.marker_at(event.position())
        if prim is not None and prim.tooltip:
            QToolTip.showText(event.globalPosition().toPoint(), prim.tooltip, self)
        else:
            QToolTip.hideText()
        super().mouseMoveEvent(event)
