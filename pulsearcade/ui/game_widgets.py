"""Game boards: pulse track, path row and pattern grid."""

from __future__ import annotations

from typing import Callable, List, Optional

from PySide6.QtCore import QRectF, Qt
from PySide6.QtGui import QColor, QPainter, QPen
from PySide6.QtWidgets import QGridLayout, QHBoxLayout, QPushButton, QWidget

from pulsearcade.core.games.path import PathState
from pulsearcade.core.games.pattern import CellState
from pulsearcade.ui.colors import ArcadeColors, blend_hex

_PATH_COLORS = {
    PathState.NEUTRAL: ArcadeColors.DARK_GRAPHITE,
    PathState.HINTING: ArcadeColors.SOFT_GOLD,
    PathState.SELECTED: ArcadeColors.NEON_RED,
    PathState.STABLE: ArcadeColors.SOFT_GOLD,
    PathState.BREAKING: ArcadeColors.MUTED_RED_GLOW,
}

_CELL_COLORS = {
    CellState.NEUTRAL: ArcadeColors.DARK_GRAPHITE,
    CellState.HIGHLIGHTED: ArcadeColors.SOFT_GOLD,
    CellState.CORRECT: blend_hex(ArcadeColors.SOFT_GOLD, ArcadeColors.DARK_GRAPHITE, 0.4),
    CellState.WRONG: ArcadeColors.MUTED_RED_GLOW,
}


def _tile_style(fill: str, border: str) -> str:
    return f"""
        QPushButton {{
            background: {fill};
            color: {ArcadeColors.TEXT_PRIMARY};
            border: 2px solid {border};
            border-radius: 12px;
            font-size: 16px;
            font-weight: 700;
        }}
        QPushButton:disabled {{
            color: {ArcadeColors.TEXT_MUTED};
        }}
        """


class PulseTrackWidget(QWidget):
    """Horizontal track with the target window and the moving marker."""

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._position = 0.0
        self._target = 0.5
        self._width = 0.15
        self._flash: Optional[bool] = None
        self.setMinimumSize(320, 80)

    def set_state(self, position: float, target: float, width: float, flash: Optional[bool] = None) -> None:
        """``flash`` tints the window: True for a hit, False for a miss, None for neither."""
        self._position = position
        self._target = target
        self._width = width
        self._flash = flash
        self.update()

    def paintEvent(self, event) -> None:
        super().paintEvent(event)
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing, True)

        margin = 20.0
        track_w = max(1.0, self.width() - 2 * margin)
        mid_y = self.height() / 2

        painter.setPen(Qt.NoPen)
        painter.setBrush(QColor(ArcadeColors.DARK_GRAPHITE))
        painter.drawRoundedRect(QRectF(margin, mid_y - 8, track_w, 16), 8, 8)

        window_color = ArcadeColors.SOFT_GOLD
        if self._flash is False:
            window_color = ArcadeColors.MUTED_RED_GLOW
        target_x = margin + track_w * (self._target - self._width / 2)
        painter.setBrush(QColor(window_color))
        painter.drawRoundedRect(QRectF(target_x, mid_y - 14, track_w * self._width, 28), 6, 6)

        marker_x = margin + track_w * self._position
        painter.setBrush(QColor(ArcadeColors.NEON_RED))
        painter.setPen(QPen(QColor(ArcadeColors.TEXT_PRIMARY), 2))
        painter.drawEllipse(QRectF(marker_x - 12, mid_y - 12, 24, 24))


class PathRowWidget(QWidget):
    """One button per path; the buttons only react while the engine is choosing."""

    def __init__(self, on_select: Callable[[int], None], parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._on_select = on_select
        self._buttons: List[QPushButton] = []
        self._layout = QHBoxLayout(self)
        self._layout.setSpacing(16)

    def set_states(self, states: List[PathState], can_select: bool) -> None:
        if len(states) != len(self._buttons):
            self._rebuild(len(states))
        for button, state in zip(self._buttons, states):
            color = _PATH_COLORS[state]
            border = blend_hex(color, "#FFFFFF", 0.2) if state is not PathState.NEUTRAL else ArcadeColors.SUBTLE_GRAY
            button.setStyleSheet(_tile_style(color, border))
            button.setText("✓" if state is PathState.STABLE else "✕" if state is PathState.BREAKING else "")
            button.setEnabled(can_select)

    def _rebuild(self, count: int) -> None:
        for button in self._buttons:
            button.setParent(None)
            button.deleteLater()
        self._buttons = []
        for index in range(count):
            button = QPushButton("")
            button.setMinimumSize(64, 180)
            button.clicked.connect(lambda _checked=False, i=index: self._on_select(i))
            self._layout.addWidget(button)
            self._buttons.append(button)


class PatternGridWidget(QWidget):
    """Square grid of cells for the pattern game."""

    def __init__(self, on_tap: Callable[[int], None], parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._on_tap = on_tap
        self._grid_size = 0
        self._buttons: List[QPushButton] = []
        self._layout = QGridLayout(self)
        self._layout.setSpacing(10)

    def set_states(self, grid_size: int, states: List[CellState], can_tap: bool) -> None:
        if grid_size != self._grid_size:
            self._rebuild(grid_size)
        for button, state in zip(self._buttons, states):
            color = _CELL_COLORS[state]
            border = ArcadeColors.SUBTLE_GRAY if state is CellState.NEUTRAL else color
            button.setStyleSheet(_tile_style(color, border))
            button.setEnabled(can_tap)

    def _rebuild(self, grid_size: int) -> None:
        for button in self._buttons:
            button.setParent(None)
            button.deleteLater()
        self._buttons = []
        self._grid_size = grid_size
        for index in range(grid_size * grid_size):
            button = QPushButton("")
            button.setFixedSize(70, 70)
            button.clicked.connect(lambda _checked=False, i=index: self._on_tap(i))
            self._layout.addWidget(button, index // grid_size, index % grid_size)
            self._buttons.append(button)
