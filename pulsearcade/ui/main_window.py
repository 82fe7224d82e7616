from __future__ import annotations

import logging
import os
from typing import Dict, Optional

from PySide6.QtCore import Qt
from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import (
    QButtonGroup,
    QFrame,
    QGridLayout,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from pulsearcade.core.games.base import GameEngine, Phase
from pulsearcade.core.games.launcher import LevelLockedError, create_engine
from pulsearcade.core.games.path import PathPredictionEngine
from pulsearcade.core.games.pattern import PatternMemoryEngine
from pulsearcade.core.games.pulse import PulseFeedback, PulseTimingEngine
from pulsearcade.core.ledger import ProgressLedger
from pulsearcade.core.models import Difficulty, GameKind
from pulsearcade.ui.colors import DIFFICULTY_ACCENTS, GAME_ACCENTS, ArcadeColors
from pulsearcade.ui.game_widgets import PathRowWidget, PatternGridWidget, PulseTrackWidget
from pulsearcade.ui.models import build_level_tiles, recent_session_captions
from pulsearcade.ui.qt_scheduler import QtScheduler

logger = logging.getLogger(__name__)

_READY_HINTS = {
    GameKind.PULSE_TIMING: "Tap when the pulse aligns with the target zone",
    GameKind.PATH_PREDICTION: "Watch the paths carefully",
    GameKind.PATTERN_MEMORY: "Watch the pattern, then repeat it",
}

_PHASE_TEXT = {
    Phase.HINTING: "Observe the signals...",
    Phase.CHOOSING: "Choose the stable path!",
    Phase.SHOWING_PATTERN: "Watch the pattern...",
    Phase.PLAYER_TURN: "Your turn!",
}


class MainWindow(QMainWindow):
    """Hub with per-game level grids, and one game screen hosting the active engine."""

    def __init__(self, ledger: ProgressLedger) -> None:
        super().__init__()
        self._ledger = ledger
        self._scheduler = QtScheduler(self)
        self._unlock_all = os.environ.get("PULSEARCADE_UNLOCK_ALL") == "1"
        self._engine: Optional[GameEngine] = None
        self._selected_difficulty: Dict[GameKind, Difficulty] = {kind: Difficulty.EASY for kind in GameKind}

        self._stack = QStackedWidget()
        self._hub_screen = QWidget()
        self._game_screen = QWidget()
        self._stack.addWidget(self._hub_screen)
        self._stack.addWidget(self._game_screen)
        self.setCentralWidget(self._stack)
        self.setWindowTitle("Pulse Arcade")
        self.setStyleSheet(
            f"""
            QMainWindow, QWidget {{
                background: {ArcadeColors.BG_TOP};
                color: {ArcadeColors.TEXT_PRIMARY};
            }}
            QFrame#gameCard {{
                background: {ArcadeColors.CARD_BG};
                border: 1px solid {ArcadeColors.CARD_BORDER};
                border-radius: 16px;
            }}
            QLabel#muted {{ color: {ArcadeColors.TEXT_SECONDARY}; }}
            """
        )

        self._summary_label = QLabel("")
        self._recent_label = QLabel("")
        self._game_cards: Dict[GameKind, QFrame] = {}
        self._build_hub()
        self._build_game_screen()
        self._refresh_hub()

    # ------------------------------------------------------------------
    # Hub
    # ------------------------------------------------------------------

    def _build_hub(self) -> None:
        layout = QVBoxLayout(self._hub_screen)
        layout.setContentsMargins(32, 24, 32, 24)
        layout.setSpacing(16)

        header = QHBoxLayout()
        title = QLabel("Pulse Arcade")
        title.setStyleSheet("font-size: 28px; font-weight: 900;")
        header.addWidget(title, 1)
        reset_button = QPushButton("Reset Progress")
        reset_button.clicked.connect(self._reset_progress)
        header.addWidget(reset_button, 0, Qt.AlignRight)
        layout.addLayout(header)

        self._summary_label.setObjectName("muted")
        layout.addWidget(self._summary_label)

        self._cards_layout = QHBoxLayout()
        self._cards_layout.setSpacing(16)
        layout.addLayout(self._cards_layout, 1)

        recent_title = QLabel("Recent Sessions")
        recent_title.setStyleSheet("font-size: 16px; font-weight: 800;")
        layout.addWidget(recent_title)
        self._recent_label.setObjectName("muted")
        layout.addWidget(self._recent_label)

    def _refresh_hub(self) -> None:
        """Rebuild the game cards and the recent-session list from the ledger."""
        ledger = self._ledger
        stats = ledger.statistics
        self._summary_label.setText(
            f"Mastery {ledger.overall_mastery():.0f}%  ·  "
            f"Sessions {stats.total_sessions}  ·  "
            f"Rewards {ledger.rewards.total}"
        )
        self._recent_label.setText("\n".join(recent_session_captions(ledger)) or "No games played yet")
        for card in self._game_cards.values():
            card.setParent(None)
            card.deleteLater()
        self._game_cards = {}
        for kind in GameKind:
            card = self._build_game_card(kind)
            self._game_cards[kind] = card
            self._cards_layout.addWidget(card, 1)

    def _build_game_card(self, kind: GameKind) -> QFrame:
        card = QFrame()
        card.setObjectName("gameCard")
        layout = QVBoxLayout(card)
        layout.setContentsMargins(16, 16, 16, 16)
        layout.setSpacing(10)

        name = QLabel(kind.display_name)
        name.setStyleSheet(f"font-size: 20px; font-weight: 800; color: {GAME_ACCENTS[kind]};")
        layout.addWidget(name)
        description = QLabel(kind.description)
        description.setObjectName("muted")
        layout.addWidget(description)

        rewards = self._ledger.rewards.value(kind)
        progress = QLabel(
            f"{self._ledger.mastery_percent(kind):.0f}% mastery  ·  "
            f"{self._ledger.total_completed(kind)}/{self._ledger.total_levels(kind)} levels  ·  "
            f"{rewards} {kind.reward_name}"
        )
        progress.setObjectName("muted")
        progress.setWordWrap(True)
        layout.addWidget(progress)

        selected = self._selected_difficulty[kind]
        tabs = QHBoxLayout()
        group = QButtonGroup(card)
        for difficulty in Difficulty:
            button = QPushButton(difficulty.value)
            button.setCheckable(True)
            button.setChecked(difficulty is selected)
            unlocked = self._unlock_all or self._ledger.is_difficulty_unlocked(kind, difficulty)
            button.setEnabled(unlocked)
            if not unlocked:
                button.setText(f"🔒 {difficulty.value}")
            button.clicked.connect(lambda _checked=False, k=kind, d=difficulty: self._select_difficulty(k, d))
            group.addButton(button)
            tabs.addWidget(button)
        layout.addLayout(tabs)

        grid = QGridLayout()
        grid.setSpacing(8)
        accent = DIFFICULTY_ACCENTS[selected]
        for index, tile in enumerate(build_level_tiles(self._ledger, kind, selected, self._unlock_all)):
            button = QPushButton(tile.caption)
            button.setFixedSize(52, 52)
            button.setEnabled(tile.unlocked)
            border = accent if tile.is_current else ArcadeColors.CARD_BORDER
            fill = accent if tile.completed else ArcadeColors.DARK_GRAPHITE
            button.setStyleSheet(
                f"QPushButton {{ background: {fill}; border: 2px solid {border}; border-radius: 10px; }}"
            )
            if tile.best_score:
                button.setToolTip(f"Best score: {tile.best_score}")
            button.clicked.connect(
                lambda _checked=False, k=kind, d=selected, lv=tile.level: self._start_game(k, d, lv)
            )
            grid.addWidget(button, index // 5, index % 5)
        layout.addLayout(grid)
        layout.addStretch(1)
        return card

    def _select_difficulty(self, kind: GameKind, difficulty: Difficulty) -> None:
        self._selected_difficulty[kind] = difficulty
        self._refresh_hub()

    def _reset_progress(self) -> None:
        answer = QMessageBox.question(
            self,
            "Reset Progress",
            "This will permanently delete all your progress, rewards, and statistics. "
            "This action cannot be undone.",
        )
        if answer == QMessageBox.StandardButton.Yes:
            self._ledger.reset_all()
            self._selected_difficulty = {kind: Difficulty.EASY for kind in GameKind}
            self._refresh_hub()

    # ------------------------------------------------------------------
    # Game screen
    # ------------------------------------------------------------------

    def _build_game_screen(self) -> None:
        layout = QVBoxLayout(self._game_screen)
        layout.setContentsMargins(32, 24, 32, 24)
        layout.setSpacing(16)

        top = QHBoxLayout()
        exit_button = QPushButton("✕ Exit")
        exit_button.clicked.connect(self._exit_game)
        top.addWidget(exit_button, 0, Qt.AlignLeft)
        self._game_title = QLabel("")
        self._game_title.setStyleSheet("font-size: 22px; font-weight: 800;")
        top.addWidget(self._game_title, 1, Qt.AlignCenter)
        self._score_label = QLabel("")
        top.addWidget(self._score_label, 0, Qt.AlignRight)
        layout.addLayout(top)

        self._status_label = QLabel("")
        self._status_label.setAlignment(Qt.AlignCenter)
        self._status_label.setStyleSheet("font-size: 18px;")
        layout.addWidget(self._status_label)

        self._pulse_track = PulseTrackWidget()
        self._path_row = PathRowWidget(on_select=self._on_select_path)
        self._pattern_grid = PatternGridWidget(on_tap=self._on_tap_cell)
        for board in (self._pulse_track, self._path_row, self._pattern_grid):
            layout.addWidget(board, 1, Qt.AlignCenter)

        buttons = QHBoxLayout()
        self._start_button = QPushButton("Start")
        self._start_button.clicked.connect(self._on_start)
        self._tap_button = QPushButton("TAP")
        self._tap_button.setMinimumSize(120, 120)
        self._tap_button.clicked.connect(self._on_tap_pulse)
        self._retry_button = QPushButton("Retry")
        self._retry_button.clicked.connect(self._on_retry)
        self._continue_button = QPushButton("Continue")
        self._continue_button.clicked.connect(self._exit_game)
        for button in (self._start_button, self._tap_button, self._retry_button, self._continue_button):
            buttons.addWidget(button, 0, Qt.AlignCenter)
        layout.addLayout(buttons)

    def _start_game(self, kind: GameKind, difficulty: Difficulty, level: int) -> None:
        """Open the game screen for one level, if the unlock gate allows it."""
        self._close_engine()
        try:
            engine = create_engine(
                kind,
                difficulty,
                level,
                ledger=self._ledger,
                scheduler=self._scheduler,
                unlock_all=self._unlock_all,
            )
        except LevelLockedError as e:
            QMessageBox.information(self, "Locked", str(e))
            return
        self._engine = engine
        engine.subscribe(self._render_engine)
        self._game_title.setText(f"{kind.display_name}  ·  {difficulty.value} · Level {level}")
        self._pulse_track.setVisible(isinstance(engine, PulseTimingEngine))
        self._path_row.setVisible(isinstance(engine, PathPredictionEngine))
        self._pattern_grid.setVisible(isinstance(engine, PatternMemoryEngine))
        self._render_engine(engine)
        self._stack.setCurrentWidget(self._game_screen)

    def _render_engine(self, engine: GameEngine) -> None:
        phase = engine.phase
        self._score_label.setText(f"Score {engine.score}  ·  Round {engine.current_round}/{engine.total_rounds}")
        self._start_button.setVisible(phase is Phase.READY)
        self._retry_button.setVisible(phase is Phase.GAME_OVER)
        self._continue_button.setVisible(phase.is_terminal)
        self._continue_button.setText("Continue" if phase is Phase.VICTORY else "Exit")
        self._tap_button.setVisible(isinstance(engine, PulseTimingEngine) and not phase.is_terminal)
        self._tap_button.setEnabled(engine.accepts_input)

        if isinstance(engine, PulseTimingEngine):
            feedback = engine.feedback
            flash = None if feedback is None else feedback is not PulseFeedback.MISS
            self._pulse_track.set_state(engine.position, engine.target, engine.target_width, flash)
        elif isinstance(engine, PathPredictionEngine):
            self._path_row.set_states(engine.path_states, engine.accepts_input)
        elif isinstance(engine, PatternMemoryEngine):
            self._pattern_grid.set_states(engine.grid_size, engine.cell_states, engine.accepts_input)

        self._status_label.setText(self._status_text(engine))

    def _status_text(self, engine: GameEngine) -> str:
        phase = engine.phase
        if phase is Phase.READY:
            return _READY_HINTS[engine.kind]
        if phase is Phase.VICTORY:
            reward = self._ledger.reward_for(engine.score, engine.difficulty)
            return f"Level Complete!  +{reward} {engine.kind.reward_name}"
        if phase is Phase.GAME_OVER:
            return f"Try Again  ·  Score {engine.score}"
        if isinstance(engine, PulseTimingEngine) and engine.feedback is not None:
            return engine.feedback.value
        if isinstance(engine, PathPredictionEngine) and engine.round_won is not None:
            return "Correct!" if engine.round_won else "Wrong path!"
        if isinstance(engine, PatternMemoryEngine) and phase is Phase.PLAYER_TURN:
            return f"Your turn!  {engine.input_count}/{engine.pattern_length}"
        return _PHASE_TEXT.get(phase, "")

    def _on_start(self) -> None:
        if self._engine is not None:
            self._engine.start()

    def _on_retry(self) -> None:
        if self._engine is not None:
            self._engine.restart()

    def _on_tap_pulse(self) -> None:
        if isinstance(self._engine, PulseTimingEngine):
            self._engine.tap()

    def _on_select_path(self, index: int) -> None:
        if isinstance(self._engine, PathPredictionEngine):
            self._engine.select(index)

    def _on_tap_cell(self, index: int) -> None:
        if isinstance(self._engine, PatternMemoryEngine):
            self._engine.tap(index)

    def _close_engine(self) -> None:
        if self._engine is not None:
            self._engine.unsubscribe(self._render_engine)
            self._engine.close()
            self._engine = None

    def _exit_game(self) -> None:
        self._close_engine()
        self._refresh_hub()
        self._stack.setCurrentWidget(self._hub_screen)

    def closeEvent(self, event: QCloseEvent) -> None:
        """Stop the active game and persist progress when closing the app."""
        self._close_engine()
        if not self._ledger.flush():
            logger.warning("Some progress could not be written before exit")
        super().closeEvent(event)
