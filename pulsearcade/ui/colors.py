"""Theme colors and color utilities for the UI."""

from pulsearcade.core.models import Difficulty, GameKind


class ArcadeColors:
    """Dark neon palette."""

    BG_TOP = "#121216"
    BG_BOTTOM = "#1c1c24"

    DARK_GRAPHITE = "#23232b"
    SUBTLE_GRAY = "#8a8a96"

    NEON_RED = "#ff2e4d"
    SOFT_GOLD = "#f5c451"
    MUTED_RED_GLOW = "#b8323f"

    CARD_BG = "rgba(255, 255, 255, 0.06)"
    CARD_BORDER = "rgba(255, 255, 255, 0.12)"

    TEXT_PRIMARY = "#f4f4f6"
    TEXT_SECONDARY = "#b4b4c0"
    TEXT_MUTED = "#6e6e7a"


GAME_ACCENTS = {
    GameKind.PULSE_TIMING: ArcadeColors.NEON_RED,
    GameKind.PATH_PREDICTION: ArcadeColors.SOFT_GOLD,
    GameKind.PATTERN_MEMORY: ArcadeColors.MUTED_RED_GLOW,
}

DIFFICULTY_ACCENTS = {
    Difficulty.EASY: ArcadeColors.SOFT_GOLD,
    Difficulty.MEDIUM: ArcadeColors.NEON_RED,
    Difficulty.HARD: ArcadeColors.MUTED_RED_GLOW,
}


def blend_hex(a: str, b: str, t: float) -> str:
    """Blend two #RRGGBB colors. t=0 -> a, t=1 -> b."""
    a = a.strip()
    b = b.strip()
    if not (a.startswith("#") and b.startswith("#") and len(a) == 7 and len(b) == 7):
        return a
    try:
        ar, ag, ab = int(a[1:3], 16), int(a[3:5], 16), int(a[5:7], 16)
        br, bg, bb = int(b[1:3], 16), int(b[3:5], 16), int(b[5:7], 16)
    except ValueError:
        return a
    t = max(0.0, min(1.0, float(t)))
    r = int(ar + (br - ar) * t)
    g = int(ag + (bg - ag) * t)
    bl = int(ab + (bb - ab) * t)
    return f"#{r:02X}{g:02X}{bl:02X}"
