"""Alert sound synthesis and playback using numpy + QSoundEffect.

Each selectable alert sound is rendered from a small recipe (a run of
sine notes with an ADSR envelope) into a WAV file.  Files are cached to
disk so later launches only load them.

Sound names match the familiar macOS alert names (``Glass``, ``Ping``,
...) so saved settings stay meaningful, but the audio is our own.
"""

from __future__ import annotations

import io
import logging
import wave
from dataclasses import dataclass
from pathlib import Path

import numpy as np

from PyQt6.QtCore import QObject, QUrl
from PyQt6.QtMultimedia import QSoundEffect

from ..settings import APP_SUPPORT_DIR
from ..timer.models import AVAILABLE_SOUNDS


logger = logging.getLogger(__name__)

# ── paths ────────────────────────────────────────────────────────────────

SOUNDS_DIR = APP_SUPPORT_DIR / "sounds"

SAMPLE_RATE = 44100


# ═══════════════════════════════════════════════════════════════════════════
#  WAV SYNTHESIS HELPERS
# ═══════════════════════════════════════════════════════════════════════════


def _make_envelope(
    length: int,
    attack: int = 200,
    decay: int = 400,
    sustain_level: float = 0.7,
    release: int = 800,
) -> np.ndarray:
    """ADSR envelope (all durations in samples)."""
    env = np.ones(length, dtype=np.float64)
    a = min(attack, length)
    if a > 0:
        env[:a] = np.linspace(0.0, 1.0, a)
    d_end = min(a + decay, length)
    if decay > 0 and d_end > a:
        env[a:d_end] = np.linspace(1.0, sustain_level, d_end - a)
    s_end = max(length - release, d_end)
    if s_end > d_end:
        env[d_end:s_end] = sustain_level
    if release > 0 and s_end < length:
        env[s_end:] = np.linspace(sustain_level, 0.0, length - s_end)
    return env


def _sine(freq: float, duration_s: float) -> np.ndarray:
    """Pure sine wave at *freq* Hz for *duration_s* seconds."""
    t = np.linspace(0, duration_s, int(SAMPLE_RATE * duration_s), endpoint=False)
    return np.sin(2 * np.pi * freq * t)


def _silence(duration_s: float) -> np.ndarray:
    return np.zeros(int(SAMPLE_RATE * duration_s))


def _to_wav_bytes(samples: np.ndarray) -> bytes:
    """Convert a float64 numpy array (-1..1) to 16-bit mono PCM WAV bytes."""
    samples = np.clip(samples, -1.0, 1.0)
    int_samples = (samples * 32767).astype(np.int16)

    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(SAMPLE_RATE)
        wf.writeframes(int_samples.tobytes())
    return buf.getvalue()


# ═══════════════════════════════════════════════════════════════════════════
#  RECIPES
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class SoundRecipe:
    """A sequence of notes rendered with the same envelope shape.

    ``sustain`` is the envelope's sustain level; ``overtone`` mixes in the
    octave above at that relative amplitude; the last note is held for
    ``tail`` seconds instead of ``note_s``.
    """

    notes: tuple[float, ...]
    note_s: float = 0.12
    gap_s: float = 0.03
    tail: float = 0.3
    amplitude: float = 0.5
    overtone: float = 0.0
    sustain: float = 0.4


RECIPES: dict[str, SoundRecipe] = {
    "Basso":     SoundRecipe((130.81, 98.00), note_s=0.18, tail=0.45, amplitude=0.6),
    "Blow":      SoundRecipe((349.23,), tail=0.6, amplitude=0.35, overtone=0.15, sustain=0.6),
    "Bottle":    SoundRecipe((587.33, 440.00), note_s=0.08, tail=0.25, overtone=0.2),
    "Frog":      SoundRecipe((220.00, 196.00, 220.00), note_s=0.06, gap_s=0.02, tail=0.08),
    "Funk":      SoundRecipe((293.66, 369.99, 293.66), note_s=0.09, tail=0.2, overtone=0.1),
    "Glass":     SoundRecipe((1046.50, 1567.98), note_s=0.06, tail=0.7, amplitude=0.4,
                             overtone=0.1, sustain=0.25),
    "Hero":      SoundRecipe((392.00, 493.88, 587.33, 783.99), note_s=0.15, tail=0.5,
                             overtone=0.1),
    "Morse":     SoundRecipe((800.0, 800.0, 800.0), note_s=0.05, gap_s=0.06, tail=0.15,
                             sustain=0.8),
    "Ping":      SoundRecipe((1318.51,), tail=0.6, amplitude=0.4, sustain=0.2),
    "Pop":       SoundRecipe((660.0,), tail=0.05, amplitude=0.45, sustain=0.0),
    "Purr":      SoundRecipe((110.00, 116.54, 110.00), note_s=0.1, gap_s=0.0, tail=0.2,
                             amplitude=0.5, sustain=0.7),
    "Sosumi":    SoundRecipe((698.46, 880.00, 698.46), note_s=0.1, tail=0.3, overtone=0.15),
    "Submarine": SoundRecipe((261.63,), tail=0.9, amplitude=0.45, overtone=0.25,
                             sustain=0.5),
    "Tink":      SoundRecipe((2093.00,), tail=0.12, amplitude=0.3, sustain=0.1),
}

SOUND_NAMES = AVAILABLE_SOUNDS


def render_sound(name: str) -> bytes:
    """Render the named alert sound as WAV bytes.

    Raises ``KeyError`` for names without a recipe.
    """
    recipe = RECIPES[name]
    parts: list[np.ndarray] = []
    last = len(recipe.notes) - 1
    for i, freq in enumerate(recipe.notes):
        duration = recipe.tail if i == last else recipe.note_s
        tone = _sine(freq, duration) * recipe.amplitude
        if recipe.overtone:
            tone = tone + _sine(freq * 2, duration) * recipe.overtone
        n = len(tone)
        env = _make_envelope(
            n,
            attack=min(120, n // 4),
            decay=n // 4,
            sustain_level=recipe.sustain,
            release=n // 2,
        )
        parts.append(tone * env)
        if i < last and recipe.gap_s > 0:
            parts.append(_silence(recipe.gap_s))
    # Pad so QSoundEffect doesn't clip the release
    parts.append(_silence(0.05))
    return _to_wav_bytes(np.concatenate(parts))


# ═══════════════════════════════════════════════════════════════════════════
#  SOUND MANAGER
# ═══════════════════════════════════════════════════════════════════════════


class SoundManager(QObject):
    """Manages alert-sound synthesis, caching, and playback.

    Usage::

        mgr = SoundManager(parent=self)
        mgr.play("Glass")
    """

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        sounds_dir: Path | None = None,
    ) -> None:
        super().__init__(parent)
        self._enabled = True
        self._volume = 0.7  # 0.0–1.0
        self._sounds_dir = sounds_dir or SOUNDS_DIR
        self._effects: dict[str, QSoundEffect] = {}

        self._ensure_wav_files()
        self._load_effects()

    # ── public API ────────────────────────────────────────────────────

    def set_volume(self, level: int) -> None:
        """Set volume (0-100).  Updates all loaded effects."""
        self._volume = max(0, min(level, 100)) / 100.0
        for effect in self._effects.values():
            effect.setVolume(self._volume)

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = enabled

    def play(self, name: str) -> bool:
        """Play a sound by name.  Returns False if disabled or unknown."""
        if not self._enabled:
            return False
        effect = self._effects.get(name)
        if effect is None:
            logger.warning("No alert sound named %r", name)
            return False
        effect.play()
        return True

    def has_sound(self, name: str) -> bool:
        return name in self._effects

    @property
    def volume(self) -> int:
        """Current volume as 0-100 integer."""
        return round(self._volume * 100)

    @property
    def enabled(self) -> bool:
        return self._enabled

    # ── internal ──────────────────────────────────────────────────────

    def _ensure_wav_files(self) -> None:
        """Render any missing WAV files into the cache directory."""
        self._sounds_dir.mkdir(parents=True, exist_ok=True)
        for name in SOUND_NAMES:
            path = self._sounds_dir / f"{name}.wav"
            if not path.exists():
                path.write_bytes(render_sound(name))
                logger.debug("Rendered alert sound %s", path)

    def _load_effects(self) -> None:
        """Create QSoundEffect instances from cached WAV files."""
        for name in SOUND_NAMES:
            path = self._sounds_dir / f"{name}.wav"
            if path.exists():
                effect = QSoundEffect(self)
                effect.setSource(QUrl.fromLocalFile(str(path)))
                effect.setVolume(self._volume)
                self._effects[name] = effect
