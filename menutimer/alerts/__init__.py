"""Alert package: sound synthesis and alert dispatch."""

from .dispatcher import AlertDispatcher
from .sounds import SoundManager, SOUND_NAMES, render_sound

__all__ = ["AlertDispatcher", "SoundManager", "SOUND_NAMES", "render_sound"]
