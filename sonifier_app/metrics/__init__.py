"""Per-tick mappings from price deltas to tones and trend states"""

from .tone import ToneMapper, map_delta, neutral_tone
from .trend import TrendClassifier, classify, classify_window

__all__ = [
    "ToneMapper",
    "TrendClassifier",
    "map_delta",
    "neutral_tone",
    "classify",
    "classify_window",
]
