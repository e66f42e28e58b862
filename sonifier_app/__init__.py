"""
Crypto Price Sonifier - Synchronized Price Playback Engine

Replays a 30 day price history for a crypto asset as a progressively drawn
chart, a pitch-modulated tone stream and a bull/bear animation state, all
advanced from one shared playback clock.
"""

__version__ = "0.1.0"
__author__ = "Sonifier Team"
