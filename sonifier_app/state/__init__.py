"""
Playback clock and session runtime module.

Drives the shared playback timeline (IDLE → RUNNING ⇄ PAUSED → FINISHED)
and owns the lifecycle of the one active playback session.
"""
