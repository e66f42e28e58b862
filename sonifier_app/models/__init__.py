"""
Event models module.

Immutable per-tick value objects emitted by the synchronization engine.
Follows the frozen dataclass convention used across the package.
"""
