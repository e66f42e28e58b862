"""
Configuration module.

Default playback parameters, YAML-backed per-asset overrides and
configuration validation.
"""
