"""Configuration validation utilities."""

from dataclasses import dataclass, fields
from typing import Any

from .defaults import (
    AnimationParams,
    AudioParams,
    ChartParams,
    FetchParams,
    PlaybackParams,
    ToneParams,
    TrendParams,
)

OVERLAP_POLICIES = ("truncate", "queue")
ZERO_DELTA_MODES = ("neutral", "silence")

_SECTIONS = {
    "playback": PlaybackParams,
    "tone": ToneParams,
    "trend": TrendParams,
    "fetch": FetchParams,
    "chart": ChartParams,
    "animation": AnimationParams,
    "audio": AudioParams,
}


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class ConfigValidator:
    """Validates configuration parameters."""

    @staticmethod
    def validate_playback_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate playback parameters."""
        errors = []

        if "tick_interval_ms" in params:
            value = params["tick_interval_ms"]
            if not _is_int(value) or value <= 0:
                errors.append(ValidationError(
                    field="tick_interval_ms",
                    message="Must be a positive integer",
                    value=value
                ))

        if "overlap_policy" in params:
            value = params["overlap_policy"]
            if value not in OVERLAP_POLICIES:
                errors.append(ValidationError(
                    field="overlap_policy",
                    message=f"Must be one of {', '.join(OVERLAP_POLICIES)}",
                    value=value
                ))

        if "frame_rate_hz" in params:
            value = params["frame_rate_hz"]
            if not _is_int(value) or value <= 0:
                errors.append(ValidationError(
                    field="frame_rate_hz",
                    message="Must be a positive integer",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_tone_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate tone mapping parameters."""
        errors = []

        for name in ("base_frequency_hz", "min_hz", "max_hz"):
            if name in params:
                value = params[name]
                if not _is_number(value) or value <= 0:
                    errors.append(ValidationError(
                        field=name,
                        message="Must be a positive number",
                        value=value
                    ))

        min_hz = params.get("min_hz")
        max_hz = params.get("max_hz")
        if _is_number(min_hz) and _is_number(max_hz) and min_hz > max_hz:
            errors.append(ValidationError(
                field="min_hz",
                message="Must not exceed max_hz",
                value=min_hz
            ))

        if "pitch_span" in params:
            value = params["pitch_span"]
            if not _is_number(value) or value < 0:
                errors.append(ValidationError(
                    field="pitch_span",
                    message="Must be a non-negative number",
                    value=value
                ))

        for name in ("min_duration_ms", "max_duration_ms", "neutral_duration_ms"):
            if name in params:
                value = params[name]
                if not _is_int(value) or value <= 0:
                    errors.append(ValidationError(
                        field=name,
                        message="Must be a positive integer",
                        value=value
                    ))

        min_duration = params.get("min_duration_ms")
        max_duration = params.get("max_duration_ms")
        if _is_int(min_duration) and _is_int(max_duration) and min_duration > max_duration:
            errors.append(ValidationError(
                field="min_duration_ms",
                message="Must not exceed max_duration_ms",
                value=min_duration
            ))

        for name in ("min_amplitude", "max_amplitude", "neutral_amplitude"):
            if name in params:
                value = params[name]
                if not _is_number(value) or value < 0 or value > 1:
                    errors.append(ValidationError(
                        field=name,
                        message="Must be a number between 0 and 1",
                        value=value
                    ))

        if "zero_delta_mode" in params:
            value = params["zero_delta_mode"]
            if value not in ZERO_DELTA_MODES:
                errors.append(ValidationError(
                    field="zero_delta_mode",
                    message=f"Must be one of {', '.join(ZERO_DELTA_MODES)}",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_trend_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate trend classification parameters."""
        errors = []

        if "epsilon" in params:
            value = params["epsilon"]
            if not _is_number(value) or value <= 0:
                errors.append(ValidationError(
                    field="epsilon",
                    message="Must be a positive number",
                    value=value
                ))

        if "window" in params:
            value = params["window"]
            if not _is_int(value) or value <= 0:
                errors.append(ValidationError(
                    field="window",
                    message="Must be a positive integer",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_fetch_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate price fetch parameters."""
        errors = []

        if "window_days" in params:
            value = params["window_days"]
            if not _is_int(value) or value <= 0:
                errors.append(ValidationError(
                    field="window_days",
                    message="Must be a positive integer",
                    value=value
                ))

        if "max_retries" in params:
            value = params["max_retries"]
            if not _is_int(value) or value < 0:
                errors.append(ValidationError(
                    field="max_retries",
                    message="Must be a non-negative integer",
                    value=value
                ))

        if "timeout_seconds" in params:
            value = params["timeout_seconds"]
            if not _is_number(value) or value <= 0:
                errors.append(ValidationError(
                    field="timeout_seconds",
                    message="Must be a positive number",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_unknown_fields(config: dict[str, Any]) -> list[ValidationError]:
        """Reject sections and keys that no parameter dataclass declares."""
        errors = []

        for section, params in config.items():
            if section not in _SECTIONS:
                errors.append(ValidationError(
                    field=section,
                    message="Unknown configuration section",
                    value=params
                ))
                continue
            if not isinstance(params, dict):
                errors.append(ValidationError(
                    field=section,
                    message="Must be a mapping",
                    value=params
                ))
                continue
            known = {f.name for f in fields(_SECTIONS[section])}
            for key in params:
                if key not in known:
                    errors.append(ValidationError(
                        field=f"{section}.{key}",
                        message="Unknown configuration key",
                        value=params[key]
                    ))

        return errors

    @staticmethod
    def validate_config(config: dict[str, Any]) -> list[ValidationError]:
        """Validate complete configuration."""
        errors = ConfigValidator.validate_unknown_fields(config)
        if errors:
            return errors

        if "playback" in config:
            errors.extend(ConfigValidator.validate_playback_params(config["playback"]))

        if "tone" in config:
            errors.extend(ConfigValidator.validate_tone_params(config["tone"]))

        if "trend" in config:
            errors.extend(ConfigValidator.validate_trend_params(config["trend"]))

        if "fetch" in config:
            errors.extend(ConfigValidator.validate_fetch_params(config["fetch"]))

        return errors
