"""Configuration loader with 3-tier parameter precedence."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml

from .defaults import (
    DEFAULT_ASSETS,
    AnimationParams,
    AssetInfo,
    AudioParams,
    ChartParams,
    DefaultConfig,
    FetchParams,
    PlaybackParams,
    ToneParams,
    TrendParams,
    get_default_config,
)

ASSETS_FILE = "assets.yaml"


@dataclass(frozen=True)
class ConfigLoader:
    """Manages configuration loading with 3-tier precedence."""

    config_dir: Path
    defaults: DefaultConfig

    @classmethod
    def create(cls, config_dir: Optional[Path] = None) -> "ConfigLoader":
        """Create a ConfigLoader instance."""
        if config_dir is None:
            config_dir = Path(__file__).parent.parent.parent / "config"

        return cls(
            config_dir=Path(config_dir),
            defaults=get_default_config(),
        )

    def _load_assets_file(self) -> dict[str, Any]:
        assets_file = self.config_dir / ASSETS_FILE

        if not assets_file.exists():
            return {}

        with open(assets_file) as f:
            assets_config = yaml.safe_load(f) or {}

        return assets_config.get("assets", {}) or {}

    def load_asset_config(self, asset_id: str) -> dict[str, Any]:
        """Load asset-specific configuration overrides."""
        entry = self._load_assets_file().get(asset_id, {}) or {}
        return entry.get("overrides", {}) or {}

    def list_assets(self) -> list[AssetInfo]:
        """Asset catalogue from assets.yaml, falling back to the built-in list."""
        entries = self._load_assets_file()
        if not entries:
            return list(DEFAULT_ASSETS)

        catalogue = []
        for asset_id, entry in entries.items():
            entry = entry or {}
            catalogue.append(AssetInfo(
                asset_id=asset_id,
                display_name=entry.get("display_name", asset_id.title()),
                ticker=entry.get("ticker", asset_id[:3].upper()),
                tagline=entry.get("tagline", ""),
                color=entry.get("color", "#ffffff"),
            ))
        return catalogue

    def merge_config(
        self,
        asset_id: str,
        session_overrides: Optional[dict[str, Any]] = None
    ) -> dict[str, Any]:
        """
        Merge configuration with 3-tier precedence.

        Priority order:
        1. Per-session overrides (highest priority)
        2. Asset-specific overrides from assets.yaml
        3. Global defaults (lowest priority)
        """
        config = self._dataclass_to_dict(self.defaults)

        asset_config = self.load_asset_config(asset_id)
        config = self._deep_merge(config, asset_config)

        if session_overrides:
            config = self._deep_merge(config, session_overrides)

        return config

    def build_config(self, config: dict[str, Any]) -> DefaultConfig:
        """Turn a merged (and validated) config dict back into parameter dataclasses."""
        return DefaultConfig(
            playback=PlaybackParams(**config.get("playback", {})),
            tone=ToneParams(**config.get("tone", {})),
            trend=TrendParams(**config.get("trend", {})),
            fetch=FetchParams(**config.get("fetch", {})),
            chart=ChartParams(**config.get("chart", {})),
            animation=AnimationParams(**config.get("animation", {})),
            audio=AudioParams(**config.get("audio", {})),
        )

    def _dataclass_to_dict(self, obj: Any) -> dict[str, Any]:
        """Convert nested dataclasses to dictionary."""
        if hasattr(obj, '__dataclass_fields__'):
            result = {}
            for field_name in obj.__dataclass_fields__:
                value = getattr(obj, field_name)
                if hasattr(value, '__dataclass_fields__'):
                    result[field_name] = self._dataclass_to_dict(value)
                else:
                    result[field_name] = value
            return result
        return obj  # type: ignore[no-any-return]

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result
