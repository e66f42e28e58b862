#!/usr/bin/env python3
"""Headless price playback.

Fetches the last month of daily prices for one asset and plays it through
the synchronization engine, printing one line per tick. Tones are simulated
unless ``--audio`` is given, in which case they are played on the default
sound card through sounddevice.

Usage:
    python scripts/play_asset.py bitcoin
    python scripts/play_asset.py ethereum --interval-ms 500 --audio
    python scripts/play_asset.py --list
"""

import argparse
import sys
import time
from pathlib import Path

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sonifier_app.config.defaults import DefaultConfig
from sonifier_app.config.loader import ConfigLoader
from sonifier_app.data.fetcher import CoinGeckoPriceSource
from sonifier_app.data.models import PriceSeries
from sonifier_app.delivery.animation import SpriteAnimationSink
from sonifier_app.delivery.audio import SimulatedAudioSink, ThreadedAudioSink, ToneSynthesizer
from sonifier_app.delivery.chart import ProgressiveChartSink
from sonifier_app.delivery.stdout_delivery import StdoutEventObserver
from sonifier_app.errors import DataUnavailableError
from sonifier_app.logging import configure_logging
from sonifier_app.state.runtime import SessionManager, SinkSet


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Play a month of crypto prices as sound.")
    parser.add_argument("asset", nargs="?", help="Asset id, e.g. bitcoin")
    parser.add_argument("--list", action="store_true", help="List configured assets and exit")
    parser.add_argument("--interval-ms", type=int, help="Milliseconds per sample")
    parser.add_argument("--policy", choices=["truncate", "queue"], help="Tone overlap policy")
    parser.add_argument("--fps", type=int, help="Frames per second of the update loop")
    parser.add_argument("--json", action="store_true", help="Print events as JSON lines")
    parser.add_argument("--audio", action="store_true", help="Play tones on the sound card")
    parser.add_argument("--log-level", default="WARNING", help="Logging level")
    return parser


def make_sink_factory(args: argparse.Namespace):
    def factory(series: PriceSeries, config: DefaultConfig) -> SinkSet:
        if args.audio:
            from sonifier_app.delivery.device import SounddeviceOutput
            audio = ThreadedAudioSink(SounddeviceOutput(), ToneSynthesizer(config.audio))
        else:
            audio = SimulatedAudioSink()

        return SinkSet(
            chart=ProgressiveChartSink(series, config.chart),
            audio=audio,
            animation=SpriteAnimationSink(config.animation),
            observers=[StdoutEventObserver(format="json" if args.json else "pretty")],
        )

    return factory


def main() -> int:
    args = build_parser().parse_args()
    configure_logging(level=args.log_level)

    loader = ConfigLoader.create()

    if args.list or not args.asset:
        for asset in loader.list_assets():
            print(f"{asset.asset_id:<12} {asset.ticker:<5} {asset.display_name} - {asset.tagline}")
        return 0

    overrides: dict = {}
    if args.interval_ms is not None:
        overrides.setdefault("playback", {})["tick_interval_ms"] = args.interval_ms
    if args.policy is not None:
        overrides.setdefault("playback", {})["overlap_policy"] = args.policy
    if args.fps is not None:
        overrides.setdefault("playback", {})["frame_rate_hz"] = args.fps

    manager = SessionManager(
        price_source=CoinGeckoPriceSource(),
        config_loader=loader,
        sink_factory=make_sink_factory(args),
    )

    try:
        session = manager.select_asset(args.asset, overrides)
    except DataUnavailableError as e:
        print(f"Could not load {args.asset}: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return 2

    frame_s = 1.0 / session.config.playback.frame_rate_hz
    manager.start()
    last = time.monotonic()
    try:
        # Keep pumping after the last tick so queued tones still play
        while not session.clock.is_finished or manager.is_sounding():
            time.sleep(frame_s)
            now = time.monotonic()
            manager.update((now - last) * 1000.0)
            last = now
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
    finally:
        manager.return_home()

    return 0


if __name__ == "__main__":
    sys.exit(main())
