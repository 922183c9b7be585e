"""
Headless demo: launch a few rockets, fly them for a while, print the flight
summary. Optionally polls the live spot feed and saves the mission.

    python scripts/run_mission.py --seconds 20 --live --save missions/demo.json
"""

import logging
from pathlib import Path
import sys

import pandas as pd

sys.path.insert(0, str(Path(__file__).parent.parent))

from mission_config import ConfigManager
from mission_io import SpotPriceFeed, SpotPricePoller, save_mission
from rocket_engine import MissionControl
from rocket_utils import setup_logging

logger = logging.getLogger(__name__)

FRAME_DT = 1.0 / 60.0

DEMO_CONTRACTS = [
    "1 SPY 690C 0DTE",
    "2 SPY 640C DEC 20 @ 45.00",
    "-1 SPY 700P DEC 20",
    "SPY 800C",
]


def run(seconds: float, live: bool, config_file=None, save_path=None) -> pd.DataFrame:
    config = ConfigManager.load_config(config_file)
    mission = MissionControl(config)

    feed = SpotPriceFeed(config.feed)
    spot = feed.initial_spot() if live else config.feed.fallback_price
    mission.last_spot = spot

    for text in DEMO_CONTRACTS:
        mission.launch_from_text(text, spot=spot)

    poller = None
    if live:
        poller = SpotPricePoller(feed, mission.mailbox)
        poller.start()

    frames = int(seconds / FRAME_DT)
    try:
        for _ in range(frames):
            mission.tick(FRAME_DT)
    finally:
        if poller is not None:
            poller.stop(timeout=1.0)

    if save_path:
        save_mission(mission, save_path)

    return mission.get_flight_summary()


def main():
    import argparse

    parser = argparse.ArgumentParser(description="Fly a demo mission without rendering")
    parser.add_argument("--seconds", type=float, default=10.0, help="Simulated seconds")
    parser.add_argument("--live", action="store_true", help="Poll the spot price feed")
    parser.add_argument("--config", type=str, default=None, help="YAML/JSON config file")
    parser.add_argument("--save", type=str, default=None, help="Write the mission to this JSON file")
    parser.add_argument("--debug", action="store_true")
    args = parser.parse_args()

    setup_logging(level=logging.DEBUG if args.debug else logging.INFO, to_file=False)

    summary = run(args.seconds, args.live, args.config, args.save)

    columns = ['type', 'strike', 'spot', 'delta', 'moneyness', 'regime', 'fuel', 'pnl', 'breakeven']
    with pd.option_context('display.width', 160, 'display.float_format', '{:,.3f}'.format):
        print(summary[columns])
    print(f"\nTotal P/L: ${summary['pnl'].sum():,.2f}")


if __name__ == "__main__":
    main()
