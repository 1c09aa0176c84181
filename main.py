import argparse
import logging
from pathlib import Path

from battery.app import BatteryApp
from config.loader import load_settings
from config.settings import WindowConfig


def main() -> None:
    parser = argparse.ArgumentParser(description="Mental clarity test battery")
    parser.add_argument("--settings", type=Path, default=Path("data/battery_settings.json"))
    parser.add_argument("--width", type=int, default=WindowConfig.width)
    parser.add_argument("--height", type=int, default=WindowConfig.height)
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    settings = load_settings(args.settings)
    app = BatteryApp(WindowConfig(width=args.width, height=args.height), settings)
    app.run()


if __name__ == "__main__":
    main()
