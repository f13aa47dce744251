import argparse
import logging
from pprint import pprint

from dotenv import load_dotenv

from .config import ASSET_TYPES, CorrelationConfig, PowerLawConfig
from .monitoring import LoggingMetricsSink, MetricsSink
from .pipeline.correlation import CorrelationEngine
from .pipeline.fear_greed import FearGreedEngine
from .pipeline.power_law import PowerLawEngine

# Load environment variables from .env file
load_dotenv()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Market Gauge CLI")
    parser.add_argument("--verbose", action="store_true", help="Log engine metrics to stderr")
    subparsers = parser.add_subparsers(dest="command", required=True)

    power_law = subparsers.add_parser("power-law", help="Fit the BTC power-law trend and report the current band")
    power_law.add_argument("--ticker", default="BTC-USD", help="Yahoo Finance ticker")
    power_law.add_argument("--min-points", type=int, help="Minimum valid points required for a fit")
    power_law.add_argument("--tail", type=int, default=5, help="Number of most recent points to print")

    fear_greed = subparsers.add_parser("fear-greed", help="Composite fear & greed score for an asset class")
    fear_greed.add_argument("--type", dest="asset_type", choices=ASSET_TYPES, default="stocks")

    correlation = subparsers.add_parser("correlation", help="Return correlation between two coins plus a peer basket")
    correlation.add_argument("--base", default="BTC/USDT")
    correlation.add_argument("--pair", default="ETH/USDT")
    correlation.add_argument("--window", type=int, help="Rolling window length")
    return parser


def main() -> None:
    args = build_parser().parse_args()
    if args.verbose:
        logging.basicConfig(level=logging.INFO)
    metrics = LoggingMetricsSink() if args.verbose else MetricsSink()

    if args.command == "power-law":
        config = PowerLawConfig(ticker=args.ticker)
        if args.min_points is not None:
            config.min_points = args.min_points
        report = PowerLawEngine(config=config, metrics=metrics).report()
        payload = report.to_dict()
        payload["data"] = payload["data"][-args.tail :] if args.tail > 0 else []
        print(report.analysis.regression.equation())
        pprint(payload)
        return

    if args.command == "fear-greed":
        report = FearGreedEngine(metrics=metrics).report(args.asset_type)
        pprint(report.to_dict())
        return

    if args.command == "correlation":
        config = CorrelationConfig(base_symbol=args.base, pair_symbol=args.pair)
        if args.window is not None:
            config.window = args.window
        report = CorrelationEngine(config=config, metrics=metrics).report()
        payload = report.to_dict()
        payload.pop("scatter")
        print(f"{payload['base']}/{payload['pair']} r = {payload['overall']['coefficient']:.4f} (n={payload['overall']['n']})")
        pprint(payload)


if __name__ == "__main__":
    main()
