import sys

import pytest

from market_gauge import cli
from market_gauge.data.schemas import CompositeScore, SentimentLabel
from market_gauge.pipeline.fear_greed import FearGreedReport


def test_parser_subcommands():
    parser = cli.build_parser()
    args = parser.parse_args(["fear-greed", "--type", "crypto"])
    assert args.command == "fear-greed"
    assert args.asset_type == "crypto"

    args = parser.parse_args(["correlation", "--window", "14"])
    assert args.window == 14
    assert args.base == "BTC/USDT"

    with pytest.raises(SystemExit):
        parser.parse_args(["fear-greed", "--type", "bonds"])


def test_fear_greed_command_prints_report(monkeypatch, capsys):
    class StubEngine:
        def __init__(self, metrics=None):
            self.metrics = metrics

        def report(self, asset_type):
            composite = CompositeScore(score=40, label=SentimentLabel.FEAR, confidence_percent=100)
            return FearGreedReport(asset_type=asset_type, composite=composite, readings=[])

    monkeypatch.setattr(cli, "FearGreedEngine", StubEngine)
    monkeypatch.setattr(sys, "argv", ["market-gauge", "fear-greed", "--type", "commodities"])
    cli.main()
    out = capsys.readouterr().out
    assert "'asset_type': 'commodities'" in out
    assert "'label': 'Fear'" in out
