"""Tests for the signal rule table and SignalGenerator."""

import pytest

from soltrader.models.analysis import EntryAction
from soltrader.services.analysis.signal_generator import (
    SIGNAL_RULES,
    SignalGenerator,
    SignalRule,
)
from tests.factories.market import TokenPairFactory


@pytest.fixture
def generator() -> SignalGenerator:
    return SignalGenerator()


class TestRuleTable:
    """Each row of the table, in order."""

    @pytest.mark.parametrize(
        ("score", "h1", "h24", "rule_name", "action"),
        [
            (85, -8, 12, "strong_dip_in_uptrend", EntryAction.BUY_NOW),
            (70, -6, 65, "strong_dip_in_uptrend", EntryAction.BUY_NOW),
            (75, 2, 65, "strong_overextended", EntryAction.WAIT),
            (90, 0, 5, "strong_default", EntryAction.GOOD_ENTRY),
            (70, -5, 10, "strong_default", EntryAction.GOOD_ENTRY),
            (60, -7, 3, "moderate_dip_in_uptrend", EntryAction.GOOD_ENTRY),
            (55, 15, -2, "moderate_pumping", EntryAction.WAIT),
            (69, 10, 0, "moderate_default", EntryAction.CAUTION),
            (50, 0, -40, "moderate_default", EntryAction.CAUTION),
            (30, 0, -45, "weak_dumping", EntryAction.HIGH_RISK),
            (49, 0, -30, "weak_default", EntryAction.AVOID),
            (0, 50, 200, "weak_default", EntryAction.AVOID),
        ],
    )
    def test_first_matching_rule_wins(self, generator, score, h1, h24, rule_name, action):
        rule = generator.match(score, h1, h24)

        assert rule.name == rule_name
        assert rule.action is action

    @pytest.mark.parametrize("score", range(0, 101))
    def test_every_score_matches_exactly_one_default(self, generator, score):
        defaults = [r for r in SIGNAL_RULES if r.name.endswith("_default")]

        assert sum(r.matches(score, 0, 0) for r in defaults) == 1
        assert generator.match(score, 0, 0) in SIGNAL_RULES

    def test_rule_names_unique(self):
        names = [r.name for r in SIGNAL_RULES]

        assert len(names) == len(set(names))

    def test_no_match_raises(self):
        generator = SignalGenerator(
            rules=(
                SignalRule(
                    name="only_strong",
                    predicate=lambda s, h1, h24: s >= 70,
                    action=EntryAction.GOOD_ENTRY,
                    reason="strong",
                    take_profit_pct=20,
                    stop_loss_pct=10,
                ),
            )
        )

        with pytest.raises(LookupError):
            generator.match(10, 0, 0)


class TestSignal:
    def test_targets_from_current_price(self, generator):
        pair = TokenPairFactory(change_1h=-8, change_24h=12, price_usd="2.0")

        signal = generator.signal(pair, score=85)

        assert signal.entry_action is EntryAction.BUY_NOW
        assert signal.rule_name == "strong_dip_in_uptrend"
        assert signal.take_profit.percent == 25
        assert signal.take_profit.price == pytest.approx(2.5)
        assert signal.stop_loss.percent == 10
        assert signal.stop_loss.price == pytest.approx(1.8)
        assert signal.has_exit_plan

    def test_dumping_low_score_has_no_exit_plan(self, generator):
        pair = TokenPairFactory(change_24h=-55, price_usd="0.5")

        signal = generator.signal(pair, score=20)

        assert signal.entry_action is EntryAction.HIGH_RISK
        assert signal.take_profit.percent == 0
        assert signal.stop_loss.percent == 0
        assert signal.take_profit.price == pytest.approx(0.5)
        assert not signal.has_exit_plan

    def test_missing_price_gives_zero_targets(self, generator):
        pair = TokenPairFactory(price_usd=None)

        signal = generator.signal(pair, score=90)

        assert signal.take_profit.price == 0
        assert signal.stop_loss.price == 0
        assert signal.entry_reason
