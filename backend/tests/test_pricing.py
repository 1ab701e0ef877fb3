from __future__ import annotations

import pytest

from coinstore.services.pricing import (
    DEFAULT_PRICING,
    PricingConfig,
    compute_coins,
    normalize_rate,
    round_half_up,
)


def test_round_half_up_rounds_halves_away_from_zero():
    assert round_half_up(2.5) == 3
    assert round_half_up(3.5) == 4
    assert round_half_up(2.4999) == 2
    assert round_half_up(0) == 0


@pytest.mark.parametrize("rate", [1, 2, 9, 12, 17, 500, 1000])
def test_first_pack_gets_no_bonus(rate):
    assert compute_coins(45, rate) == round_half_up(45 * rate)


@pytest.mark.parametrize("price", [1, 44, 46, 99, 149, 1499])
@pytest.mark.parametrize("rate", [1, 9, 12, 1000])
def test_other_packs_get_ten_bonus_coins(price, rate):
    assert compute_coins(price, rate) == round_half_up(price * rate) + 10


def test_compute_coins_examples():
    assert compute_coins(99, 9) == 901
    assert compute_coins(45, 9) == 405
    assert compute_coins(1499, 12) == 17998


def test_custom_pricing_config():
    config = PricingConfig(first_pack_price=99, bonus_coins=25)
    assert compute_coins(99, 9, config) == 891
    assert compute_coins(45, 9, config) == 430


@pytest.mark.parametrize(
    "value, expected",
    [
        (12, 12),
        ("12", 12),
        (12.5, 13),
        (0.5, 1),
        (1000, 1000),
        (999.6, 1000),
    ],
)
def test_normalize_rate_accepts_and_rounds(value, expected):
    assert normalize_rate(value) == expected


@pytest.mark.parametrize(
    "value",
    [0, -1, 1001, 1000.01, 0.4, "abc", None, float("nan"), float("inf")],
)
def test_normalize_rate_rejects(value):
    assert normalize_rate(value) is None


def test_default_rate_is_nine():
    assert DEFAULT_PRICING.default_rate == 9
    assert DEFAULT_PRICING.max_rate == 1000
