from decimal import Decimal

import pytest

from debt_coach.data_models import WorkingBalance
from debt_coach.strategies import avalanche, get_selector, select_target, snowball


def _wb(balance, apr):
    return WorkingBalance(apr=Decimal(str(apr)), minimum_payment=Decimal("0"), balance=Decimal(str(balance)))


def test_no_open_debts_selects_nothing():
    balances = [_wb(0, 20), _wb(0, 5)]
    assert avalanche(balances) is None
    assert snowball(balances) is None
    assert avalanche([]) is None


def test_avalanche_ignores_closed_debts():
    balances = [_wb(0, 30), _wb(800, 12), _wb(300, 18)]
    assert avalanche(balances) == 2


def test_snowball_ignores_closed_debts():
    balances = [_wb(0, 30), _wb(800, 12), _wb(300, 18)]
    assert snowball(balances) == 2


def test_ties_pick_first_in_input_order():
    assert avalanche([_wb(100, 18), _wb(900, 18)]) == 0
    assert snowball([_wb(250, 5), _wb(250, 25)]) == 0


def test_selection_follows_current_balances():
    balances = [_wb(500, 10), _wb(400, 10)]
    assert snowball(balances) == 1
    balances[1].balance = Decimal("0")
    assert snowball(balances) == 0


def test_selector_lookup_is_case_insensitive():
    assert get_selector("Snowball") is snowball
    assert select_target([_wb(10, 1), _wb(5, 2)], "AVALANCHE") == 1


@pytest.mark.parametrize("name", ["fastest", "", None])
def test_unknown_strategy_raises(name):
    with pytest.raises(ValueError):
        get_selector(name)
