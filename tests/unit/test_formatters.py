"""Tests for display formatting and number coercion helpers."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from billing_core.utils.formatters import date_in, date_iso, money_in, num_in
from billing_core.utils.number_format import coerce_decimal, round_money


# ---------------------------------------------------------------------------
# num_in / money_in
# ---------------------------------------------------------------------------

@pytest.mark.parametrize('value, expected', [
    (0, '0.00'),
    (999, '999.00'),
    (1000, '1,000.00'),
    (125000, '1,25,000.00'),
    (1234567.891, '12,34,567.89'),
    (Decimal('-98765.4'), '-98,765.40'),
])
def test_num_in_indian_grouping(value, expected):
    assert num_in(value) == expected


def test_num_in_significant_decimals():
    assert num_in(1500.5, decimals=None) == '1,500.5'
    assert num_in('185.00', decimals=None) == '185'


@pytest.mark.parametrize('value', [None, '', 'abc', float('nan')])
def test_num_in_invalid(value):
    assert num_in(value) == '-'


def test_money_in():
    assert money_in(212.4) == '₹212.40'
    assert money_in(-30) == '-₹30.00'
    assert money_in(Decimal('0.005')) == '₹0.01'
    assert money_in(5, currency='USD') == '$5.00'
    assert money_in(None) == '-'


# ---------------------------------------------------------------------------
# dates
# ---------------------------------------------------------------------------

def test_date_in():
    assert date_in(date(2026, 10, 19)) == '19 Oct'
    assert date_in(datetime(2026, 3, 5, 14, 0)) == '5 Mar'
    assert date_in('2026-10-05T00:00:00.000Z') == '5 Oct'
    assert date_in('not a date') == '-'


def test_date_iso():
    assert date_iso(date(2026, 1, 2)) == '2026-01-02'
    assert date_iso(datetime(2026, 1, 2, 23, 59)) == '2026-01-02'
    assert date_iso('') is None


# ---------------------------------------------------------------------------
# coerce_decimal / round_money
# ---------------------------------------------------------------------------

@pytest.mark.parametrize('raw, expected', [
    ('12.5', Decimal('12.5')),
    (' 7 ', Decimal('7')),
    (0.1, Decimal('0.1')),
    (3, Decimal('3')),
    ('abc', Decimal('0')),
    (True, Decimal('0')),
    (None, Decimal('0')),
])
def test_coerce_decimal(raw, expected):
    assert coerce_decimal(raw) == expected


def test_round_money_half_up():
    assert round_money('2.675') == Decimal('2.68')
    assert round_money('2.665') == Decimal('2.67')
