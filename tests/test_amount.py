from decimal import Decimal

import pytest
from hypothesis import given, strategies as st

from rewards_e2e.amount import Amount

raw_values = st.integers(min_value=0, max_value=2 ** 256 - 1)
decimals = st.integers(min_value=0, max_value=36)


@pytest.mark.parametrize("number,dec,raw", [
    (1000, 18, 1000 * 10 ** 18),
    (1000, 6, 1000 * 10 ** 6),
    ("0.5", 18, 5 * 10 ** 17),
    (Decimal("1.000001"), 6, 1000001),
    (1e12, 18, 10 ** 30),
    (0, 6, 0),
])
def test_of_scales_to_raw_units(number, dec, raw):
    amount = Amount.of(number, dec)
    assert amount.value == raw
    assert amount.decimals == dec


def test_of_rejects_inexact_values():
    with pytest.raises(ValueError):
        Amount.of("0.0000001", 6)


def test_raw_value_must_be_int():
    with pytest.raises(TypeError):
        Amount(1.5, 18)
    with pytest.raises(TypeError):
        Amount(True, 18)


def test_usdc_and_susdc_of_same_value_are_equal():
    assert Amount.of(1000, 6) == Amount.of(1000, 18)
    assert Amount(1, 6) != Amount(1, 18)
    assert Amount(1, 18) < Amount(1, 6)


def test_downscale_floors():
    assert Amount(1999999999999, 18).to_decimals(6) == Amount(1, 6)
    assert Amount(-1, 18).to_decimals(6).value == -1


def test_arithmetic_keeps_larger_exponent():
    total = Amount.of(1, 6) + Amount(1, 18)
    assert total.decimals == 18
    assert total.value == 10 ** 18 + 1
    assert (Amount.of(3, 6) - Amount.of(1, 18)) == Amount.of(2, 6)


def test_zero_and_bool():
    assert Amount.zero().is_zero()
    assert not Amount.zero(6)
    assert Amount(1, 6)


def test_str_and_floor():
    amount = Amount(1500000, 6)
    assert str(amount) == "1.500000"
    assert amount.floor() == 1
    assert repr(amount) == "Amount(1500000, decimals=6)"


def test_compare_with_int_is_not_supported():
    assert (Amount(0) == 0) is False
    with pytest.raises(TypeError):
        Amount(0) + 0


@given(value=raw_values, dec=decimals)
def test_to_decimal_is_exact_for_uint256(value, dec):
    amount = Amount(value, dec)
    assert Amount.of(amount.to_decimal(), dec) == amount


@given(value=raw_values, dec=decimals, extra=st.integers(min_value=0, max_value=18))
def test_upscale_then_downscale_is_identity(value, dec, extra):
    amount = Amount(value, dec)
    assert amount.to_decimals(dec + extra).to_decimals(dec).value == value


@given(a=raw_values, b=raw_values, da=decimals, db=decimals)
def test_equal_amounts_hash_equal(a, b, da, db):
    x, y = Amount(a, da), Amount(b, db)
    if x == y:
        assert hash(x) == hash(y)
    assert (x < y) + (x == y) + (x > y) == 1
