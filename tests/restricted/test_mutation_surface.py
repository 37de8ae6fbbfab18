"""The named arithmetic methods all funnel through the sanitize loop."""

from __future__ import annotations

import operator

import numpy as np
import pytest

from restricted_types import InvalidAssignmentError, RestrictedDyn
from restricted_types.strategies import (
    array_in_range,
    clamp_into,
    clip_array,
    in_range,
    modulo_offset,
    wrap_into,
)


def _byte(value: int) -> RestrictedDyn[int]:
    return RestrictedDyn(value, in_range(0, 255), wrap_into(0, 255))


@pytest.mark.parametrize(
    "start, method, operand, expected",
    [
        (30, "sub", 15, 15),
        (30, "add", 300, 74),
        (0xFF, "bitand", 0b1010, 10),
        (0b0001, "bitor", 0b1000, 9),
        (0xFF, "bitxor", 0x0F, 0xF0),
        (200, "shl", 1, 144),
        (200, "shr", 3, 25),
        (100, "mul", 3, 44),
        (100, "floordiv", 7, 14),
        (100, "rem", 7, 2),
        (3, "pow", 6, 217),
    ],
)
def test_binary_methods_on_wrapped_byte(start: int, method: str, operand: int, expected: int) -> None:
    wrapped = _byte(start)

    result = getattr(wrapped, method)(operand)

    assert result is wrapped
    assert result.get() == expected


def test_sub_wraps_below_lower_bound() -> None:
    num = RestrictedDyn(30, in_range(20, 40), wrap_into(20, 40))

    assert num.sub(15).get() == 36


def test_mul_with_modulo_offset() -> None:
    num = RestrictedDyn(25, in_range(20, 40), modulo_offset(20, 20))

    assert num.mul(2).get() == 30


def test_rem_lands_back_in_range() -> None:
    num = RestrictedDyn(39, in_range(20, 40), modulo_offset(20, 20))

    assert num.rem(7).get() == 24


def test_div_is_true_division() -> None:
    num = RestrictedDyn(30.0, in_range(0.0, 10.0), clamp_into(0.0, 10.0))
    assert num.get() == 10.0

    assert num.div(4).get() == 2.5
    assert num.div(0.125).get() == 10.0


def test_shr_needs_several_sanitizer_passes() -> None:
    num = RestrictedDyn(200, lambda n: n >= 32, lambda n: n * 2)

    # 6 -> 12 -> 24 -> 48
    assert num.shr(5).get() == 48


def test_neg_is_corrected() -> None:
    num = RestrictedDyn(5, in_range(0, 10), abs)

    assert num.neg().get() == 5


def test_invert_is_bitwise_complement() -> None:
    assert _byte(0).invert().get() == 255
    assert _byte(0b1111_0000).invert().get() == 0b0000_1111


def test_not_is_logical_negation() -> None:
    flag = RestrictedDyn(True, lambda b: isinstance(b, bool), bool)

    assert flag.not_().get() is False
    assert flag.not_().get() is True


def test_not_can_be_forbidden() -> None:
    flag = RestrictedDyn.strict(True, lambda b: b is True)

    with pytest.raises(InvalidAssignmentError):
        flag.not_()
    assert flag.get() is True


def test_apply_accepts_custom_transformations() -> None:
    num = RestrictedDyn(22, in_range(20, 40), modulo_offset(20, 20))

    num.apply(lambda value, a, b: value * a + b, 2, 3)

    # 47 -> 27
    assert num.get() == 27


def test_chained_operations_revalidate_each_step() -> None:
    seen = []

    def check(n: int) -> bool:
        seen.append(n)
        return 20 <= n <= 40

    num = RestrictedDyn(22, check, modulo_offset(20, 20))
    num = num.add(37).sub(1).mul(2)

    # 59 -> 39, 38, 76 -> 36
    assert num.get() == 36
    assert 59 in seen and 76 in seen


def test_matmul_on_array_values() -> None:
    matrix = np.array([[1.0, 2.0], [3.0, 4.0]])
    wrapped = RestrictedDyn(matrix, array_in_range(0.0, 5.0), clip_array(0.0, 5.0))

    wrapped.matmul(np.array([[2.0, 0.0], [0.0, 2.0]]))

    np.testing.assert_allclose(wrapped.get(), np.array([[2.0, 4.0], [5.0, 5.0]]))


def test_array_arithmetic_with_non_finite_result() -> None:
    wrapped = RestrictedDyn(np.array([1.0, 0.0]), array_in_range(-1.0, 1.0), clip_array(-1.0, 1.0))

    with np.errstate(divide="ignore", invalid="ignore"):
        wrapped.div(np.array([0.0, 0.0]))

    np.testing.assert_allclose(wrapped.get(), np.array([1.0, -1.0]))


@pytest.mark.parametrize("method", ["add", "sub", "mul", "floordiv", "rem", "bitand", "bitor", "bitxor", "shl", "shr"])
def test_binary_methods_match_operator_module(method: str) -> None:
    ops = {
        "add": operator.add,
        "sub": operator.sub,
        "mul": operator.mul,
        "floordiv": operator.floordiv,
        "rem": operator.mod,
        "bitand": operator.and_,
        "bitor": operator.or_,
        "bitxor": operator.xor,
        "shl": operator.lshift,
        "shr": operator.rshift,
    }
    unrestricted = RestrictedDyn(13, lambda n: True, lambda n: n)

    assert getattr(unrestricted, method)(3).get() == ops[method](13, 3)
