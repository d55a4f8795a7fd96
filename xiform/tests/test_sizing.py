import numpy as np
import pytest

from xiform.algorithms.sizing import (
    MAX_LOG_STEP,
    characteristic_product,
    natural_log_step,
    settling_span,
    size_transform,
    small_parameter,
)
from xiform.utils import PreconditionError

from . import display_mathematica_query as show_query


@pytest.mark.parametrize(
    "ell,value",
    [
        (0, 1.),
        (2, 2 * np.pi ** (- 1/6) * (15 * np.sqrt(np.pi) / 8) ** (1/3)),
    ]
)
def test_characteristic_product(ell, value):

    show_query(f"2 Pi^(-1/(2*{ell} + 2)) Gamma[{ell} + 3/2]^(1/({ell} + 1))")
    assert characteristic_product(ell) == pytest.approx(value), \
        "Incorrect characteristic wavenumber--separation product."


def test_natural_log_step():

    assert natural_log_step(0, 1.) == pytest.approx(np.pi), \
        "Incorrect natural step for the zeroth order."
    assert natural_log_step(0, 0.1) == pytest.approx(np.pi / 100), \
        "Natural step does not scale as the squared small parameter."


@pytest.mark.parametrize("ell", [0, 2, 4])
def test_small_parameter(ell):

    eps_loose = small_parameter(1.e-2, ell)
    eps_tight = small_parameter(1.e-4, ell)

    assert 0. < eps_tight < eps_loose < 1., \
        "Small parameter does not decrease with the tolerance."


def test_small_parameter_out_of_domain():
    # Scaled tolerance is 0.3 / 0.457 > 0.35 for the eighth order.
    with pytest.raises(PreconditionError):
        small_parameter(0.3, 8)


@pytest.mark.parametrize("ell", [0, 2, 4])
def test_settling_span(ell):

    eps = small_parameter(1.e-3, ell)

    span = settling_span(ell, eps)
    span_unaligned = settling_span(ell, eps, aligned=False)

    periods = characteristic_product(ell) * np.exp(span) / (2 * np.pi)

    assert span >= span_unaligned > 0., \
        "Aligned settling span is narrower than the unaligned one."
    assert periods == pytest.approx(np.round(periods)), \
        "Settling window edge is not aligned with a kernel period."


@pytest.mark.parametrize("ell", [0, 2, 4, 6])
@pytest.mark.parametrize("tolerance", [1.e-2, 1.e-3, 1.e-4])
def test_size_transform(ell, tolerance):

    sizing = size_transform(ell, tolerance)

    assert sizing.log_step <= MAX_LOG_STEP * (1 + 1.e-12), \
        "Logarithmic step exceeds the maximum step."
    assert sizing.log_step <= natural_log_step(ell, sizing.small_parameter) \
        * (1 + 1.e-12), \
        "Logarithmic step exceeds the natural step."
    assert sizing.num_settling * sizing.log_step \
        == pytest.approx(sizing.settling_span), \
        "Settling steps do not tile the settling span."
    assert sizing.bias_exponent == (1 - ell) / 2, \
        "Incorrect bias exponent."


def test_size_transform_monotonicity():

    settling_steps = [
        size_transform(0, tolerance).num_settling
        for tolerance in [1.e-2, 1.e-3, 1.e-4]
    ]

    assert settling_steps == sorted(settling_steps), \
        "Settling window does not widen with a tighter tolerance."


@pytest.mark.parametrize(
    "ell,tolerance",
    [
        (1, 1.e-3),
        (-2, 1.e-3),
        (0, 0.),
        (0, 0.35),
        (0, -1.e-3),
    ]
)
def test_size_transform_precondition(ell, tolerance):
    with pytest.raises(PreconditionError):
        size_transform(ell, tolerance)
