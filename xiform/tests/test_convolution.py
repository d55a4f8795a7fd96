import numpy as np
import pytest

from xiform.algorithms.convolution import cyclic_convolution
from xiform.utils import PreconditionError


def direct_cyclic_convolution(a, b):
    """Brute-force cyclic convolution as a correctness oracle.

    """
    length = len(a)
    return np.asarray([
        sum(a[m] * b[(j - m) % length] for m in range(length))
        for j in range(length)
    ])


@pytest.mark.parametrize("length", [1, 2, 7, 16, 33])
def test_cyclic_convolution(length):

    rng = np.random.default_rng(length)
    a, b = rng.normal(size=(2, length))

    assert np.allclose(
        cyclic_convolution(a, b), direct_cyclic_convolution(a, b)
    ), "FFT cyclic convolution disagrees with direct summation."


def test_cyclic_convolution_complex():

    rng = np.random.default_rng(0)
    a = rng.normal(size=8) + 1j * rng.normal(size=8)
    b = rng.normal(size=8)

    assert np.allclose(
        cyclic_convolution(a, b, real=False), direct_cyclic_convolution(a, b)
    ), "Complex FFT cyclic convolution disagrees with direct summation."


def test_cyclic_convolution_shift():

    impulse = np.zeros(6)
    impulse[2] = 1.
    sequence = np.arange(6.)

    assert np.allclose(
        cyclic_convolution(impulse, sequence), np.roll(sequence, 2)
    ), "Convolution with a shifted impulse is not a cyclic shift."


@pytest.mark.parametrize(
    "a,b",
    [
        ([1., 2.], [1., 2., 3.]),
        ([], []),
        ([[1., 2.]], [[1., 2.]]),
    ]
)
def test_cyclic_convolution_precondition(a, b):
    with pytest.raises(PreconditionError):
        cyclic_convolution(a, b)
