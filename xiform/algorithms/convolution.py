r"""
Cyclic convolution (:mod:`~xiform.algorithms.convolution`)
===========================================================================

Convolve periodic sequences with the discrete Fourier transform.

For two sequences :math:`a_m` and :math:`b_m` of length :math:`N`, the
cyclic convolution is

.. math::

    (a \ast b)_j = \sum_{m=0}^{N-1} a_m b_{(j - m) \bmod N} \,,

which is computed as the inverse discrete Fourier transform of the
product of the forward transforms.

.. autosummary::

    cyclic_convolution

|

"""
import numpy as np
import scipy.fftpack as fftp

from xiform.utils import PreconditionError


def cyclic_convolution(a, b, real=True):
    """Compute the cyclic convolution of two sequences of equal length.

    Parameters
    ----------
    a, b : float or complex, array_like
        One-dimensional sequences of equal length.
    real : bool, optional
        If `True` (default), return the real part only.

    Returns
    -------
    float or complex :class:`numpy.ndarray`
        Cyclic convolution of `a` and `b`.

    Raises
    ------
    :class:`~xiform.utils.PreconditionError`
        If the sequences are not one-dimensional, empty or of different
        lengths.

    """
    a, b = np.asarray(a), np.asarray(b)

    if a.ndim != 1 or b.ndim != 1:
        raise PreconditionError("Sequences must be one-dimensional.")
    if len(a) != len(b):
        raise PreconditionError(
            f"Sequences have different lengths: {len(a)} and {len(b)}."
        )
    if not len(a):
        raise PreconditionError("Sequences are empty.")

    convolution = fftp.ifft(fftp.fft(a) * fftp.fft(b))

    return convolution.real if real else convolution
