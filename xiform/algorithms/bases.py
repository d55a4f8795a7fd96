"""
Orthogonal bases (:mod:`~xiform.algorithms.bases`)
===========================================================================

Compute quantities related to the basis functions of multipole expansions
and spherical Bessel transforms.

.. autosummary::

    spherical_besselj
    legendre_polynomial

|

"""
# pylint: disable=no-name-in-module
from scipy.special import eval_legendre, spherical_jn


def spherical_besselj(ell, x, derivative=False):
    r"""Evaluate the spherical Bessel function of the first kind or
    its derivative.

    This returns :math:`j_{\ell}(x)` or :math:`j'_{\ell}(x)` of order
    :math:`\ell \geqslant 0`.

    Parameters
    ----------
    ell : int, array_like
        Order of the spherical Bessel function, ``ell >= 0``.
    x : float, array_like
        Argument of the spherical Bessel function.
    derivative : bool, optional
        If `True` (default is `False`), evaluate the derivative instead.

    Returns
    -------
    float, array_like
        :math:`j_{\ell}` or :math:`j'_{\ell}` value at `x`.

    """
    return spherical_jn(ell, x, derivative=derivative)


def legendre_polynomial(ell, mu):
    r"""Evaluate the Legendre polynomial :math:`\mathcal{L}_\ell(\mu)` of
    degree :math:`\ell \geqslant 0`.

    Parameters
    ----------
    ell : int
        Degree of the Legendre polynomial, ``ell >= 0``.
    mu : float, array_like
        Argument of the Legendre polynomial, usually the cosine of the
        angle to the line of sight in the interval ``[-1, 1]``.

    Returns
    -------
    float, array_like
        :math:`\mathcal{L}_\ell` value at `mu`.

    """
    return eval_legendre(ell, mu)
