r"""
Numerical integration (:mod:`~xiform.algorithms.integration`)
===========================================================================

Integrate numerically over the cosine of the angle to the line of sight.

The multipole of order :math:`\ell` of a function :math:`f(\mu)` is

.. math::

    f_\ell = \frac{2\ell + 1}{2} \int_{-1}^{1} \operatorname{d}\!\mu \,
        f(\mu) \mathcal{L}_\ell(\mu) \,,

where :math:`\mathcal{L}_\ell` is the Legendre polynomial.

.. warning::

    Quadrature integration may suffer from poor convergence for functions
    that are not analytic in :math:`\mu \in [-1, 1]`.


.. autosummary::

    multipole_projection

|

"""
import warnings

import numpy as np
from scipy.integrate import IntegrationWarning, quad

from xiform.utils import NumericalDivergenceError, check_multipole_order

from .bases import legendre_polynomial

QUADRATURE_TOLERANCE = 1.e-12
"""Tolerance of multipole quadrature relative to the integrand scale.

"""

QUADRATURE_LIMIT = 200
"""Maximum number of quadrature subintervals.

"""

_SCALE_SAMPLES = np.linspace(-1., 1., 9)


def _multipole_integrand(mu, func, ell):
    """Evaluate the multipole integrand with the Legendre weight.

    Parameters
    ----------
    mu : float
        Cosine of the angle to the line of sight.
    func : callable
        Angular function to be projected.
    ell : int
        Legendre polynomial degree.

    Returns
    -------
    float
        Multipole integrand value.

    """
    return func(mu) * legendre_polynomial(ell, mu)


def multipole_projection(func, ell):
    r"""Project a function of the line-of-sight angle cosine onto a
    Legendre multipole.

    Parameters
    ----------
    func : callable
        Angular function of :math:`\mu \in [-1, 1]` to be projected.
    ell : int
        Multipole order, a non-negative integer.

    Returns
    -------
    float
        Multipole value.

    Raises
    ------
    :class:`~xiform.utils.PreconditionError`
        If `ell` is not a non-negative integer.
    :class:`~xiform.utils.NumericalDivergenceError`
        If the quadrature fails to converge or the integral is not finite.

    """
    ell = check_multipole_order(ell, even=False)

    # Vanishing multipoles of large integrands are only resolved to an
    # absolute tolerance set by the integrand magnitude.
    scale = max(abs(func(mu)) for mu in _SCALE_SAMPLES)
    if not np.isfinite(scale):
        raise NumericalDivergenceError(
            f"Integrand for multipole {ell} is not finite on [-1, 1]."
        )
    epsabs = QUADRATURE_TOLERANCE * (scale or 1.)

    with warnings.catch_warnings():
        warnings.simplefilter('error', IntegrationWarning)
        try:
            integral, _ = quad(
                _multipole_integrand, -1., 1., args=(func, ell),
                epsabs=epsabs, epsrel=QUADRATURE_TOLERANCE,
                limit=QUADRATURE_LIMIT
            )
        except IntegrationWarning as warning:
            raise NumericalDivergenceError(
                f"Quadrature for multipole {ell} failed to converge: "
                f"{warning}"
            ) from warning

    if not np.isfinite(integral):
        raise NumericalDivergenceError(
            f"Quadrature for multipole {ell} is not finite: {integral}."
        )

    return (2*ell + 1) / 2 * integral
