r"""
Transform sizing (:mod:`~xiform.algorithms.sizing`)
===========================================================================

Determine the discretisation of a spherical Bessel transform for a target
numerical tolerance.

The transform kernel :math:`e^{\alpha s} j_\ell(\kappa_\ell e^s)` is sampled
at logarithmic steps :math:`\Delta` and truncated outside a settling window
:math:`|s| \leqslant n \Delta`.  Both the step size and the window width
are controlled by a small parameter :math:`\epsilon` that solves the
sizing equation asymptotically for the tolerance :math:`\varepsilon`;
the asymptotic solution only holds when the tolerance scaled by the
natural step at :math:`\epsilon = 1` is below 0.35.

The characteristic wavenumber--separation product is

.. math::

    \kappa_\ell = 2 \pi^{-1/(2\ell + 2)}
        \Gamma\left(\ell + \frac{3}{2}\right)^{1/(\ell + 1)} \,,

and the natural logarithmic step is

.. math::

    \Delta_\ell(\epsilon) = \frac{1}{2} \epsilon^{2/(\ell + 1)}
        \pi^{1 + 1/(2\ell + 2)}
        \Gamma\left(\ell + \frac{3}{2}\right)^{-1/(\ell + 1)} \,.

.. autosummary::

    TransformSizing
    size_transform
    small_parameter
    characteristic_product
    natural_log_step
    settling_span

|

"""
from collections import namedtuple
from functools import lru_cache

import numpy as np
from scipy.special import loggamma

from xiform.utils import PreconditionError, check_multipole_order

MAX_LOG_STEP = np.log(10) / 40
"""Maximum logarithmic step (40 steps per decade).

"""

TOLERANCE_BOUND = 0.35
"""Upper bound of the (scaled) tolerance for the asymptotic sizing.

"""


class TransformSizing(
        namedtuple(
            'TransformSizing',
            [
                'num_settling',
                'log_step',
                'bias_exponent',
                'settling_span',
                'small_parameter',
                'characteristic_product',
            ]
        )
    ):
    """Discretisation parameters of a spherical Bessel transform.

    Attributes
    ----------
    num_settling : int
        Number of logarithmic steps padding each edge of the transform
        (the settling window half-width).
    log_step : float
        Logarithmic step size.
    bias_exponent : float
        Power-law bias exponent applied to the kernel.
    settling_span : float
        Logarithmic width of the settling window half-width.
    small_parameter : float
        Asymptotic small parameter solving the sizing equation.
    characteristic_product : float
        Characteristic wavenumber--separation product.

    """

    __slots__ = ()


@lru_cache(maxsize=None)
def _gamma_root(ell):
    # Gamma(ell + 3/2)^(1/(ell + 1)), computed in logarithm.
    return float(np.exp(loggamma(ell + 1.5).real / (ell + 1)))


def characteristic_product(ell):
    """Return the characteristic wavenumber--separation product of the
    spherical Bessel function of order `ell`.

    Parameters
    ----------
    ell : int
        Multipole order.

    Returns
    -------
    float
        Characteristic product.

    """
    return 2 * np.pi ** (- 1 / (2*ell + 2)) * _gamma_root(ell)


def natural_log_step(ell, eps):
    """Return the natural logarithmic step for the small parameter `eps`.

    Parameters
    ----------
    ell : int
        Multipole order.
    eps : float
        Small parameter.

    Returns
    -------
    float
        Natural logarithmic step.

    """
    return eps ** (2 / (ell + 1)) * np.pi ** (1 + 1 / (2*ell + 2)) \
        / _gamma_root(ell) / 2


def small_parameter(tolerance, ell):
    """Solve the sizing equation asymptotically for the small parameter.

    Parameters
    ----------
    tolerance : float
        Target numerical tolerance.
    ell : int
        Multipole order.

    Returns
    -------
    float
        Small parameter.

    Raises
    ------
    :class:`~xiform.utils.PreconditionError`
        If the scaled tolerance is outside the domain of the asymptotic
        solution.

    """
    scaled_tolerance = tolerance / natural_log_step(ell, 1.)
    if not 0. < scaled_tolerance < TOLERANCE_BOUND:
        raise PreconditionError(
            f"Tolerance {tolerance} for multipole {ell} is outside the "
            f"domain of the asymptotic sizing: scaled tolerance "
            f"{scaled_tolerance:.3f} is not in (0, {TOLERANCE_BOUND})."
        )

    L_0 = scaled_tolerance
    L_1 = np.log(L_0)
    L_2 = np.log(- L_1)

    solution = - L_0 / (6 * L_1**3) * (
        6 * L_1**4
        + 6 * L_1**2 * L_2 * (L_1 + 1)
        - 3 * L_1 * L_2 * (L_2 - 2)
        + L_2 * (2 * L_2**2 - 9 * L_2 + 6)
    )

    return solution ** ((ell + 1) / 2)


def settling_span(ell, eps, aligned=True):
    """Return the logarithmic half-width of the settling window.

    Parameters
    ----------
    ell : int
        Multipole order.
    eps : float
        Small parameter.
    aligned : bool, optional
        If `True` (default), the window is widened so that the kernel
        argument at its edge is an integer multiple of :math:`2\\pi`.

    Returns
    -------
    float
        Settling window half-width in logarithmic units.

    """
    span = - 2 / (ell + 1) * np.log(eps)
    if not aligned:
        return span

    periods = characteristic_product(ell) / (2*np.pi) * eps ** (-2/(ell + 1))

    return span + np.log(np.ceil(periods) / periods)


def size_transform(ell, tolerance):
    """Compute the discretisation parameters of a spherical Bessel
    transform.

    Parameters
    ----------
    ell : int
        Multipole order, a non-negative even integer.
    tolerance : float
        Target numerical tolerance, ``0 < tolerance < 0.35``.

    Returns
    -------
    :class:`TransformSizing`
        Transform sizing.

    Raises
    ------
    :class:`~xiform.utils.PreconditionError`
        If `ell` is not a non-negative even integer, or `tolerance` is
        outside the domain of validity.

    """
    ell = check_multipole_order(ell)
    if not 0. < tolerance < TOLERANCE_BOUND:
        raise PreconditionError(
            f"Tolerance must be in the interval (0, {TOLERANCE_BOUND}): "
            f"{tolerance}."
        )

    eps = small_parameter(tolerance, ell)

    span = settling_span(ell, eps, aligned=True)
    max_step = min(natural_log_step(ell, eps), MAX_LOG_STEP)
    num_settling = int(np.ceil(span / max_step))

    return TransformSizing(
        num_settling=num_settling,
        log_step=span/num_settling,
        bias_exponent=(1 - ell)/2,
        settling_span=span,
        small_parameter=eps,
        characteristic_product=characteristic_product(ell),
    )
