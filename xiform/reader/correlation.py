r"""
Correlation functions (:mod:`~xiform.reader.correlation`)
===========================================================================

Compose anisotropic correlation functions from their multipoles and
extract multipoles under the Alcock--Paczynski rescaling.

The correlation function is composed of even multipoles up to
:math:`\ell_\mathrm{max}`,

.. math::

    \xi(r, \mu) = \sum_{\ell \leqslant \ell_\mathrm{max}}
        \xi_\ell(r) \mathcal{L}_\ell(\mu) \,,

where each :math:`\xi_\ell` is a spherical Bessel transform (see
:mod:`~xiform.algorithms.transform`).  With longitudinal and transverse
scalings :math:`\alpha_\parallel, \alpha_\perp`, the rescaled multipole is

.. math::

    \tilde{\xi}_\ell(r) = \frac{2\ell + 1}{2} \int_{-1}^{1}
        \operatorname{d}\!\mu \, \xi\left(
            \alpha(\mu) r, \frac{\alpha_\parallel}{\alpha(\mu)} \mu
        \right) \mathcal{L}_\ell(\mu) \,,
    \quad
    \alpha(\mu)^2 = \alpha_\parallel^2 \mu^2
        + \alpha_\perp^2 (1 - \mu^2) \,.

.. autosummary::

    CorrelationFunction
    build_correlation_function
    extract_multipole

|

"""
import logging
import warnings

import numpy as np
from scipy.interpolate import InterpolatedUnivariateSpline as Spline

from xiform.algorithms.bases import legendre_polynomial
from xiform.algorithms.integration import multipole_projection
from xiform.algorithms.transform import spherical_bessel_transform
from xiform.utils import (
    NumericalDivergenceError,
    PreconditionError,
    check_multipole_order,
    check_separation_range,
    mpi_compute,
    restore_warnings,
)


class CorrelationFunction:
    """Anisotropic correlation function composed of its multipoles.

    Parameters
    ----------
    multipoles : dict
        Correlation function multipoles as functions of separation keyed
        by their even orders.

    Attributes
    ----------
    multipoles : dict
        Correlation function multipoles keyed by order.
    orders : list of int
        Multipole orders in ascending order.
    domain : tuple of float
        Separation range over which all multipoles are valid.

    """

    def __init__(self, multipoles):

        self.multipoles = dict(multipoles)
        self.orders = sorted(self.multipoles)

        domains = [
            getattr(self.multipoles[ell], 'domain', (0., np.inf))
            for ell in self.orders
        ]
        self.domain = max(d[0] for d in domains), min(d[1] for d in domains)

    def __call__(self, r, mu):
        """Evaluate the correlation function.

        Parameters
        ----------
        r : float, array_like
            Separation.
        mu : float, array_like
            Cosine of the angle to the line of sight.

        Returns
        -------
        float, array_like
            Correlation function value.

        Raises
        ------
        :class:`~xiform.utils.NumericalDivergenceError`
            If `r` is outside :attr:`domain`.

        """
        r = np.asarray(r, dtype=float)

        if np.any(r < self.domain[0]) or np.any(r > self.domain[1]):
            raise NumericalDivergenceError(
                "Correlation function evaluated at separation(s) outside "
                "its domain [{}, {}].".format(*self.domain)
            )

        return sum(
            self.multipoles[ell](r) * legendre_polynomial(ell, mu)
            for ell in self.orders
        )


def build_correlation_function(power_spectrum, rmin, rmax, lmax,
                               distortion_model=None, tolerance=1.e-3,
                               comm=None):
    """Build the correlation function from the even multipoles of a
    power spectrum.

    Notes
    -----
    The Alcock--Paczynski scalings of `distortion_model` are not applied
    here; pass them to :func:`extract_multipole` as `alpha_p` and
    `alpha_t` instead.

    Warnings raised by the multipole transforms (e.g.
    :class:`~xiform.utils.ExtrapolationWarning`) are recorded and
    re-emitted once all orders have been transformed.

    Parameters
    ----------
    power_spectrum : callable
        Power spectrum as a function of wavenumber.
    rmin, rmax : float
        Separation range, ``0 < rmin < rmax``.
    lmax : int
        Maximum multipole order, ``lmax >= 0``.  Only even orders are
        included.
    distortion_model : :class:`~xiform.cosmology.distortion.DistortionModel` *or None, optional*
        If not `None` (default), each multipole is transformed from the
        corresponding distorted power spectrum multipole; otherwise
        `power_spectrum` is transformed for every order.
    tolerance : float, optional
        Target numerical tolerance of the transforms (default is 0.001).
    comm : :class:`mpi4py.MPI.Comm` *or None, optional*
        MPI communicator over which multipoles are distributed (default is
        `None`).

    Returns
    -------
    :class:`CorrelationFunction`
        Correlation function of separation and the cosine of the angle to
        the line of sight.

    Raises
    ------
    :class:`~xiform.utils.PreconditionError`
        If the separation range, `lmax` or `tolerance` is invalid.

    """
    logger = logging.getLogger(CorrelationFunction.__name__)

    check_separation_range(rmin, rmax)
    lmax = check_multipole_order(lmax, even=False)

    orders = list(range(0, lmax + 1, 2))

    with warnings.catch_warnings(record=True) as any_warnings:
        transformed_multipoles = mpi_compute(
            orders,
            lambda ell: spherical_bessel_transform(
                power_spectrum, rmin, rmax, ell, tolerance,
                distortion_model=distortion_model
            ),
            comm=comm, logger=logger, process_name="multipole transform"
        )

    if any_warnings:
        restore_warnings(any_warnings)
        logger.warning(
            "%d warning(s) raised while transforming multipoles %s.",
            len(any_warnings), orders
        )

    correlation = CorrelationFunction(
        dict(zip(orders, transformed_multipoles))
    )

    logger.info(
        "Composed correlation function from multipoles %s "
        "over %g <= r <= %g.",
        orders, *correlation.domain
    )

    return correlation


def extract_multipole(correlation, rmin, rmax, ell, alpha_p=1., alpha_t=1.,
                      npoints=None):
    """Extract a correlation function multipole with the
    Alcock--Paczynski rescaling.

    Notes
    -----
    When `alpha_p` or `alpha_t` differs from unity, rescaled separations
    may fall outside ``[rmin, rmax]`` and `correlation` must be valid over
    the correspondingly wider range.

    Parameters
    ----------
    correlation : callable
        Correlation function of separation and the cosine of the angle to
        the line of sight.
    rmin, rmax : float
        Separation range, ``0 < rmin < rmax``.
    ell : int
        Multipole order.
    alpha_p, alpha_t : float, optional
        Longitudinal and transverse scalings (default is 1.).
    npoints : int or None, optional
        Number of evenly spaced separations at which the multipole is
        sampled.  If `None` (default), this is ``ceil(rmax - rmin)``.

    Returns
    -------
    callable
        Rescaled correlation function multipole interpolated in
        separation over ``[rmin, rmax]``.

    Raises
    ------
    :class:`~xiform.utils.PreconditionError`
        If the separation range, multipole order, scalings or number of
        sampled separations is invalid.

    """
    check_separation_range(rmin, rmax)
    ell = check_multipole_order(ell, even=False)

    if alpha_p <= 0 or alpha_t <= 0:
        raise PreconditionError(
            f"Scalings must be positive: alpha_p={alpha_p}, "
            f"alpha_t={alpha_t}."
        )

    if npoints is None:
        npoints = int(np.ceil(rmax - rmin))
    if npoints < 2:
        raise PreconditionError(
            f"At least 2 separations must be sampled: npoints={npoints}."
        )

    def _rescaled_correlation(r):
        def _angular_correlation(mu):
            alpha = np.sqrt(alpha_p**2 * mu**2 + alpha_t**2 * (1 - mu**2))
            return correlation(alpha * r, alpha_p / alpha * mu)
        return _angular_correlation

    separations = np.linspace(rmin, rmax, npoints)
    multipole_samples = np.asarray([
        multipole_projection(_rescaled_correlation(r), ell)
        for r in separations
    ])

    interpolator = Spline(
        separations, multipole_samples, k=min(3, npoints - 1), ext='raise'
    )

    def rescaled_multipole(r):
        try:
            return interpolator(r)
        except ValueError as err:
            raise NumericalDivergenceError(
                f"Rescaled correlation multipole {ell} evaluated outside "
                f"its sampled range [{rmin}, {rmax}]."
            ) from err

    return rescaled_multipole
