r"""
Tabulated power spectra (:mod:`~xiform.cosmology.power`)
===========================================================================

Build power spectrum models from tabulated values.

A tabulated power spectrum :math:`\{(k_i, P_i)\}` is interpolated in
:math:`\ln P` as a function of :math:`\ln k` and extrapolated with power
laws through the two lowest and two highest tabulated points.

.. autosummary::

    TabulatedSpectrum
    make_power_spectrum
    power_law_through

|

"""
import logging
import warnings

import numpy as np
from scipy.interpolate import InterpolatedUnivariateSpline as Spline

from xiform.utils import ExtrapolationWarning, PreconditionError


def power_law_through(point_1, point_2):
    """Return the power law passing through two points.

    Parameters
    ----------
    point_1, point_2 : tuple of float
        Points ``(k, P)`` with positive coordinates and distinct `k`.

    Returns
    -------
    callable
        Power law as a function of `k`.

    """
    (k_1, p_1), (k_2, p_2) = point_1, point_2

    index = np.log(p_2 / p_1) / np.log(k_2 / k_1)
    amplitude = p_1 / k_1 ** index

    return lambda k: amplitude * np.power(k, index)


class TabulatedSpectrum:
    """Power spectrum interpolated from tabulated values.

    Parameters
    ----------
    points : float, array_like
        Tabulated ``(k, P)`` pairs of shape (N, 2) with ``N >= 2``,
        strictly increasing positive `k` and positive `P`.
    extrapolate_below, extrapolate_above : bool, optional
        If `True` (default), evaluations below the lowest or above the
        highest tabulated wavenumber are extrapolated by power laws;
        otherwise they raise a
        :class:`~xiform.utils.PreconditionError`.
    warn : bool, optional
        If `True` (default), an
        :class:`~xiform.utils.ExtrapolationWarning` is emitted whenever
        an extrapolated value is returned.

    Attributes
    ----------
    wavenumbers : float :class:`numpy.ndarray`
        Tabulated wavenumbers.
    powers : float :class:`numpy.ndarray`
        Tabulated power spectrum values.
    kmin, kmax : float
        Tabulated wavenumber range.
    extrapolate_below, extrapolate_above : bool
        Extrapolation switches.
    warn : bool
        Extrapolation warning switch.

    Raises
    ------
    :class:`~xiform.utils.PreconditionError`
        If `points` does not satisfy the requirements above.

    """

    def __init__(self, points, extrapolate_below=True,
                 extrapolate_above=True, warn=True):

        self.logger = logging.getLogger(self.__class__.__name__)

        points = np.asarray(points, dtype=float)
        if points.ndim != 2 or points.shape[-1] != 2:
            raise PreconditionError(
                "`points` must be a sequence of (k, P) pairs."
            )
        if len(points) < 2:
            raise PreconditionError(
                "At least 2 tabulated points are needed for power-law "
                "extrapolation."
            )

        self.wavenumbers, self.powers = points.T

        if np.any(self.wavenumbers <= 0.):
            raise PreconditionError("Tabulated `k` must be positive.")
        if np.any(np.diff(self.wavenumbers) <= 0.):
            raise PreconditionError(
                "Tabulated `k` must be strictly increasing."
            )
        if np.any(self.powers <= 0.):
            raise PreconditionError(
                "Tabulated `P` must be positive for logarithmic "
                "interpolation."
            )

        self.kmin, self.kmax = self.wavenumbers[0], self.wavenumbers[-1]

        self.extrapolate_below = extrapolate_below
        self.extrapolate_above = extrapolate_above
        self.warn = warn

        self._interpolator = Spline(
            np.log(self.wavenumbers), np.log(self.powers),
            k=min(3, len(points) - 1)
        )
        self._lower_tail = power_law_through(*points[:2])
        self._upper_tail = power_law_through(*points[-2:])

        self.logger.info(
            "Created tabulated power spectrum with %d points "
            "covering %g <= k <= %g.",
            len(points), self.kmin, self.kmax
        )

    def __call__(self, k):
        """Evaluate the power spectrum.

        Parameters
        ----------
        k : float, array_like
            Wavenumbers.

        Returns
        -------
        float or float :class:`numpy.ndarray`
            Power spectrum values.

        Raises
        ------
        :class:`~xiform.utils.PreconditionError`
            If any wavenumber is non-positive, or outside the tabulated
            range on a side where extrapolation is disabled.

        """
        k = np.asarray(k, dtype=float)

        if np.any(k <= 0.):
            raise PreconditionError("Wavenumbers must be positive.")

        below, above = k < self.kmin, k > self.kmax
        if np.any(below) and not self.extrapolate_below:
            raise PreconditionError(
                f"Extrapolation is disabled: k = {np.min(k)} < {self.kmin}."
            )
        if np.any(above) and not self.extrapolate_above:
            raise PreconditionError(
                f"Extrapolation is disabled: k = {np.max(k)} > {self.kmax}."
            )
        if self.warn and np.any(below | above):
            warnings.warn(
                "Power spectrum extrapolated outside the tabulated range "
                "[{}, {}].".format(self.kmin, self.kmax),
                ExtrapolationWarning
            )

        inside = ~(below | above)
        power = np.empty_like(k)
        power[below] = self._lower_tail(k[below])
        power[above] = self._upper_tail(k[above])
        if np.any(inside):
            power[inside] = np.exp(self._interpolator(np.log(k[inside])))

        return power if power.ndim else float(power)


def make_power_spectrum(points, extrapolate_below=True,
                        extrapolate_above=True, warn=True):
    """Make a power spectrum model from tabulated values.

    Parameters
    ----------
    points : float, array_like
        Tabulated ``(k, P)`` pairs.
    extrapolate_below, extrapolate_above : bool, optional
        Power-law extrapolation switches (default is `True`).
    warn : bool, optional
        Extrapolation warning switch (default is `True`).

    Returns
    -------
    :class:`TabulatedSpectrum`
        Power spectrum as a function of wavenumber.

    See Also
    --------
    :class:`TabulatedSpectrum`

    """
    return TabulatedSpectrum(
        points, extrapolate_below=extrapolate_below,
        extrapolate_above=extrapolate_above, warn=warn
    )
