r"""
Spherical Bessel transform (:mod:`~xiform.algorithms.transform`)
===========================================================================

Transform a power spectrum multipole into a correlation function
multipole,

.. math::

    \xi_\ell(r) = \frac{\mathrm{i}^\ell}{2\pi^2} \int_0^\infty
        \operatorname{d}\!k \, k^2 P_\ell(k) j_\ell(kr) \,,

by a discretised cyclic convolution in logarithmic variables.

With :math:`r = r_0 e^u`, :math:`k = k_0 e^{-t}` and :math:`k_0 r_0 =
\kappa_\ell` (see :mod:`~xiform.algorithms.sizing`), the transform is the
convolution

.. math::

    \xi_\ell(r_0 e^u) = e^{-\alpha u} \int \operatorname{d}\!t \,
        f(u - t) g(t) \,,

of the biased kernel :math:`f(s) = e^{\alpha s} j_\ell(\kappa_\ell e^s)`
and the signal :math:`g(t) = \mathrm{i}^\ell (2\pi^2)^{-1} k_0^3
e^{-(3 - \alpha) t} P_\ell(k_0 e^{-t})`, where the bias exponent
:math:`\alpha = (1 - \ell)/2` flattens power-law trends.  The kernel is
truncated outside the settling window of :math:`n_\mathrm{s}` steps,
which bounds the aliasing error; the outermost :math:`n_\mathrm{s}`
samples of the periodic convolution on either end are contaminated by
wrap-around and are discarded.

.. autosummary::

    TransformSamples
    TransformedMultipole
    transform_samples
    spherical_bessel_transform

|

"""
import logging
from collections import namedtuple

import numpy as np
from scipy.interpolate import InterpolatedUnivariateSpline as Spline

from xiform.cosmology.distortion import distortion_multipole_function
from xiform.utils import (
    NumericalDivergenceError,
    check_multipole_order,
    check_separation_range,
)

from .bases import spherical_besselj
from .convolution import cyclic_convolution
from .sizing import size_transform

TransformSamples = namedtuple(
    'TransformSamples',
    [
        'kernel',
        'signal',
        'convolution',
        'separations',
        'correlation',
        'num_trim',
    ]
)
TransformSamples.__doc__ = """Intermediate samples of a spherical Bessel
transform.

Attributes
----------
kernel : float :class:`numpy.ndarray`
    Biased spherical Bessel kernel sequence in wrap-around order.
signal : float :class:`numpy.ndarray`
    Biased power spectrum signal sequence.
convolution : float :class:`numpy.ndarray`
    Cyclic convolution of the kernel and the signal.
separations : float :class:`numpy.ndarray`
    Logarithmically spaced separations.
correlation : float :class:`numpy.ndarray`
    Correlation function multipole at `separations`.
num_trim : int
    Number of aliased samples at either end.

"""


class TransformedMultipole:
    """Correlation function multipole interpolated from the aliasing-free
    samples of a spherical Bessel transform.

    Parameters
    ----------
    separations : float, array_like
        Logarithmically spaced separations, strictly increasing.
    values : float, array_like
        Correlation function multipole at `separations`.
    ell : int
        Multipole order.

    Attributes
    ----------
    separations : float :class:`numpy.ndarray`
        Sampled separations.
    values : float :class:`numpy.ndarray`
        Sampled correlation function multipole.
    ell : int
        Multipole order.
    domain : tuple of float
        Separation range over which the multipole is interpolated.

    """

    def __init__(self, separations, values, ell):

        self.separations = np.asarray(separations, dtype=float)
        self.values = np.asarray(values, dtype=float)
        self.ell = ell
        self.domain = self.separations[0], self.separations[-1]

        self._interpolator = Spline(
            np.log(self.separations), self.values, ext='raise'
        )

    def __call__(self, r):
        """Evaluate the correlation function multipole.

        Parameters
        ----------
        r : float, array_like
            Separation within :attr:`domain`.

        Returns
        -------
        float, array_like
            Correlation function multipole value.

        Raises
        ------
        :class:`~xiform.utils.NumericalDivergenceError`
            If `r` is outside :attr:`domain`.

        """
        r = np.asarray(r, dtype=float)

        outside = (r < self.domain[0]) | (r > self.domain[1])
        if np.any(outside):
            raise NumericalDivergenceError(
                "Correlation multipole {} evaluated at r = {} outside its "
                "domain [{}, {}].".format(
                    self.ell, r[outside].ravel()[0], *self.domain
                )
            )

        # Clip end-point round-off in the logarithm.
        log_r = np.clip(np.log(r), *np.log(self.domain))

        return self._interpolator(log_r)


def transform_samples(power_spectrum, rmin, rmax, ell, tolerance,
                      distortion_model=None):
    """Sample the spherical Bessel transform of a power spectrum multipole
    on a logarithmic separation grid.

    Parameters
    ----------
    power_spectrum : callable
        Power spectrum (multipole) as a function of wavenumber.
    rmin, rmax : float
        Separation range to be covered, ``0 < rmin < rmax``.
    ell : int
        Multipole order, a non-negative even integer.
    tolerance : float
        Target numerical tolerance, ``0 < tolerance < 0.35``.
    distortion_model : :class:`~xiform.cosmology.distortion.DistortionModel` *or None, optional*
        If not `None` (default), `power_spectrum` is replaced by its
        distorted multipole of order `ell`.

    Returns
    -------
    :class:`TransformSamples`
        Transform samples including aliased end samples.

    Raises
    ------
    :class:`~xiform.utils.PreconditionError`
        If the separation range, multipole order or tolerance is invalid.

    """
    logger = logging.getLogger(__name__)

    check_separation_range(rmin, rmax)
    ell = check_multipole_order(ell)

    sizing = size_transform(ell, tolerance)

    num_settling = sizing.num_settling
    step = sizing.log_step
    alpha = sizing.bias_exponent

    r_0 = np.sqrt(rmin * rmax)
    k_0 = sizing.characteristic_product / r_0

    # The aliasing-free window is one sample short of symmetric about
    # `r_0`, so one more signal step is needed to reach `rmax`.
    num_signal = int(np.ceil(np.log(rmax / rmin) / (2 * step))) + 1
    num_total = num_settling + num_signal

    steps = np.arange(- num_total, num_total)
    wavenumbers = k_0 * np.exp(- steps * step)

    logger.debug(
        "Transform of multipole %d covers %g <= k <= %g with %d samples "
        "(%.1f per log interval) and %d settling steps.",
        ell, wavenumbers[-1], wavenumbers[0], 2 * num_total, 1 / step,
        num_settling
    )

    if distortion_model is not None:
        power_spectrum = distortion_multipole_function(
            distortion_model, power_spectrum,
            wavenumbers[-1], wavenumbers[0], ell
        )

    # Kernel sequence in wrap-around order, truncated outside the
    # settling window.
    positions = np.arange(2 * num_total)
    wrapped_steps = np.where(
        positions < num_total, positions, positions - 2 * num_total
    )
    in_window = np.abs(wrapped_steps) <= num_settling

    kernel = np.zeros(2 * num_total)
    s = wrapped_steps[in_window] * step
    kernel[in_window] = step * np.exp(alpha * s) \
        * spherical_besselj(ell, sizing.characteristic_product * np.exp(s))

    # Signal sequence; i^ell is real for even orders.
    signal = step * (-1) ** (ell // 2) / (2 * np.pi**2) * k_0**3 \
        * np.exp(- (3 - alpha) * steps * step) \
        * np.asarray(power_spectrum(wavenumbers), dtype=float)

    convolution = cyclic_convolution(kernel, signal)

    separations = r_0 * np.exp(steps * step)
    correlation = convolution * (separations / r_0) ** (- alpha) / step

    return TransformSamples(
        kernel=kernel,
        signal=signal,
        convolution=convolution,
        separations=separations,
        correlation=correlation,
        num_trim=num_settling,
    )


def spherical_bessel_transform(power_spectrum, rmin, rmax, ell, tolerance,
                               distortion_model=None):
    """Compute the spherical Bessel transform of a power spectrum
    multipole free of aliasing artefacts.

    Notes
    -----
    The bias exponent :math:`(1 - \\ell)/2` is fixed by the order.  For
    steep power-law spectra at :math:`\\ell \\geqslant 4` the biased signal
    then spans an exponential dynamic range that the discrete Fourier
    transform cannot resolve, and the error grows rather than shrinks as
    `tolerance` is tightened (for :math:`P \\propto k^{-2}` and
    :math:`\\ell = 8` the relative error is of order unity).  Spectra that
    fall off at both ends are unaffected.

    Parameters
    ----------
    power_spectrum : callable
        Power spectrum (multipole) as a function of wavenumber.
    rmin, rmax : float
        Separation range, ``0 < rmin < rmax``.
    ell : int
        Multipole order, a non-negative even integer.
    tolerance : float
        Target numerical tolerance, ``0 < tolerance < 0.35``.
    distortion_model : :class:`~xiform.cosmology.distortion.DistortionModel` *or None, optional*
        If not `None` (default), `power_spectrum` is replaced by its
        distorted multipole of order `ell`.

    Returns
    -------
    :class:`TransformedMultipole`
        Correlation function multipole as a function of separation, valid
        within ``[rmin, rmax]``.

    Raises
    ------
    :class:`~xiform.utils.PreconditionError`
        If the separation range, multipole order or tolerance is invalid.

    """
    samples = transform_samples(
        power_spectrum, rmin, rmax, ell, tolerance,
        distortion_model=distortion_model
    )

    zoom = slice(samples.num_trim, - samples.num_trim)

    return TransformedMultipole(
        samples.separations[zoom], samples.correlation[zoom], ell
    )
