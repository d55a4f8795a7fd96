r"""
Distortion models (:mod:`~xiform.cosmology.distortion`)
===========================================================================

Model redshift-space and non-linear distortions of the tracer power
spectrum and tabulate its distorted multipoles.

For the cross-correlation of two tracers with linear biases :math:`b_1,
b_2` and redshift-space distortion parameters :math:`\beta_1, \beta_2`,
the redshift-space distortion factor is

.. math::

    D_\mathrm{RSD}(k, \mu) = b_1 b_2 (1 + \beta_1 \mu^2)
        (1 + \beta_2 \mu^2) \,,

and the non-linear distortion factor with longitudinal and transverse
broadening :math:`\Sigma_\parallel, \Sigma_\perp` and fingers-of-god
damping :math:`\Sigma_s` is

.. math::

    D_\mathrm{NL}(k, \mu) = \frac{
        \exp\left\{
            - \left[ \mu^2 \Sigma_\parallel^2
                + (1 - \mu^2) \Sigma_\perp^2 \right] k^2 / 2
        \right\}
    }{
        \left[ 1 + (\mu \Sigma_s k)^2 \right]^2
    } \,.

An auto-correlation uses the same bias and distortion parameter for both
tracers.

.. autosummary::

    DistortionModel
    make_distortion_model
    distortion_multipole_function

|

"""
import ast
import logging
from collections import namedtuple
from pprint import pformat

import numpy as np
from scipy.interpolate import InterpolatedUnivariateSpline as Spline

from xiform.algorithms.integration import multipole_projection
from xiform.utils import (
    NumericalDivergenceError,
    PreconditionError,
    check_multipole_order,
    check_separation_range,
)

_PARAMETERS = [
    'bias',
    'secondary_bias',
    'growth_parameter',
    'secondary_growth_parameter',
    'longitudinal_damping',
    'transverse_damping',
    'fingers_of_god_damping',
    'longitudinal_scaling',
    'transverse_scaling',
]


class DistortionModel(namedtuple('DistortionModel', _PARAMETERS)):
    r"""Immutable redshift-space and non-linear distortion model.

    Parameters
    ----------
    bias : float, optional
        Linear bias of the (primary) tracer (default is 1.).
    secondary_bias : float or None, optional
        Linear bias of the secondary tracer.  If `None` (default), this
        is set to `bias`.
    growth_parameter : float, optional
        Redshift-space distortion parameter :math:`\beta` of the
        (primary) tracer (default is 0.).
    secondary_growth_parameter : float or None, optional
        Redshift-space distortion parameter of the secondary tracer.  If
        `None` (default), this is set to `growth_parameter`.
    longitudinal_damping, transverse_damping : float, optional
        Longitudinal and transverse non-linear broadening (default is 0.).
    fingers_of_god_damping : float, optional
        Fingers-of-god damping (default is 0.).
    longitudinal_scaling, transverse_scaling : float, optional
        Longitudinal and transverse Alcock--Paczynski scaling (default is
        1.).

    """

    __slots__ = ()

    def __new__(cls, bias=1., secondary_bias=None, growth_parameter=0.,
                secondary_growth_parameter=None, longitudinal_damping=0.,
                transverse_damping=0., fingers_of_god_damping=0.,
                longitudinal_scaling=1., transverse_scaling=1.):

        if secondary_bias is None:
            secondary_bias = bias
        if secondary_growth_parameter is None:
            secondary_growth_parameter = growth_parameter

        params = (
            bias, secondary_bias,
            growth_parameter, secondary_growth_parameter,
            longitudinal_damping, transverse_damping, fingers_of_god_damping,
            longitudinal_scaling, transverse_scaling,
        )
        if not all(np.isfinite(params)):
            raise PreconditionError(
                "Distortion model parameters must be finite."
            )
        if longitudinal_scaling <= 0 or transverse_scaling <= 0:
            raise PreconditionError(
                "Alcock--Paczynski scalings must be positive."
            )

        return super().__new__(cls, *map(float, params))

    @classmethod
    def from_file(cls, source_file):
        """Create a distortion model from a parameter file.

        Parameters
        ----------
        source_file : *str or* :class:`pathlib.Path`
            Distortion model parameter file (as a Python dictionary).

        Returns
        -------
        :class:`DistortionModel`
            Distortion model.

        """
        with open(source_file) as model_source:
            source_params = ast.literal_eval(model_source.read())

        return make_distortion_model(source_params)

    def redshift_space_distortion(self, k, mu):
        """Evaluate the redshift-space distortion factor.

        Parameters
        ----------
        k : float, array_like
            Wavenumber.
        mu : float, array_like
            Cosine of the angle to the line of sight.

        Returns
        -------
        float, array_like
            Redshift-space distortion factor.

        """
        mu_sq = np.square(mu)

        return self.bias * self.secondary_bias \
            * (1 + self.growth_parameter * mu_sq) \
            * (1 + self.secondary_growth_parameter * mu_sq) \
            * np.ones_like(k)

    def nonlinear_distortion(self, k, mu):
        """Evaluate the non-linear distortion factor.

        Parameters
        ----------
        k : float, array_like
            Wavenumber.
        mu : float, array_like
            Cosine of the angle to the line of sight.

        Returns
        -------
        float, array_like
            Non-linear distortion factor.

        """
        mu_sq, k_sq = np.square(mu), np.square(k)

        broadening = mu_sq * self.longitudinal_damping ** 2 \
            + (1 - mu_sq) * self.transverse_damping ** 2

        return np.exp(- broadening * k_sq / 2) \
            / (1 + mu_sq * self.fingers_of_god_damping ** 2 * k_sq) ** 2

    def distortion(self, k, mu):
        """Evaluate the total distortion factor.

        Parameters
        ----------
        k : float, array_like
            Wavenumber.
        mu : float, array_like
            Cosine of the angle to the line of sight.

        Returns
        -------
        float, array_like
            Product of the redshift-space and non-linear distortion
            factors.

        """
        return self.redshift_space_distortion(k, mu) \
            * self.nonlinear_distortion(k, mu)

    def transformed_coordinates(self, k, mu):
        r"""Transform Fourier-space coordinates by the Alcock--Paczynski
        scalings.

        Parameters
        ----------
        k : float, array_like
            Wavenumber.
        mu : float, array_like
            Cosine of the angle to the line of sight.

        Returns
        -------
        k_prime, mu_prime : float, array_like
            Transformed coordinates :math:`(\alpha k, \mu
            \alpha_\parallel / \alpha)` where :math:`\alpha^2 =
            \alpha_\parallel^2 \mu^2 + \alpha_\perp^2 (1 - \mu^2)`.

        """
        mu_sq = np.square(mu)
        alpha = np.sqrt(
            self.longitudinal_scaling ** 2 * mu_sq
            + self.transverse_scaling ** 2 * (1 - mu_sq)
        )

        return alpha * k, self.longitudinal_scaling / alpha * mu


def make_distortion_model(params=None, **kwargs):
    """Make a distortion model from configuration parameters.

    Parameters
    ----------
    params : dict or None, optional
        Distortion model parameters (default is `None`).
    **kwargs
        Distortion model parameters overriding those in `params`.

    Returns
    -------
    :class:`DistortionModel`
        Distortion model.

    Raises
    ------
    :class:`~xiform.utils.PreconditionError`
        If any parameter name is not recognised.

    """
    logger = logging.getLogger(DistortionModel.__name__)

    model_params = dict(params or {}, **kwargs)

    unknown_params = set(model_params) - set(_PARAMETERS)
    if unknown_params:
        raise PreconditionError(
            "Unrecognised distortion model parameters: {}."
            .format(", ".join(sorted(unknown_params)))
        )

    model = DistortionModel(**model_params)

    logger.info(
        "Created distortion model with parameters:\n%s.",
        pformat(model._asdict())
    )

    return model


def distortion_multipole_function(model, power_spectrum, kmin, kmax, ell,
                                  samples_per_decade=40):
    """Tabulate the distorted power spectrum multipole and return its
    interpolation in logarithmic wavenumber.

    Parameters
    ----------
    model : :class:`DistortionModel`
        Distortion model.
    power_spectrum : callable
        Undistorted power spectrum as a function of wavenumber.
    kmin, kmax : float
        Wavenumber range to be covered, ``0 < kmin < kmax``.
    ell : int
        Multipole order, a non-negative even integer.
    samples_per_decade : int, optional
        Number of logarithmic samples per wavenumber decade (default is
        40).  At least 10 samples are taken.

    Returns
    -------
    callable
        Distorted power spectrum multipole as a function of wavenumber
        valid in ``[kmin, kmax]``.

    Raises
    ------
    :class:`~xiform.utils.PreconditionError`
        If the wavenumber range or multipole order is invalid.

    """
    PADDING = 2

    check_separation_range(kmin, kmax, name='wavenumber')
    ell = check_multipole_order(ell)

    num_samples = max(
        10, int(np.ceil(np.log10(kmax / kmin) * samples_per_decade))
    )
    log_step = np.log(kmax / kmin) / (num_samples - 1)

    log_k_samples = np.log(kmin) + log_step * np.arange(
        - PADDING, num_samples + PADDING
    )

    def _distorted_power(k):
        power = power_spectrum(k)
        return lambda mu: power * model.distortion(k, mu)

    multipole_samples = np.asarray([
        multipole_projection(_distorted_power(np.exp(log_k)), ell)
        for log_k in log_k_samples
    ])

    interpolator = Spline(log_k_samples, multipole_samples, ext='raise')

    def distorted_multipole(k):
        try:
            return interpolator(np.log(k))
        except ValueError as err:
            raise NumericalDivergenceError(
                f"Distorted power multipole {ell} evaluated outside "
                f"its tabulated range [{kmin}, {kmax}]."
            ) from err

    return distorted_multipole
