"""
***************************************************************************
Cosmological modelling (:mod:`~xiform.cosmology`)
***************************************************************************

Provide tabulated power spectrum models and redshift-space and non-linear
distortion models.

.. note::

    Unless otherwise specified, the length dimension in the module is
    in units of Mpc/:math:`h`.

"""
from .distortion import (
    DistortionModel,
    distortion_multipole_function,
    make_distortion_model,
)
from .power import TabulatedSpectrum, make_power_spectrum
