"""
***************************************************************************
Algorithms (:mod:`~xiform.algorithms`)
***************************************************************************

Provide algorithms for basis function evaluation, multipole projection,
cyclic convolution and the sizing and evaluation of spherical Bessel
transforms.

The transform itself lives in :mod:`~xiform.algorithms.transform`, which
is imported separately as it depends on :mod:`~xiform.cosmology`.

"""
from .bases import legendre_polynomial, spherical_besselj
from .convolution import cyclic_convolution
from .integration import multipole_projection
from .sizing import TransformSizing, size_transform
