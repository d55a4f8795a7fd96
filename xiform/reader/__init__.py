"""
***************************************************************************
Correlation reader (:mod:`~xiform.reader`)
***************************************************************************

Compose correlation functions from transformed multipoles and extract
comparison-ready multipoles under Alcock--Paczynski rescaling.

.. note::

    Unless otherwise specified, the length dimension in the module is
    in units of Mpc/:math:`h`.

"""
from .correlation import (
    CorrelationFunction,
    build_correlation_function,
    extract_multipole,
)
