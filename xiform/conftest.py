"""Test configuration for :mod:`xiform`.

"""
import numpy as np
import pytest


def pytest_addoption(parser):
    """Add command-line options to `pytest` parser.

    Parameters
    ----------
    parser : :class:`_pytest.config.argparsing.Parser`
        `pytest` parser object.

    """
    parser.addoption(
        '--runslow', action='store_true', default=False, help="Run slow tests."
    )


def pytest_configure(config):
    """Add ini-file options to `pytest` configuration.

    Parameters
    ----------
    config : :class:`_pytest.config.Config`
        `pytest` configuration object.

    """
    config.addinivalue_line('markers', "slow: mark test as slow to run")
    config.addinivalue_line(
        'filterwarnings', "ignore::xiform.utils.ExtrapolationWarning"
    )


def pytest_collection_modifyitems(config, items):
    """Modify test collection items.

    Parameters
    ----------
    config : :class:`_pytest.config.Config`
        `pytest` configuration object.
    items : list of :class:`_pytest.nodes.Item`
        `pytest` item objects.

    """
    if config.getoption('--runslow'):
        return

    skip_slow = pytest.mark.skip(
        reason="Use --runslow option to run slow tests."
    )
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


@pytest.fixture(scope='session')
def tabulated_points():
    """Tabulated power spectrum decreasing monotonically in wavenumber.

    """
    return [(0.001, 1000.), (0.01, 500.), (0.1, 50.), (1., 1.)]


@pytest.fixture(scope='session')
def gaussian_spectrum():
    r"""Gaussian power spectrum :math:`P(k) = e^{-k^2}` whose correlation
    function is :math:`\xi(r) = e^{-r^2/4} / (8 \pi^{3/2})`.

    """
    return lambda k: np.exp(- np.square(k))
