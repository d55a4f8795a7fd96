"""
***************************************************************************
Unit testing (:mod:`~xiform.tests`)
***************************************************************************

Unit testing with `pytest` in Python 3.6 or above.  Public functions and
classes are tested against analytic results where these are available,
and against independent numerical methods otherwise.

"""


def display_mathematica_query(message: str):
    """Print strings to be used as Mathematica/WolframAlpha queries.

    """
    print("Query: \n{}\n".format(message))


class NamedFunction:
    """Named functions.

    Parameters
    ----------
    name: Name of the function.
    func: Function.

    Attributes
    ----------
    name: Name of the function.
    func: Function.

    """
    name: str
    func: callable

    def __init__(self, name: str, func: callable):
        self.name = name
        self.func = func

    def __str__(self):
        return self.name

    def __call__(self, *args, **kwargs):
        return self.func(*args, **kwargs)
