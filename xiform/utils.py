"""
Utilities (:mod:`~xiform.utils`)
===========================================================================

Provide utilities for processing and logging, error and warning types,
and argument validation shared by the numerical routines.


**Processing and monitoring**

.. autosummary::

    Progress
    restore_warnings
    mpi_compute


**Errors and warnings**

.. autosummary::

    PreconditionError
    NumericalDivergenceError
    ExtrapolationWarning


**Argument validation**

.. autosummary::

    check_separation_range
    check_multipole_order

|

"""
import sys
import warnings

import numpy as np
from tqdm import tqdm

__all__ = [
    'Progress',
    'restore_warnings',
    'mpi_compute',
    'PreconditionError',
    'NumericalDivergenceError',
    'ExtrapolationWarning',
    'check_separation_range',
    'check_multipole_order',
]


# Processing and monitoring utilities
# -----------------------------------------------------------------------------

class Progress:
    """Progress status of tasks.

    If multiple parallel processes exist, progress status is only reported
    for the first, middle and last of them.

    Parameters
    ----------
    task_length : int
        Total number of tasks.
    num_checkpts : int, optional
        Number of checkpoints for reporting progress (default is 4).
    process_name : str or None, optional
        If not `None` (default), this is the process name to be logged.
    logger : :class:`logging.Logger` *or None, optional*
        Logger.  If `None` (default), a print statement is issued.
    comm : :class:`mpi4py.MPI.Comm` *or None, optional*
        MPI communicator (default is `None`).
    root : int, optional
        Root process number (default is 0).

    Attributes
    ----------
    process_name : str or None, optional
        If not `None` (default), this is the process name to be logged.
    task_length : int
        Total number of tasks.
    progress_checkpts : float
        Scheduled progress check points, ``0 < progress_checkpts <= 1``.
    last_checkpt : int
        Index of the last passed checkpoint,
        ``0 <= last_checkpt <= num_checkpts``.

    Examples
    --------
    >>> ntasks = 4
    >>> p = Progress(ntasks, num_checkpts=2, process_name='multipoles')
    >>> for task_idx in range(ntasks):
    ...     p.report(task_idx)
    Progress for the single 'multipoles' process: 50% computed.
    Progress for the single 'multipoles' process: 100% computed.

    """

    def __init__(self, task_length, num_checkpts=4, process_name=None,
                 logger=None, comm=None, root=0):

        self.process_name = process_name
        self.task_length = task_length
        self.logger = logger

        if self.process_name is None:
            self._proc_name = ""
        else:
            self._proc_name = "'{}' ".format(process_name)

        if comm is None:
            self._which_proc = 'single'
        else:
            if comm.rank == root:
                self._which_proc = "first"
            elif comm.rank == comm.size - 1:
                self._which_proc = "last"
            elif comm.rank == comm.size // 2 + 1:
                self._which_proc = "middle"
            else:
                self._which_proc = None

        self.progress_checkpts = \
            np.linspace(1. / num_checkpts, 1., num=num_checkpts)
        self.last_checkpt = 0

        self._progressor = self._initialise()

    def report(self, current_position):
        """Report the current position in the tasks.

        Parameters
        ----------
        current_position : int
            Index of the current position in the tasks (starting from 0).

        """
        next(self._progressor)
        self._progressor.send(current_position)

    def _initialise(self):

        while True:
            current_idx = yield

            current_progress = (current_idx + 1) / self.task_length
            place_in_checkpts = np.searchsorted(
                self.progress_checkpts, current_progress, side='right'
            )

            if place_in_checkpts > self.last_checkpt \
                    and self._which_proc is not None:
                if self.logger is None:
                    print(
                        "Progress for the {} {}process: {:.0f}% computed."
                        .format(
                            self._which_proc, self._proc_name,
                            100 * current_progress
                        )
                    )
                else:
                    self.logger.info(
                        "Progress for the %s %sprocess: %.0f%% computed.",
                        self._which_proc, self._proc_name,
                        100 * current_progress
                    )
                self.last_checkpt = place_in_checkpts
            yield


def restore_warnings(captured_warnings):
    """Emit captured warnings.

    Parameters
    ----------
    captured_warnings : *list of* :class:`warnings.WarningMessage`
        List of recorded warnings as returned by
        ``warnings.catch_warnings(record=True)``.

    """
    for record in captured_warnings:
        warnings.showwarning(
            record.message, record.category, record.filename, record.lineno,
            file=record.file, line=record.line
        )


def _allocate_tasks(total_task, total_proc):
    """Allocate tasks to processes for parallel computation.

    If `total_proc` processes share `total_task` tasks, then this decides
    the numbers of tasks, `tasks`, different processes receive: the
    rank-``i`` process receives ``tasks[i]`` many tasks.

    Parameters
    ----------
    total_task : int
        Total number of tasks.
    total_proc : int
        Total number of processes.

    Returns
    -------
    tasks : list of int
        Number of tasks for each process.

    """
    try:
        total_task, total_proc = map(int, (total_task, total_proc))
    except TypeError as err:
        raise TypeError(
            "`total_task` and `total_proc` must have integer values."
        ) from err

    num_task_remaining, num_proc_remaining, tasks = total_task, total_proc, []

    while num_proc_remaining > 0:
        num_task_assigned = num_task_remaining // num_proc_remaining
        tasks.append(num_task_assigned)
        num_task_remaining -= num_task_assigned
        num_proc_remaining -= 1

    return tasks


def _allocate_segments(tasks=None, total_task=None, total_proc=None):
    """Allocate segments of tasks to each process by the number of tasks it
    receives and its rank.

    Parameters
    ----------
    tasks : list of int or None, optional
        Number of tasks each process receives.  Cannot be `None` if either
        `total_task` or `total_proc` is `None`.  If not `None`,
        `total_task` and `total_proc` are both ignored.
    total_task : int or None, optional
        Total number of tasks.  Ignored if `tasks` is not `None`.
    total_proc : int or None, optional
        Total number of processes.  Ignored if `tasks` is not `None`.

    Returns
    -------
    segments : list of slice
        Index slice of the segment of tasks that each process should
        receive.

    """
    if tasks is None:
        tasks = _allocate_tasks(total_task, total_proc)
    total_proc = len(tasks)

    breakpoints = np.insert(np.cumsum(tasks), 0, values=0)
    segments = [
        slice(breakpoints[rank], breakpoints[rank + 1])
        for rank in range(total_proc)
    ]

    return segments


def mpi_compute(data_array, mapping, comm=None, root=0, logger=None,
                process_name=None):
    """Multiprocess mapping of data.

    For each map to be applied, the input data array is scattered over the
    first axis for computation on different processes, and the computed
    results are gathered in the order of the input data array and
    broadcast to all processes.

    Parameters
    ----------
    data_array : array_like
        Data array.
    mapping : callable
        Mapping to be applied.
    comm : :class:`mpi4py.MPI.Comm` *or None, optional*
        MPI communicator.  If `None`, no multiprocessing is performed.
    root : int, optional
        Rank of the process taken as the root process (default is 0).
    logger : :class:`logging.Logger` *or None, optional*
        Logger (default is `None`).
    process_name : str or None
        If not `None` (default), this is the process name to be logged.

    Returns
    -------
    output_array : list
        Output data processed from `mapping`.

    """
    if comm is None or comm.size == 1:
        if process_name is not None:
            process_name = process_name.capitalize()

        output_array = list(tqdm(
            map(mapping, data_array), total=len(data_array), mininterval=1,
            desc=process_name, file=sys.stdout, disable=len(data_array) < 2
        ))

        return output_array

    if root + 1 > comm.size:
        root = 0
        warnings.warn(
            "Input `root` set to 0 as it exceeds the number of processes."
        )

    segments = _allocate_segments(
        total_task=len(data_array), total_proc=comm.size
    )

    data_chunk = list(data_array)[segments[comm.rank]]

    progress = Progress(
        len(data_chunk), process_name=process_name,
        logger=logger, comm=comm, root=root
    )
    output = []
    for data_idx, data_unit in enumerate(data_chunk):
        output.append(mapping(data_unit))
        progress.report(data_idx)

    comm.Barrier()

    output = comm.gather(output, root=root)

    output_array = None
    if comm.rank == root:
        output_array = [
            output_unit
            for output_block in output
            for output_unit in output_block
        ]

    output_array = comm.bcast(output_array, root=root)

    return output_array


# Errors and warnings
# -----------------------------------------------------------------------------

class PreconditionError(ValueError):
    """Raise an error when input arguments violate the preconditions of a
    numerical routine.

    """


class NumericalDivergenceError(ArithmeticError):
    """Raise an error when a numerical quadrature fails to converge or an
    interpolated function is evaluated outside its built domain.

    """


class ExtrapolationWarning(UserWarning):
    """Emit a warning when a tabulated function is evaluated outside its
    tabulated range.

    """


# Argument validation
# -----------------------------------------------------------------------------

def check_separation_range(rmin, rmax, name='separation'):
    """Check a range is positive and increasing.

    Parameters
    ----------
    rmin, rmax : float
        Range end points.
    name : str, optional
        Name of the ranged quantity used in error messages (default is
        'separation').

    Raises
    ------
    :class:`PreconditionError`
        If ``rmin <= 0`` or ``rmax <= rmin``, or either end point is not
        finite.

    """
    if not (np.isfinite(rmin) and np.isfinite(rmax)):
        raise PreconditionError(
            f"The {name} range [{rmin}, {rmax}] is not finite."
        )
    if rmin <= 0:
        raise PreconditionError(
            f"The {name} range lower end point must be positive: {rmin}."
        )
    if rmax <= rmin:
        raise PreconditionError(
            f"The {name} range [{rmin}, {rmax}] is not increasing."
        )


def check_multipole_order(ell, even=True):
    """Check a multipole order is a non-negative (even) integer.

    Parameters
    ----------
    ell : int
        Multipole order.
    even : bool, optional
        If `True` (default), odd orders are also rejected.

    Returns
    -------
    int
        Multipole order as an integer.

    Raises
    ------
    :class:`PreconditionError`
        If `ell` is not a non-negative (even) integer.

    """
    if isinstance(ell, bool) or int(ell) != ell or ell < 0:
        raise PreconditionError(
            f"Multipole order must be a non-negative integer: {ell}."
        )
    if even and ell % 2:
        raise PreconditionError(
            f"Multipole order must be an even integer: {ell}."
        )

    return int(ell)
