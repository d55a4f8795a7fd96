import logging
import warnings

import numpy as np
import pytest

from xiform.utils import (
    ExtrapolationWarning,
    PreconditionError,
    Progress,
    _allocate_segments,
    _allocate_tasks,
    check_multipole_order,
    check_separation_range,
    mpi_compute,
    restore_warnings,
)


@pytest.mark.parametrize(
    "total_task,total_proc,tasks",
    [
        (5, 2, [2, 3]),
        (6, 3, [2, 2, 2]),
        (2, 3, [0, 1, 1]),
    ]
)
def test_allocate_tasks(total_task, total_proc, tasks):
    assert _allocate_tasks(total_task, total_proc) == tasks, \
        "Incorrect task allocation."


def test_allocate_segments():

    segments = _allocate_segments(total_task=5, total_proc=2)

    assert segments == [slice(0, 2), slice(2, 5)], \
        "Incorrect task segments."


def test_mpi_compute_serial():

    output = mpi_compute(
        [0, 2, 4], lambda ell: ell ** 2, process_name='multipoles'
    )

    assert output == [0, 4, 16], \
        "Serial mapping does not preserve the input order."


class FakeComm:
    """Single-process stand-in for an MPI communicator, returning
    pre-computed blocks for the other ranks.

    """

    def __init__(self, rank, size, other_blocks=None, broadcast=None):
        self.rank = rank
        self.size = size
        self.other_blocks = other_blocks or {}
        self.broadcast = broadcast
        self.barriers = 0

    def Barrier(self):
        self.barriers += 1

    def gather(self, obj, root=0):
        if self.rank != root:
            return None
        blocks = dict(self.other_blocks)
        blocks[self.rank] = obj
        return [blocks[rank] for rank in range(self.size)]

    def bcast(self, obj, root=0):
        return obj if self.rank == root else self.broadcast


def test_mpi_compute_single_process_comm():

    comm = FakeComm(0, 1)
    output = mpi_compute([1, 2, 3], lambda x: 2 * x, comm=comm)

    assert output == [2, 4, 6] and comm.barriers == 0, \
        "Single-process communicator does not map serially."


def test_mpi_compute_root_process(caplog):

    mapped = []

    def mapping(x):
        mapped.append(x)
        return x ** 2

    comm = FakeComm(0, 2, other_blocks={1: [4, 9, 16]})
    logger = logging.getLogger('mpi_compute')

    with caplog.at_level(logging.INFO, logger='mpi_compute'):
        output = mpi_compute(
            [0, 1, 2, 3, 4], mapping, comm=comm, logger=logger,
            process_name='squares'
        )

    assert mapped == [0, 1], \
        "Root process does not map its own segment only."
    assert output == [0, 1, 4, 9, 16], \
        "Gathered output does not preserve the input order."
    assert comm.barriers == 1
    assert [record.getMessage() for record in caplog.records] == [
        "Progress for the first 'squares' process: 50% computed.",
        "Progress for the first 'squares' process: 100% computed.",
    ], "Incorrect progress reports for the root process."


def test_mpi_compute_non_root_process():

    mapped = []

    def mapping(x):
        mapped.append(x)
        return x ** 2

    comm = FakeComm(1, 2, broadcast=[0, 1, 4, 9, 16])

    output = mpi_compute([0, 1, 2, 3, 4], mapping, comm=comm)

    assert mapped == [2, 3, 4], \
        "Non-root process does not map its own segment only."
    assert output == [0, 1, 4, 9, 16], \
        "Non-root process does not receive the broadcast output."


def test_mpi_compute_root_exceeding_size():

    comm = FakeComm(0, 2, other_blocks={1: [2]})

    with pytest.warns(UserWarning, match="exceeds the number of processes"):
        output = mpi_compute([0, 1], lambda x: x, comm=comm, root=3)

    assert output == [0, 2]




@pytest.mark.parametrize(
    "rmin,rmax",
    [
        (0., 1.),
        (-1., 1.),
        (1., 1.),
        (2., 1.),
        (1., np.inf),
        (np.nan, 1.),
    ]
)
def test_check_separation_range(rmin, rmax):
    with pytest.raises(PreconditionError):
        check_separation_range(rmin, rmax)


@pytest.mark.parametrize(
    "ell,even,valid",
    [
        (0, True, True),
        (4., True, True),
        (3, False, True),
        (3, True, False),
        (-2, True, False),
        (1.5, False, False),
        (True, False, False),
    ]
)
def test_check_multipole_order(ell, even, valid):
    if valid:
        assert check_multipole_order(ell, even=even) == int(ell)
    else:
        with pytest.raises(PreconditionError):
            check_multipole_order(ell, even=even)


def test_restore_warnings():

    with warnings.catch_warnings(record=True) as captured_warnings:
        warnings.simplefilter('always')
        warnings.warn("Extrapolated.", ExtrapolationWarning)

    with pytest.warns(ExtrapolationWarning, match="Extrapolated"):
        restore_warnings(captured_warnings)


def test_progress(caplog):

    logger = logging.getLogger('progress')
    progress = Progress(
        4, num_checkpts=2, process_name='multipoles', logger=logger
    )

    with caplog.at_level(logging.INFO, logger='progress'):
        for task_idx in range(4):
            progress.report(task_idx)

    assert [record.getMessage() for record in caplog.records] == [
        "Progress for the single 'multipoles' process: 50% computed.",
        "Progress for the single 'multipoles' process: 100% computed.",
    ], "Incorrect progress reports."
