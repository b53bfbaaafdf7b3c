"""
Core of the concurrent multiplier.

- ``Worker``: recursive split-compute-combine multiplication
- ``Dispatcher``: runs the four half-products of a split on new units
- ``channels``: spawners for process and thread units and their byte channels
- ``run_unit``: the read-two-lines, write-one-line unit contract
"""

from .channels import (
    Spawner, ProcessSpawner, ThreadSpawner, WorkerChannel, ProcessChannel,
    ThreadChannel, make_spawner, read_line, write_line, EXIT_SUCCESS, EXIT_FAILURE
)
from .dispatcher import Dispatcher
from .worker import Worker, combine
from .unit import run_unit, multiply_hex

__all__ = [
    'Spawner',
    'ProcessSpawner',
    'ThreadSpawner',
    'WorkerChannel',
    'ProcessChannel',
    'ThreadChannel',
    'make_spawner',
    'read_line',
    'write_line',
    'EXIT_SUCCESS',
    'EXIT_FAILURE',
    'Dispatcher',
    'Worker',
    'combine',
    'run_unit',
    'multiply_hex',
]
