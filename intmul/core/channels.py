"""
Channels to concurrent computation units.

A spawner starts one unit per call and hands back a ``WorkerChannel``:
the parent writes the two operand lines into it, reads back a single
result line and finally collects the unit's exit status. Units are
either OS processes re-running the package entry point or threads
connected through in-process pipes. In both cases parent and child share
nothing but the two byte streams.
"""

import errno
import io
import os
import subprocess
import sys
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import BinaryIO, Callable, Dict, List, Optional, TextIO, Tuple

from intmul.config import defaults
from intmul.exceptions import ChannelError
from intmul.infrastructure.logging import get_logger

logger = get_logger(__name__)

DEFAULT_BUFFER_SIZE = defaults.WORKERS['initial_buffer_size']

EXIT_SUCCESS = 0
EXIT_FAILURE = 1


def read_line(stream: BinaryIO, initial_size: int = DEFAULT_BUFFER_SIZE) -> str:
    """Read one line of any length from a binary stream.

    The buffer starts at ``initial_size`` bytes and doubles whenever it
    fills up. Reading stops at a newline (not included in the result) or
    at end of stream; an exhausted stream yields an empty string.
    Undecodable bytes become U+FFFD so validation rejects them.
    """
    buffer = bytearray(initial_size)
    length = 0

    while True:
        ch = stream.read(1)
        if not ch or ch == b'\n':
            break
        if length == len(buffer):
            buffer.extend(bytes(len(buffer)))
        buffer[length] = ch[0]
        length += 1

    return buffer[:length].decode('ascii', errors='replace')


def write_line(stream: BinaryIO, line: str) -> None:
    stream.write(line.encode('ascii') + b'\n')
    stream.flush()


class _PipeState:
    """Shared buffer of one in-process pipe."""

    def __init__(self):
        self.buffer = bytearray()
        self.condition = threading.Condition()
        self.writer_closed = False
        self.reader_closed = False


class PipeReader(io.RawIOBase):
    """Read end of an in-process pipe; blocks until data or end of stream."""

    def __init__(self, state: _PipeState):
        super().__init__()
        self._state = state

    def readable(self) -> bool:
        return True

    def readinto(self, b) -> int:
        if self.closed:
            raise ValueError("read from closed pipe")
        state = self._state
        with state.condition:
            while not state.buffer and not state.writer_closed:
                state.condition.wait()
            n = min(len(b), len(state.buffer))
            b[:n] = state.buffer[:n]
            del state.buffer[:n]
            return n

    def close(self) -> None:
        if not self.closed:
            with self._state.condition:
                self._state.reader_closed = True
                self._state.buffer.clear()
                self._state.condition.notify_all()
        super().close()


class PipeWriter(io.RawIOBase):
    """Write end of an in-process pipe.

    Writing after the read end has been closed raises BrokenPipeError,
    like an OS pipe without a reader.
    """

    def __init__(self, state: _PipeState):
        super().__init__()
        self._state = state

    def writable(self) -> bool:
        return True

    def write(self, b) -> int:
        if self.closed:
            raise ValueError("write to closed pipe")
        state = self._state
        with state.condition:
            if state.reader_closed:
                raise BrokenPipeError(errno.EPIPE, os.strerror(errno.EPIPE))
            state.buffer.extend(b)
            state.condition.notify_all()
        return len(b)

    def close(self) -> None:
        if not self.closed:
            with self._state.condition:
                self._state.writer_closed = True
                self._state.condition.notify_all()
        super().close()


def memory_pipe() -> Tuple[PipeReader, PipeWriter]:
    """Create a unidirectional byte pipe between threads of this process.

    Unlike ``os.pipe`` it holds no file descriptors, so the number of
    live thread units is not bounded by the descriptor limit.
    """
    state = _PipeState()
    return PipeReader(state), PipeWriter(state)


class WorkerChannel(ABC):
    """Duplex byte channel to one running unit."""

    backend = 'abstract'

    def __init__(self, node_id: str, buffer_size: int = DEFAULT_BUFFER_SIZE):
        self.node_id = node_id
        self.buffer_size = buffer_size

    @property
    @abstractmethod
    def inbound(self) -> BinaryIO:
        """Parent's write end, connected to the unit's input."""

    @property
    @abstractmethod
    def outbound(self) -> BinaryIO:
        """Parent's read end, connected to the unit's result output."""

    def send_operands(self, a: str, b: str) -> None:
        """Write both operands as newline-terminated lines, then close the input."""
        try:
            self.inbound.write(f"{a}\n{b}\n".encode('ascii'))
            self.inbound.flush()
            self.inbound.close()
        except OSError as e:
            raise ChannelError(f"failed to send data to child {self.node_id}", e) from e

    def read_result(self) -> str:
        """Read the unit's single result line; empty if it wrote nothing."""
        try:
            return read_line(self.outbound, self.buffer_size)
        except (OSError, ValueError) as e:
            raise ChannelError(f"failed to read results from child {self.node_id}", e) from e

    @abstractmethod
    def wait(self) -> int:
        """Block until the unit terminates and return its exit status."""

    @abstractmethod
    def terminate(self) -> None:
        """Stop the unit early; used only when a sibling has already failed."""

    def close(self) -> None:
        """Release the endpoints held by the parent."""
        for stream in (self.inbound, self.outbound):
            if stream is not None and not stream.closed:
                try:
                    stream.close()
                except BrokenPipeError:
                    # Unit is gone; nothing left to flush to
                    pass


class ProcessChannel(WorkerChannel):
    """Channel to a unit running as a child OS process."""

    backend = 'process'

    def __init__(self, process: subprocess.Popen, node_id: str,
                 buffer_size: int = DEFAULT_BUFFER_SIZE):
        super().__init__(node_id, buffer_size)
        self.process = process

    @property
    def inbound(self) -> BinaryIO:
        return self.process.stdin

    @property
    def outbound(self) -> BinaryIO:
        return self.process.stdout

    def wait(self) -> int:
        try:
            return self.process.wait()
        except OSError as e:
            raise ChannelError(f"waitpid failed for child {self.node_id}", e) from e

    def terminate(self) -> None:
        if self.process.poll() is None:
            logger.debug(f"Killing unit {self.node_id} (pid {self.process.pid})")
            self.process.kill()


class ThreadChannel(WorkerChannel):
    """Channel to a unit running in a thread, connected by two in-process pipes.

    The unit function receives its own ends of the pipes and the node id,
    and returns an exit status.
    """

    backend = 'thread'

    def __init__(self, node_id: str,
                 target: Callable[[BinaryIO, BinaryIO, str], int],
                 buffer_size: int = DEFAULT_BUFFER_SIZE):
        super().__init__(node_id, buffer_size)
        self.exit_status: Optional[int] = None

        child_in, self._inbound = memory_pipe()
        self._outbound, child_out = memory_pipe()

        self._thread = threading.Thread(
            target=self._run,
            args=(target, child_in, child_out),
            name=f"unit-{node_id}",
            daemon=True
        )
        try:
            self._thread.start()
        except RuntimeError as e:
            for stream in (self._inbound, self._outbound, child_in, child_out):
                stream.close()
            raise ChannelError(f"failed to start thread for {node_id}", e) from e

    @property
    def inbound(self) -> BinaryIO:
        return self._inbound

    @property
    def outbound(self) -> BinaryIO:
        return self._outbound

    def _run(self, target, child_in: BinaryIO, child_out: BinaryIO) -> None:
        status = EXIT_FAILURE
        try:
            status = target(child_in, child_out, self.node_id)
        except Exception as e:
            logger.log_error_with_context(e, operation='thread_unit', node=self.node_id)
        finally:
            child_in.close()
            try:
                child_out.close()
            except OSError as e:
                logger.debug(f"Unit {self.node_id} could not flush its result: {e}")
                status = EXIT_FAILURE
            self.exit_status = status

    def wait(self) -> int:
        self._thread.join()
        return self.exit_status

    def terminate(self) -> None:
        # Threads cannot be killed; closing our ends makes the unit's writes fail
        self.close()


class Spawner(ABC):
    """Factory for concurrent units."""

    backend = 'abstract'

    def __init__(self, program: str = defaults.PROGRAM_NAME,
                 buffer_size: int = DEFAULT_BUFFER_SIZE):
        self.program = program
        self.buffer_size = buffer_size

    @abstractmethod
    def spawn(self, node_id: str) -> WorkerChannel:
        """Start a unit for ``node_id`` and return the parent's channel to it."""


class ProcessSpawner(Spawner):
    """Runs every unit as ``python -m intmul`` in a new process.

    The child's stderr is inherited so diagnostics travel straight up to
    the top-level error channel. The hidden ``--node`` option tells the
    child where it sits in the recursion tree and that it is not the
    top-level unit.
    """

    backend = 'process'

    def __init__(self, program: str = defaults.PROGRAM_NAME,
                 buffer_size: int = DEFAULT_BUFFER_SIZE,
                 command: Optional[List[str]] = None,
                 env: Optional[Dict[str, str]] = None):
        super().__init__(program, buffer_size)
        self.command = command or [sys.executable, '-m', 'intmul']
        self.env = dict(os.environ if env is None else env)
        self.env[defaults.ENV_BACKEND] = self.backend

        # Children must import the same package, installed or not
        package_root = str(Path(__file__).resolve().parent.parent.parent)
        python_path = self.env.get('PYTHONPATH')
        if python_path:
            if package_root not in python_path.split(os.pathsep):
                self.env['PYTHONPATH'] = os.pathsep.join([package_root, python_path])
        else:
            self.env['PYTHONPATH'] = package_root

    def spawn(self, node_id: str) -> ProcessChannel:
        try:
            process = subprocess.Popen(
                self.command + ['--node', node_id],
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                env=self.env
            )
        except OSError as e:
            raise ChannelError(f"exec failed for child {node_id}", e) from e

        logger.debug(f"Spawned process unit {node_id} (pid {process.pid})")
        return ProcessChannel(process, node_id, self.buffer_size)


class ThreadSpawner(Spawner):
    """Runs every unit in a new thread of the current process.

    Diagnostics of failed units are written to ``errstream`` (stderr
    unless given).
    """

    backend = 'thread'

    def __init__(self, program: str = defaults.PROGRAM_NAME,
                 buffer_size: int = DEFAULT_BUFFER_SIZE,
                 errstream: Optional[TextIO] = None):
        super().__init__(program, buffer_size)
        self.errstream = errstream

    def _unit(self, instream: BinaryIO, outstream: BinaryIO, node_id: str) -> int:
        from .unit import run_unit

        return run_unit(
            instream, outstream, self.errstream or sys.stderr,
            spawner=self,
            node_id=node_id,
            pad=False
        )

    def spawn(self, node_id: str) -> ThreadChannel:
        channel = ThreadChannel(node_id, self._unit, self.buffer_size)
        logger.debug(f"Spawned thread unit {node_id}")
        return channel


def make_spawner(config, errstream: Optional[TextIO] = None) -> Spawner:
    """Build the spawner selected by ``workers.backend``."""
    backend = config.get('workers.backend')
    program = config.get('workers.program', defaults.PROGRAM_NAME)
    buffer_size = config.get('workers.initial_buffer_size', DEFAULT_BUFFER_SIZE)

    if backend == 'process':
        spawner = ProcessSpawner(program, buffer_size, env=dict(config.environ))
        level = config.get('logging.level')
        if level:
            spawner.env[defaults.ENV_LOG_LEVEL] = str(level)
        if config.config_file is not None:
            spawner.env[defaults.ENV_CONFIG_FILE] = str(Path(config.config_file).resolve())
        return spawner
    if backend == 'thread':
        return ThreadSpawner(program, buffer_size, errstream=errstream)

    raise ValueError(f"Unknown worker backend: {backend}")
