"""Fan-out of the four half-products of one split to concurrent units."""

import concurrent.futures
from collections.abc import Mapping
from typing import Dict, List, Sequence, Union

from intmul.arithmetic import digit_value
from intmul.domain import OperandPair, PartialProducts, Slot, SLOT_ORDER
from intmul.exceptions import IntmulError, ChildFailure, InvalidDigit
from intmul.infrastructure.logging import get_logger, child_node

from .channels import Spawner, WorkerChannel, EXIT_SUCCESS

logger = get_logger(__name__)

Tasks = Union[Mapping, Sequence[OperandPair]]


class Dispatcher:
    """
    Runs the four sub-multiplications of one split on fresh units.

    Every result is read from the channel of the unit that computed it and
    stored under that unit's slot, so completion order never affects which
    shift is applied to which product. All started units are waited on,
    and a non-zero exit status fails the whole split even when the unit
    produced a readable result.
    """

    def __init__(self, spawner: Spawner, node_id: str):
        self.spawner = spawner
        self.node_id = node_id

    def run_four(self, tasks: Tasks) -> PartialProducts:
        """
        Compute the HH, HL, LH and LL products concurrently.

        Args:
            tasks: Operand pairs keyed by Slot, or a sequence of four in
                HH, HL, LH, LL order

        Returns:
            PartialProducts tagged by slot

        Raises:
            ChannelError: if a unit cannot be started or fed
            ChildFailure: if a unit fails, exits non-zero or returns an
                unusable line
        """
        tasks = self._normalize(tasks)
        channels: Dict[Slot, WorkerChannel] = {}

        try:
            for slot in SLOT_ORDER:
                pair = tasks[slot]
                channel = self.spawner.spawn(child_node(self.node_id, slot.value))
                channels[slot] = channel
                channel.send_operands(pair.a, pair.b)
        except IntmulError as e:
            logger.error(f"Failed to start units for {self.node_id}: {e}")
            self._abort(channels)
            raise

        results: Dict[Slot, str] = {}
        failures: Dict[Slot, IntmulError] = {}

        with concurrent.futures.ThreadPoolExecutor(max_workers=len(channels)) as executor:
            future_to_slot = {
                executor.submit(self._read_result, slot, channels[slot], len(tasks[slot])): slot
                for slot in SLOT_ORDER
            }

            for future in concurrent.futures.as_completed(future_to_slot):
                slot = future_to_slot[future]
                try:
                    results[slot] = future.result()
                except IntmulError as e:
                    logger.error(f"Unit {child_node(self.node_id, slot.value)} failed: {e}")
                    failures[slot] = e

        if failures:
            for channel in channels.values():
                channel.terminate()

        statuses = self._wait_all(channels)
        for slot in SLOT_ORDER:
            status = statuses[slot]
            if status != EXIT_SUCCESS and slot not in failures:
                logger.error(f"Unit {channels[slot].node_id} exited with status {status}")
                failures[slot] = ChildFailure(
                    f"child {slot.value} exited with status {status}",
                    slot=slot.value,
                    exit_status=status
                )

        if failures:
            raise next(failures[slot] for slot in SLOT_ORDER if slot in failures)

        return PartialProducts.from_slots(results)

    def _normalize(self, tasks: Tasks) -> Dict[Slot, OperandPair]:
        if isinstance(tasks, Mapping):
            normalized = {Slot(slot): pair for slot, pair in tasks.items()}
        else:
            tasks = list(tasks)
            if len(tasks) != len(SLOT_ORDER):
                raise ValueError(f"expected 4 tasks, got {len(tasks)}")
            normalized = dict(zip(SLOT_ORDER, tasks))

        missing = [s.value for s in SLOT_ORDER if s not in normalized]
        if missing:
            raise ValueError(f"missing tasks for slots: {', '.join(missing)}")
        return normalized

    def _read_result(self, slot: Slot, channel: WorkerChannel, half: int) -> str:
        """Read and sanity-check one partial product."""
        line = channel.read_result()
        if not line:
            raise ChildFailure(
                f"failed to read results from child {slot.value}", slot=slot.value
            )

        # Product of two half-length operands has at most twice their digits
        if len(line) > 2 * half:
            raise ChildFailure(
                f"result from child {slot.value} too long: {len(line)} digits",
                slot=slot.value
            )

        try:
            for c in line:
                digit_value(c)
        except InvalidDigit as e:
            raise ChildFailure(
                f"malformed result from child {slot.value}", slot=slot.value,
                original_exception=e
            ) from e

        return line

    def _wait_all(self, channels: Dict[Slot, WorkerChannel]) -> Dict[Slot, int]:
        statuses: Dict[Slot, int] = {}
        for slot, channel in channels.items():
            try:
                statuses[slot] = channel.wait()
            finally:
                channel.close()
        return statuses

    def _abort(self, channels: Dict[Slot, WorkerChannel]) -> List[int]:
        """Stop and reap units started before a spawn failure."""
        statuses = []
        for channel in channels.values():
            channel.terminate()
            statuses.append(channel.wait())
            channel.close()
        return statuses
