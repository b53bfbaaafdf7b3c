"""Domain types and input validation."""

from .operands import OperandPair, PartialProducts, Slot, SLOT_ORDER, split_tasks

__all__ = ['OperandPair', 'PartialProducts', 'Slot', 'SLOT_ORDER', 'split_tasks']
