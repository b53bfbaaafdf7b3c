"""Context scopes tying log records to a node of the recursion tree."""

from contextlib import contextmanager
from typing import Optional

from .structured_logger import node_context, unit_context

ROOT_NODE = 'root'


def child_node(parent: Optional[str], slot: str) -> str:
    """Hierarchical node id of a sub-unit, e.g. ``root/HH/LH``."""
    return f"{parent or ROOT_NODE}/{slot}"


@contextmanager
def node_scope(node_id: Optional[str], unit: Optional[str] = None):
    """Set the node (and optionally unit backend) context for the block.

    Thread units do not inherit context variables from their parent, so
    every unit enters its own scope on startup.

    Example:
        with node_scope('root/HL', unit='thread'):
            logger.debug("splitting")  # record carries node_id=root/HL
    """
    node_token = node_context.set(node_id or ROOT_NODE)
    unit_token = unit_context.set(unit) if unit is not None else None
    try:
        yield
    finally:
        node_context.reset(node_token)
        if unit_token is not None:
            unit_context.reset(unit_token)
