"""Structured logging infrastructure for worker units."""

from .structured_logger import StructuredLogger, get_logger, node_context, unit_context
from .context import node_scope, child_node, ROOT_NODE
from .setup import setup_logging

__all__ = [
    'StructuredLogger',
    'get_logger',
    'node_context',
    'unit_context',
    'node_scope',
    'child_node',
    'ROOT_NODE',
    'setup_logging'
]
