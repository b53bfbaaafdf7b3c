from .config import Config
from . import defaults

__all__ = ['Config', 'defaults']
