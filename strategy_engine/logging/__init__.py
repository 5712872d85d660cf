"""Engine logging module."""
from .engine_logger import EngineLogger

__all__ = ['EngineLogger']
