"""Utility modules"""
from .logger import get_logger, setup_logging
from .idgen import generate_id, generate_event_id, generate_correlation_id, sequential_id_generator
from .time import utc_now, ensure_utc

__all__ = [
    "get_logger",
    "setup_logging",
    "generate_id",
    "generate_event_id",
    "generate_correlation_id",
    "sequential_id_generator",
    "utc_now",
    "ensure_utc",
]
