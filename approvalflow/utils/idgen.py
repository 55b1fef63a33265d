"""ID Generation Utilities"""
import itertools
import uuid
from datetime import datetime
from typing import Callable, Optional


IdGenerator = Callable[[], str]


def generate_id(prefix: Optional[str] = None) -> str:
    """
    Generate a unique ID with optional prefix
    
    Args:
        prefix: Optional prefix for the ID (e.g., 'EVT', 'PAY')
        
    Returns:
        Unique ID string
        
    Examples:
        >>> generate_id('EVT')
        'EVT-a1b2c3d4e5f6'
        >>> generate_id()
        'a1b2c3d4e5f6'
    """
    # Generate short unique ID from UUID4
    unique_part = uuid.uuid4().hex[:12]
    
    if prefix:
        return f"{prefix}-{unique_part}"
    return unique_part


def generate_event_id() -> str:
    """Generate workflow event ID"""
    return generate_id("EVT")


def generate_payload_id() -> str:
    """Generate payload ID"""
    return generate_id("PAY")


def sequential_id_generator(prefix: str = "EVT", start: int = 1) -> IdGenerator:
    """
    Deterministic generator yielding PREFIX-1, PREFIX-2, ...
    
    Used where event ids must be reproducible (tests, replays).
    """
    counter = itertools.count(start)
    return lambda: f"{prefix}-{next(counter)}"


def generate_correlation_id() -> str:
    """
    Generate a correlation ID for request tracing
    
    Returns:
        Correlation ID string with timestamp prefix
    """
    timestamp = datetime.utcnow().strftime("%Y%m%d%H%M%S")
    unique_part = uuid.uuid4().hex[:8]
    return f"COR-{timestamp}-{unique_part}"
