"""Domain Events related to API calls and resilience.

Emitted by the retry service when a retry is scheduled or a call fails
definitively.
"""

from dataclasses import dataclass, field
import time

# Base Event Class
@dataclass
class DomainEvent:
    """Base class for domain events."""
    pass

# --- Specific API Events ---

@dataclass
class RetryScheduled(DomainEvent):
    """Event triggered when a retry is scheduled for a rate-limited API call."""
    operation: str # e.g., 'get_issue(42)'
    attempt_number: int # 1-based number of the attempt that failed
    max_attempts: int
    delay_seconds: float
    timestamp: float = field(default_factory=time.time)

@dataclass
class ApiCallFailed(DomainEvent):
    """Event triggered when an API call fails definitively (after retries, or not retryable)."""
    operation: str
    attempts: int
    error_type: str
    error_message: str
    timestamp: float = field(default_factory=time.time)
