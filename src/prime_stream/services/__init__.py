from .bounded_queue import BoundedQueue, QueueClosedError
from .cancellation import CancellationToken
from .primality import (
    PrimalityTester,
    is_even,
    is_prime_miller_rabin,
    is_prime_trial_division,
    passes_cheap_filters,
)
from .stage_thread import StageThread

__all__ = [
    "BoundedQueue",
    "CancellationToken",
    "PrimalityTester",
    "QueueClosedError",
    "StageThread",
    "is_even",
    "is_prime_miller_rabin",
    "is_prime_trial_division",
    "passes_cheap_filters",
]
