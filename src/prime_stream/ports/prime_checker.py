from __future__ import annotations

from typing import Protocol, runtime_checkable


# PrimeChecker port is the boundary between pool workers and the primality strategy.
@runtime_checkable
class PrimeChecker(Protocol):
    def is_prime(self, candidate: int) -> bool:
        """Return True if candidate is prime under the configured strategy."""
        raise NotImplementedError("PrimeChecker is a port; use a concrete adapter.")
