from __future__ import annotations

import math
import random
from dataclasses import dataclass, field

from prime_stream.ports.prime_checker import PrimeChecker

# Miller-Rabin with the first 13 prime witnesses is exact for every n below this bound.
DETERMINISTIC_WITNESSES: tuple[int, ...] = (2, 3, 5, 7, 11, 13, 17, 19, 23, 29, 31, 37, 41)
DETERMINISTIC_LIMIT = 3_317_044_064_679_887_385_961_981
DEFAULT_PROBABILISTIC_CEILING = 2**64


def is_even(n: int) -> bool:
    # Lowest-order bit decides parity; zero is even.
    return n & 1 == 0


def passes_cheap_filters(n: int) -> bool:
    # Even numbers and multiples of 3 never reach the expensive tests.
    return not is_even(n) and n % 3 != 0


def first_trial_divisor(n: int) -> int:
    # floor(sqrt(n)) rounded up to the nearest odd integer.
    return math.isqrt(n) | 1


def is_prime_trial_division(n: int) -> bool:
    """Deterministic trial division over odd divisors from sqrt(n) down to 3."""
    if n < 2:
        return False
    if n < 4:
        return True
    if is_even(n):
        return False
    for divisor in range(first_trial_divisor(n), 2, -2):
        if n % divisor == 0:
            return False
    return True


def is_prime_miller_rabin(n: int, *, rounds: int = 0, rng: random.Random | None = None) -> bool:
    """Miller-Rabin compositeness test.

    The fixed witness set makes the answer exact below ``DETERMINISTIC_LIMIT``.
    ``rounds`` extra random witnesses may be added; they can only turn a
    "prime" answer into "composite", never the other way round.
    """
    if n < 2:
        return False
    for p in DETERMINISTIC_WITNESSES:
        if n == p:
            return True
        if n % p == 0:
            return False

    d = n - 1
    s = 0
    while is_even(d):
        d >>= 1
        s += 1

    witnesses: list[int] = list(DETERMINISTIC_WITNESSES)
    if rounds > 0:
        source = rng if rng is not None else random.Random()
        witnesses.extend(source.randrange(2, n - 1) for _ in range(rounds))

    for a in witnesses:
        if _is_composite_witness(a, d, s, n):
            return False
    return True


def _is_composite_witness(a: int, d: int, s: int, n: int) -> bool:
    x = pow(a, d, n)
    if x == 1 or x == n - 1:
        return False
    for _ in range(s - 1):
        x = pow(x, 2, n)
        if x == n - 1:
            return False
    return True


@dataclass(frozen=True, slots=True)
class PrimalityTester(PrimeChecker):
    # Strategy used by pool workers: cheap filters, optional fast test below the ceiling, trial division otherwise.
    probabilistic: bool = False
    ceiling: int = DEFAULT_PROBABILISTIC_CEILING
    rounds: int = 0
    rng: random.Random = field(default_factory=random.Random, compare=False, repr=False)

    def __post_init__(self) -> None:
        if self.ceiling > DETERMINISTIC_LIMIT:
            raise ValueError("probabilistic ceiling must not exceed the deterministic witness limit")
        if self.rounds < 0:
            raise ValueError("probabilistic rounds must be non-negative")

    def is_prime(self, candidate: int) -> bool:
        if candidate < 5:
            return candidate in (2, 3)
        if not passes_cheap_filters(candidate):
            return False
        if self.uses_fast_path(candidate):
            return is_prime_miller_rabin(candidate, rounds=self.rounds, rng=self.rng)
        return is_prime_trial_division(candidate)

    def uses_fast_path(self, candidate: int) -> bool:
        return self.probabilistic and candidate < self.ceiling
