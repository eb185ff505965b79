from .final_sort import FinalSortPass, read_prime_file
from .find_primes import PrimalityWorker, PrimalityWorkerPool
from .generate_candidates import CandidateGenerator
from .write_primes import PrimeWriter, sort_window

__all__ = [
    "CandidateGenerator",
    "FinalSortPass",
    "PrimalityWorker",
    "PrimalityWorkerPool",
    "PrimeWriter",
    "read_prime_file",
    "sort_window",
]
