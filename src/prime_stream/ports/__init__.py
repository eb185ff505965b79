from .log_sink import LogSink
from .output_sink import OutputSink
from .prime_checker import PrimeChecker

# Public port exports keep wiring explicit at composition time.
__all__ = ["LogSink", "OutputSink", "PrimeChecker"]
