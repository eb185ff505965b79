from .composition_root import PipelineRuntime, build_runtime, resolve_worker_count
from .runner import PipelineRunner, cancel_on_interrupt, resolve_outcome

# Kernel exports are minimal and runtime-focused.
__all__ = [
    "PipelineRunner",
    "PipelineRuntime",
    "build_runtime",
    "cancel_on_interrupt",
    "resolve_outcome",
    "resolve_worker_count",
]
