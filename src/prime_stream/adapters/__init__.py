from .output_sink import FileOutputSink

# Public adapter exports are optional but make wiring simpler.
__all__ = ["FileOutputSink"]
