"""Run output on disk."""

from painflow.artifacts.writer import RunWriteError, RunWriter

__all__ = ["RunWriteError", "RunWriter"]
