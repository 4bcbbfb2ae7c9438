"""Exceptions raised by multinode operations."""


class FatalError(RuntimeError):
    """An unrecoverable condition that aborts the whole invocation (exit status 1)."""
