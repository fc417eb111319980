# tapegrad/core/errors.py
"""
Error kinds raised by the tape and the parameter registry.

All of them are recoverable: the tape or registry is left in a consistent
state, so the caller can reset the tape and retry, or abort the batch.
"""


class TapeError(RuntimeError):
    """Base class for tape and registry errors."""


class CapacityExceededError(TapeError):
    """Allocation was attempted on a tape that already holds `capacity` nodes."""

    def __init__(self, capacity: int):
        self.capacity = capacity
        super().__init__(
            f"Tape capacity exceeded: cannot allocate more than {capacity} nodes "
            f"(reset the tape or raise TapeConfig.capacity)"
        )


class StaleHandleError(TapeError):
    """A Value handle issued before the last tape reset was dereferenced."""

    def __init__(self, index: int, handle_generation: int, tape_generation: int):
        self.index = index
        self.handle_generation = handle_generation
        self.tape_generation = tape_generation
        super().__init__(
            f"Stale handle: node {index} belongs to tape generation "
            f"{handle_generation}, but the tape is at generation {tape_generation}"
        )


class ReleasedParameterError(TapeError):
    """A Parameter was used after its registry released it."""

    def __init__(self, name=None):
        self.name = name
        label = f" {name!r}" if name else ""
        super().__init__(f"Parameter{label} was released and can no longer be used")
