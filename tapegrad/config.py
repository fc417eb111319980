"""
tapegrad Configuration

Dataclass configuration objects shared by the tape and the training loop.
Defaults: a 100000-node tape and plain gradient descent.
"""

from dataclasses import dataclass

DEFAULT_TAPE_CAPACITY = 100_000


@dataclass
class TapeConfig:
    """Configuration for a Tape arena."""
    capacity: int = DEFAULT_TAPE_CAPACITY  # Maximum number of live nodes
    initial_size: int = 1024               # Columns grow geometrically from here

    def __post_init__(self):
        if self.capacity <= 0:
            raise ValueError(f"TapeConfig.capacity must be positive, got {self.capacity}")
        if self.initial_size <= 0:
            raise ValueError(f"TapeConfig.initial_size must be positive, got {self.initial_size}")


@dataclass
class TrainConfig:
    """Configuration for full-batch gradient descent on an MLP."""
    # Optimization
    learning_rate: float = 0.1
    steps: int = 5000
    tolerance: float = 0.0     # Stop early once the loss drops below this value

    # Backward pass: 'linear' or 'dfs'
    strategy: str = "linear"

    # Logging
    log_every: int = 500       # 0 disables periodic loss reports

    def __post_init__(self):
        if self.steps < 0:
            raise ValueError(f"TrainConfig.steps must be non-negative, got {self.steps}")
        if self.log_every < 0:
            raise ValueError(f"TrainConfig.log_every must be non-negative, got {self.log_every}")
