"""Configuration handling for mgit"""

from dataclasses import dataclass, field
from typing import List

DEFAULT_CONFIG_PATH = "~/.mgit"
DEFAULT_CONCURRENCY = 8
WARNING_ACTIONS = ["ignore", "print", "fatal"]


@dataclass
class Config:
    """Run configuration for mgit with validation."""

    # Where repository definitions are read from
    config_paths: List[str] = field(default_factory=lambda: [DEFAULT_CONFIG_PATH])
    warning_action: str = "print"

    # Repository selection
    tags: List[str] = field(default_factory=list)

    # Fetch scheduling
    concurrency: int = DEFAULT_CONCURRENCY
    tick: float = 0.05  # Seconds between scheduler and worker polls
    resize_settle: float = 0.5  # Seconds the terminal size must hold before a full redraw

    # Output
    verbose: bool = False
    debug: bool = False

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_concurrency()
        self._validate_tick()
        self._validate_resize_settle()
        self._validate_warning_action()
        self._validate_config_paths()

    def _validate_concurrency(self):
        """Validate concurrency is a positive integer."""
        if isinstance(self.concurrency, bool) or not isinstance(self.concurrency, int):
            raise ValueError(f"concurrency must be an integer, got {self.concurrency!r}")
        if self.concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {self.concurrency}")

    def _validate_tick(self):
        """Validate tick is positive."""
        if self.tick <= 0:
            raise ValueError(f"tick must be positive, got {self.tick}")

    def _validate_resize_settle(self):
        """Validate resize_settle is not negative."""
        if self.resize_settle < 0:
            raise ValueError(f"resize_settle cannot be negative, got {self.resize_settle}")

    def _validate_warning_action(self):
        """Validate warning_action is one of allowed values."""
        if self.warning_action not in WARNING_ACTIONS:
            raise ValueError(
                f"warning_action must be one of {WARNING_ACTIONS}, got '{self.warning_action}'"
            )

    def _validate_config_paths(self):
        """Validate at least one config path is given."""
        if not self.config_paths:
            raise ValueError("config_paths cannot be empty")

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return {
            "config_paths": self.config_paths,
            "warning_action": self.warning_action,
            "tags": self.tags,
            "concurrency": self.concurrency,
            "tick": self.tick,
            "resize_settle": self.resize_settle,
            "verbose": self.verbose,
            "debug": self.debug,
        }

    @classmethod
    def from_dict(cls, config_dict: dict) -> "Config":
        """Create Config from dictionary."""
        known_fields = {
            "config_paths",
            "warning_action",
            "tags",
            "concurrency",
            "tick",
            "resize_settle",
            "verbose",
            "debug",
        }

        filtered = {k: v for k, v in config_dict.items() if k in known_fields}
        return cls(**filtered)
