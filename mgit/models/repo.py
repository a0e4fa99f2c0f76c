"""Repository descriptor model"""
import os
from dataclasses import dataclass, field
from typing import FrozenSet, Optional, Tuple

import git

from mgit.constants import DEFAULT_SYMBOL, ROOT_NAME


@dataclass(frozen=True)
class Repo:
    """A configured repository.

    Identity is the path as the user wrote it in the configuration; all
    other attributes are carried along but do not take part in equality
    or hashing. Instances are immutable and shared freely between threads.
    """
    path: str
    full_path: str = field(compare=False)
    config_path: str = field(default="", compare=False)
    name: Optional[str] = field(default=None, compare=False)
    comment: Optional[str] = field(default=None, compare=False)
    symbol: Optional[str] = field(default=None, compare=False)
    tags: FrozenSet[str] = field(default_factory=frozenset, compare=False)

    def name_or_default(self) -> str:
        """Return the configured name, or one derived from the path."""
        if self.name:
            return self.name
        if self.path == os.sep:
            return ROOT_NAME
        return os.path.basename(self.path.rstrip(os.sep)) or self.path

    def symbol_or_default(self) -> str:
        """Return the configured symbol, or the default bullet."""
        return self.symbol if self.symbol else DEFAULT_SYMBOL

    def sort_key(self) -> Tuple[str, str]:
        """Key used everywhere repositories are listed: name, then path."""
        return (self.name_or_default(), self.path)

    def open(self) -> git.Repo:
        """Open a fresh git.Repo for this repository.

        GitPython repos are lightweight; each thread opens its own
        rather than sharing one instance.
        """
        return git.Repo(self.full_path)

    def __str__(self) -> str:
        return self.name_or_default()
