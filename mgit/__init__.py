"""
mgit - fetch and fast-forward many git repositories at once
"""

from .__version__ import __version__
from .config import Config
from .cli.main import main

__all__ = ["Config", "main", "__version__"]
