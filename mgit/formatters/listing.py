"""Configuration listing for ``mgit config``."""
from typing import List, Tuple

from rich.console import Console
from rich.text import Text

from mgit.models.repo import Repo

PATH_STYLE = "bold magenta"
KEY_STYLE = "blue"
KEY_WIDTH = 7


def repo_facts(repo: Repo, verbose: bool = False) -> List[Tuple[str, str]]:
    """``(key, value)`` pairs describing a repository.

    Unset values are left out, or shown with their defaults when
    ``verbose`` is set.
    """
    facts = [("path", repo.full_path)]
    if repo.name:
        facts.append(("name", repo.name))
    elif verbose:
        facts.append(("name", f"{repo.name_or_default()} (default)"))
    if repo.comment:
        facts.append(("comment", repo.comment))
    elif verbose:
        facts.append(("comment", "<not set>"))
    if repo.symbol:
        facts.append(("symbol", repo.symbol))
    elif verbose:
        facts.append(("symbol", f"{repo.symbol_or_default()} (default)"))
    if repo.tags:
        facts.append(("tags", ", ".join(sorted(repo.tags))))
    elif verbose:
        facts.append(("tags", "<none set>"))
    return facts


def format_fact(key: str, value: str, last: bool) -> Text:
    branch = "┖" if last else "┠"
    line = "─" * (KEY_WIDTH + 1 - len(key))
    text = Text(f"  {branch}{line} {key}: ", style=KEY_STYLE)
    text.append(value)
    return text


def print_repos(console: Console, repos: List[Repo], verbose: bool = False) -> None:
    """Print each repository, ordered by path, as a small tree."""
    for repo in sorted(repos, key=lambda r: r.path):
        console.print(Text(repo.path, style=PATH_STYLE))
        facts = repo_facts(repo, verbose)
        for i, (key, value) in enumerate(facts):
            console.print(format_fact(key, value, i == len(facts) - 1))
