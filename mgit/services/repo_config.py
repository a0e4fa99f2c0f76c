"""Reading and querying repository definitions.

Configuration is INI. Every section names a repository path; the
optional keys are ``name``, ``comment``, ``symbol`` and ``tags``
(whitespace separated). Reading is picky up front so the rest of the program can
rely on every Repo pointing at an existing git repository.
"""
import configparser
import os
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

import git

from mgit.exceptions import ConfigError
from mgit.logging_config import get_logger
from mgit.models.repo import Repo

logger = get_logger(__name__)

CONFIG_EXTENSION = ".conf"
NAME_KEY = "name"
COMMENT_KEY = "comment"
SYMBOL_KEY = "symbol"
TAGS_KEY = "tags"


def expand_path(path: str) -> str:
    """Expand a leading ``~`` or ``~user`` to that user's home directory.

    Raises:
        ValueError: If the home directory cannot be determined.
    """
    if not path.startswith("~"):
        return path
    expanded = os.path.expanduser(path)
    if expanded.startswith("~"):
        user = path[1:].split(os.sep, 1)[0]
        if user:
            raise ValueError(f"failed to look up user info for username {user}")
        raise ValueError("failed to look up home directory for current user")
    return expanded


def resolve_path(path: str, relative_to: Optional[str] = None) -> str:
    """Resolve ``path`` to a canonical absolute path that must exist.

    Relative paths are taken relative to ``relative_to`` (or its parent
    directory when it is a file), defaulting to the working directory.
    """
    expanded = Path(expand_path(path))
    if not expanded.is_absolute():
        if relative_to is None:
            base = Path.cwd()
        else:
            base = Path(relative_to)
            if not base.is_dir():
                base = base.parent
        expanded = base / expanded
    try:
        return str(expanded.resolve(strict=True))
    except (OSError, RuntimeError) as e:
        raise ValueError(f"failed to canonicalize path ({e})") from e


class RepoConfig:
    """All repositories defined in the configuration."""

    def __init__(self):
        self._repos: List[Repo] = []
        self._defined_in: Dict[str, str] = {}  # full path -> config file

    def __len__(self) -> int:
        return len(self._repos)

    def read(self, path: str) -> List[ConfigError]:
        """Read configuration at ``path``, returning the problems found.

        If ``path`` is a directory it is walked recursively and every file
        ending in ``.conf`` is read.
        """
        try:
            resolved = resolve_path(path)
        except ValueError as e:
            return [ConfigError(path, None, "failed to resolve config path", str(e))]

        errors: List[ConfigError] = []
        files: List[str] = []
        if os.path.isfile(resolved):
            files.append(resolved)
        elif os.path.isdir(resolved):
            def walk_error(e: OSError) -> None:
                errors.append(ConfigError(path, None, "failure when walking directory", str(e)))

            for dirpath, dirnames, filenames in os.walk(resolved, onerror=walk_error):
                dirnames.sort()
                for filename in sorted(filenames):
                    if filename.endswith(CONFIG_EXTENSION):
                        files.append(os.path.join(dirpath, filename))
        else:
            errors.append(ConfigError(path, None, "path is not a file or directory"))

        for config_file in files:
            errors.extend(self._read_file(config_file))

        logger.debug(f"Read {path}: {len(self._repos)} repos total, {len(errors)} problems")
        return errors

    def _read_file(self, config_file: str) -> List[ConfigError]:
        errors: List[ConfigError] = []
        parser = configparser.ConfigParser(interpolation=None)
        try:
            with open(config_file, encoding="utf-8") as f:
                parser.read_file(f)
        except OSError as e:
            return [ConfigError(config_file, None, "failed to read file", str(e))]
        except (configparser.Error, UnicodeDecodeError) as e:
            return [ConfigError(config_file, None, "failed to parse file", str(e))]

        for section in parser.sections():
            try:
                full_path = resolve_path(section, config_file)
            except ValueError as e:
                errors.append(
                    ConfigError(config_file, section, "failed to resolve repo path", str(e))
                )
                continue

            if full_path in self._defined_in:
                errors.append(
                    ConfigError(
                        config_file,
                        section,
                        "repo is already configured (ignoring new definition)",
                        f"first configured in {self._defined_in[full_path]}",
                    )
                )
                continue

            try:
                git.Repo(full_path).close()
            except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError) as e:
                errors.append(
                    ConfigError(config_file, section, "failed to open repository", repr(e))
                )
                continue

            settings = parser[section]
            repo = Repo(
                path=section,
                full_path=full_path,
                config_path=config_file,
                name=settings.get(NAME_KEY) or None,
                comment=settings.get(COMMENT_KEY) or None,
                symbol=settings.get(SYMBOL_KEY) or None,
                tags=frozenset(settings.get(TAGS_KEY, "").split()),
            )
            self._defined_in[full_path] = config_file
            self._repos.append(repo)
        return errors

    def repos(self) -> List[Repo]:
        """All repositories, sorted by name then path."""
        return sorted(self._repos, key=Repo.sort_key)

    def tagged(self, tag: str) -> List[Repo]:
        """Repositories carrying ``tag``, sorted by name then path."""
        return [repo for repo in self.repos() if tag in repo.tags]

    def iter_tags(self, tags: Optional[Sequence[str]]) -> Iterator[Tuple[Optional[str], List[Repo]]]:
        """Yield ``(tag, repos)`` for each requested tag.

        With no tags, yields a single ``(None, all repos)`` pair. A repo
        matching several tags is yielded once per matching tag.
        """
        if not tags:
            yield None, self.repos()
            return
        for tag in tags:
            yield tag, self.tagged(tag)

    def selected(self, tags: Optional[Sequence[str]]) -> List[Repo]:
        """Distinct repositories selected by ``tags``, sorted by name then path."""
        seen = {}
        for _, repos in self.iter_tags(tags):
            for repo in repos:
                seen.setdefault(repo, repo)
        return sorted(seen, key=Repo.sort_key)
