"""Tests for reading repository definitions"""
import os

import git
import pytest

from mgit.services.repo_config import RepoConfig, expand_path, resolve_path


@pytest.fixture
def repos_dir(temp_dir):
    """Three small repositories under ``temp_dir/src``."""
    src = temp_dir / "src"
    for name in ("alpha", "beta", "gamma"):
        git.Repo.init(src / name).close()
    return src


def write_config(path, text):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return str(path)


class TestReadFile:
    """Test reading a single config file."""

    def test_reads_name_symbol_and_tags(self, temp_dir, repos_dir):
        """Test reading every optional key."""
        config_file = write_config(temp_dir / "mgit.conf", (
            f"[{repos_dir / 'alpha'}]\n"
            "name = first\n"
            "symbol = ★\n"
            "tags = work  oss\n"
        ))
        config = RepoConfig()

        assert config.read(config_file) == []
        [repo] = config.repos()
        assert repo.name == "first"
        assert repo.symbol == "★"
        assert repo.tags == frozenset({"work", "oss"})
        assert repo.full_path == str(repos_dir / "alpha")
        assert repo.config_path == config_file

    def test_reads_comment(self, temp_dir, repos_dir):
        """The comment key is kept on the repository."""
        config_file = write_config(temp_dir / "mgit.conf", (
            f"[{repos_dir / 'alpha'}]\n"
            "comment = my notes\n"
        ))
        config = RepoConfig()

        assert config.read(config_file) == []
        [repo] = config.repos()
        assert repo.comment == "my notes"

    def test_defaults_when_keys_missing(self, temp_dir, repos_dir):
        """Test a section with no keys."""
        config_file = write_config(temp_dir / "mgit.conf", f"[{repos_dir / 'beta'}]\n")
        config = RepoConfig()
        config.read(config_file)

        [repo] = config.repos()
        assert repo.name is None
        assert repo.name_or_default() == "beta"
        assert repo.tags == frozenset()
        assert repo.comment is None

    def test_relative_paths_resolved_against_config_dir(self, temp_dir, repos_dir):
        """Test resolving relative paths against the config file's directory."""
        config_file = write_config(temp_dir / "mgit.conf", "[src/gamma]\n")
        config = RepoConfig()

        assert config.read(config_file) == []
        assert config.repos()[0].full_path == str(repos_dir / "gamma")

    def test_missing_repository_reported(self, temp_dir, repos_dir):
        """Test that a missing path is reported and the rest still read."""
        config_file = write_config(temp_dir / "mgit.conf", (
            f"[{temp_dir / 'missing'}]\n"
            f"[{repos_dir / 'alpha'}]\n"
        ))
        config = RepoConfig()
        errors = config.read(config_file)

        assert len(errors) == 1
        assert errors[0].repo_path == str(temp_dir / "missing")
        assert errors[0].message == "failed to resolve repo path"
        # The good section still counts
        assert len(config) == 1

    def test_directory_that_is_not_a_repository(self, temp_dir):
        """Test reporting a directory that is not a git repository."""
        (temp_dir / "plain").mkdir()
        config_file = write_config(temp_dir / "mgit.conf", f"[{temp_dir / 'plain'}]\n")
        errors = RepoConfig().read(config_file)

        assert [e.message for e in errors] == ["failed to open repository"]

    def test_duplicate_definition_ignored(self, temp_dir, repos_dir):
        """Test that the first definition of a repository wins."""
        first = write_config(temp_dir / "a.conf", f"[{repos_dir / 'alpha'}]\nname = one\n")
        second = write_config(temp_dir / "b.conf", "[src/alpha]\nname = two\n")
        config = RepoConfig()

        assert config.read(first) == []
        errors = config.read(second)

        assert len(errors) == 1
        assert "already configured" in errors[0].message
        assert first in errors[0].cause
        assert [r.name for r in config.repos()] == ["one"]

    def test_unparseable_file(self, temp_dir):
        """Test reporting a file that is not valid INI."""
        config_file = write_config(temp_dir / "bad.conf", "no section header\n")
        errors = RepoConfig().read(config_file)

        assert [e.message for e in errors] == ["failed to parse file"]

    def test_error_message_names_file_and_section(self, temp_dir):
        """Test the text of a configuration problem."""
        config_file = write_config(temp_dir / "mgit.conf", "[nowhere]\n")
        [error] = RepoConfig().read(config_file)

        assert str(error).startswith(f"{config_file} [nowhere]: failed to resolve repo path")


class TestReadDirectory:
    """Test walking a config directory."""

    def test_only_conf_files_read(self, temp_dir, repos_dir):
        """Test that only .conf files in a directory are read."""
        conf_dir = temp_dir / "conf.d"
        write_config(conf_dir / "one.conf", f"[{repos_dir / 'alpha'}]\n")
        write_config(conf_dir / "nested" / "two.conf", f"[{repos_dir / 'beta'}]\n")
        write_config(conf_dir / "notes.txt", f"[{repos_dir / 'gamma'}]\n")
        config = RepoConfig()

        assert config.read(str(conf_dir)) == []
        assert [r.name_or_default() for r in config.repos()] == ["alpha", "beta"]

    def test_missing_config_path(self, temp_dir):
        """Test reporting a config path that does not exist."""
        errors = RepoConfig().read(str(temp_dir / "nope"))

        assert len(errors) == 1
        assert errors[0].message == "failed to resolve config path"


class TestQueries:
    """Test selecting repositories by tag."""

    @pytest.fixture
    def config(self, temp_dir, repos_dir):
        config_file = write_config(temp_dir / "mgit.conf", (
            f"[{repos_dir / 'gamma'}]\ntags = work\n"
            f"[{repos_dir / 'alpha'}]\ntags = work oss\n"
            f"[{repos_dir / 'beta'}]\ntags = oss\n"
        ))
        config = RepoConfig()
        config.read(config_file)
        return config

    def test_repos_sorted_by_name(self, config):
        """Test that repositories are listed by name."""
        assert [r.name_or_default() for r in config.repos()] == ["alpha", "beta", "gamma"]

    def test_tagged(self, config):
        assert [r.name_or_default() for r in config.tagged("work")] == ["alpha", "gamma"]
        assert config.tagged("missing") == []

    def test_iter_tags_without_tags_yields_everything(self, config):
        """Test iterating with no tags requested."""
        assert [(tag, len(repos)) for tag, repos in config.iter_tags(None)] == [(None, 3)]

    def test_iter_tags_per_tag(self, config):
        """Test iterating one group per requested tag."""
        groups = [(tag, [r.name_or_default() for r in repos])
                  for tag, repos in config.iter_tags(["oss", "work"])]
        assert groups == [("oss", ["alpha", "beta"]), ("work", ["alpha", "gamma"])]

    def test_selected_is_distinct(self, config):
        """Test that a repository with several tags is selected once."""
        selected = config.selected(["oss", "work"])
        assert [r.name_or_default() for r in selected] == ["alpha", "beta", "gamma"]


class TestPaths:
    """Test path expansion and resolution."""

    def test_expand_home(self, monkeypatch):
        """Test expanding ~ to the home directory."""
        monkeypatch.setenv("HOME", "/home/tester")
        assert expand_path("~/src") == "/home/tester/src"

    def test_unknown_user_rejected(self):
        """Test expanding ~user for a user that does not exist."""
        with pytest.raises(ValueError, match="no-such-user-here"):
            expand_path("~no-such-user-here/src")

    def test_plain_paths_untouched(self):
        """Test that paths without ~ are left alone."""
        assert expand_path("/tmp/x") == "/tmp/x"

    def test_resolve_relative_to_file(self, temp_dir):
        """Test resolving a path relative to a file."""
        (temp_dir / "sub").mkdir()
        config_file = temp_dir / "mgit.conf"
        config_file.write_text("")

        assert resolve_path("sub", str(config_file)) == str(temp_dir / "sub")

    def test_resolve_missing_path(self, temp_dir):
        """Test resolving a path that does not exist."""
        with pytest.raises(ValueError):
            resolve_path(os.path.join(str(temp_dir), "missing"))
