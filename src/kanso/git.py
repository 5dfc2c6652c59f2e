"""Git repository helpers and the [kanso] git config section."""

from pathlib import Path
from typing import Any

from git import InvalidGitRepositoryError, NoSuchPathError, Repo

from kanso.constants import BRANCH_NAME

KANSO_DEFAULTS = {
    "request-timeout": 10.0,
    "refresh-after-confirm": True,
    "refresh-interval": 30,
}


def _python_key(git_key: str) -> str:
    """Convert git-style key (hyphenated) to Python-style (underscored)."""
    return git_key.replace("-", "_")


def _git_key(python_key: str) -> str:
    """Convert Python-style key (underscored) to git-style (hyphenated)."""
    return python_key.replace("_", "-")


def coerce_kanso_value(git_key: str, raw: str):
    """Type-coerce a [kanso] value using the type of its default."""
    default = KANSO_DEFAULTS.get(git_key)
    if default is None:
        return raw
    if isinstance(default, bool):
        return raw.lower() in ("true", "yes", "1")
    if isinstance(default, float):
        return float(raw)
    if isinstance(default, int):
        return int(raw)
    return raw


def read_git_config(repo_path: str | Path) -> dict[str, dict[str, Any]]:
    """Read git config into {section: {key: value}} dict.

    Skips subsectioned entries (e.g. remote "origin"). Converts key
    hyphens to underscores. Coerces and fills defaults for [kanso].
    """
    repo = Repo(repo_path)
    reader = repo.config_reader()
    result: dict[str, dict[str, Any]] = {}
    for section in reader.sections():
        if '"' in section:
            continue
        items: dict[str, Any] = {}
        for git_k, raw in reader.items(section):
            py_key = _python_key(git_k)
            if section == "kanso":
                items[py_key] = coerce_kanso_value(git_k, raw)
            else:
                items[py_key] = raw
        result[section] = items
    kanso = result.setdefault("kanso", {})
    for git_k, default in KANSO_DEFAULTS.items():
        kanso.setdefault(_python_key(git_k), default)
    return result


def kanso_config(repo_path: str | Path) -> dict[str, Any]:
    """The [kanso] section with defaults applied, python-style keys."""
    return read_git_config(repo_path)["kanso"]


def default_config() -> dict[str, Any]:
    return {_python_key(k): v for k, v in KANSO_DEFAULTS.items()}


def write_git_config_key(repo_path: str | Path, section: str, key: str, value) -> None:
    """Write one key to the repository's git config. key is python-style."""
    git_k = _git_key(key)
    repo = Repo(repo_path)
    writer = repo.config_writer("repository")
    try:
        if isinstance(value, bool):
            writer.set_value(section, git_k, str(value).lower())
        else:
            writer.set_value(section, git_k, str(value))
    finally:
        writer.release()


def is_git_repo(path: str | Path) -> bool:
    """Check if path is a git repository."""
    try:
        Repo(path)
        return True
    except (InvalidGitRepositoryError, NoSuchPathError):
        return False


def init_repo(path: str | Path) -> Repo:
    """Initialize a new git repository at path."""
    return Repo.init(path)


def has_branch(repo_path: str | Path, branch: str = BRANCH_NAME) -> bool:
    """Check if a local branch exists."""
    repo = Repo(repo_path)
    return branch in [h.name for h in repo.heads]
