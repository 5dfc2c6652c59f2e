"""Handlers for 'kanso config' commands."""

from pathlib import Path

from kanso.cli._common import error, output_json
from kanso.git import KANSO_DEFAULTS, coerce_kanso_value, is_git_repo, kanso_config, write_git_config_key

BOOL_WORDS = ("true", "false", "yes", "no", "1", "0")


def _config_or_die(repo: str, json_mode: bool) -> tuple[Path, dict]:
    repo_path = Path(repo).resolve()
    if not is_git_repo(repo_path):
        error(f"{repo_path} is not a git repository", json_mode)
    return repo_path, kanso_config(repo_path)


def _check_key(key: str, json_mode: bool) -> str:
    """Accept either git-style or python-style keys; return git-style."""
    git_key = key.replace("_", "-")
    if git_key not in KANSO_DEFAULTS:
        error(f"Unknown key '{key}'. Known keys: {', '.join(KANSO_DEFAULTS)}", json_mode)
    return git_key


def _format(value) -> str:
    return str(value).lower() if isinstance(value, bool) else str(value)


def config_get(args) -> int:
    """Show one [kanso] setting, or all of them."""
    _repo_path, config = _config_or_die(args.repo, args.json)

    if args.key is None:
        items = {git_key: config[git_key.replace("-", "_")] for git_key in KANSO_DEFAULTS}
        if args.json:
            output_json(items)
        else:
            for git_key, value in items.items():
                print(f"{git_key} = {_format(value)}")
        return 0

    git_key = _check_key(args.key, args.json)
    value = config[git_key.replace("-", "_")]
    if args.json:
        output_json({git_key: value})
    else:
        print(_format(value))
    return 0


def config_set(args) -> int:
    """Write one [kanso] setting to the repository's git config."""
    repo_path, _config = _config_or_die(args.repo, args.json)
    git_key = _check_key(args.key, args.json)

    if isinstance(KANSO_DEFAULTS[git_key], bool) and args.value.lower() not in BOOL_WORDS:
        error(f"Invalid value for {git_key}: {args.value!r} (expected true or false)", args.json)
    try:
        value = coerce_kanso_value(git_key, args.value)
    except ValueError:
        error(f"Invalid value for {git_key}: {args.value!r}", args.json)
    if not isinstance(value, bool) and value < 0:
        error(f"{git_key} must not be negative", args.json)

    write_git_config_key(repo_path, "kanso", git_key.replace("-", "_"), value)

    if args.json:
        output_json({git_key: value})
    else:
        print(f"{git_key} = {_format(value)}")
    return 0
