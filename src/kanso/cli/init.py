"""Handler for 'kanso init'."""

from pathlib import Path

from kanso.cli._common import output_json
from kanso.constants import BRANCH_NAME, DEFAULT_BOARD, DEFAULT_LISTS
from kanso.git import has_branch, init_repo, is_git_repo
from kanso.store.gitstore import GitStore


def init_board(args) -> int:
    """Create the kanso branch with a default board."""
    repo_path = Path(args.repo).resolve()

    if not is_git_repo(repo_path):
        init_repo(repo_path)

    store = GitStore(repo_path)
    if has_branch(repo_path, BRANCH_NAME):
        boards = [b.id for b in store.list_boards()]
        if args.json:
            output_json({"repo_path": str(repo_path), "boards": boards, "created": False})
        else:
            print(f"Boards already initialized at {repo_path}")
        return 0

    board = store.create_board(repo_path.name or "Board", board_id=DEFAULT_BOARD)
    lists = [store.add_list(board.id, title).title for title in DEFAULT_LISTS]

    if args.json:
        output_json({"repo_path": str(repo_path), "boards": [board.id], "lists": lists, "created": True})
    else:
        print(f"Initialized kanso board at {repo_path}")
        print(f"Lists: {', '.join(lists)}")

    return 0
