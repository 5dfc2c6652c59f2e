"""Handler for 'kanso web' command."""

import shutil
import sys
from pathlib import Path

from textual_serve.server import Server


def web(args) -> int:
    repo_path = str(Path(args.repo).resolve())

    kanso = shutil.which("kanso")
    if kanso is None:
        print("error: kanso not found on PATH", file=sys.stderr)
        return 1

    command = f"{kanso} {repo_path} --board {args.board}"
    server = Server(command, host=args.host, port=args.port, title="kanso")

    print(f"serving {repo_path} at http://{args.host}:{args.port}")
    server.serve()
    return 0
