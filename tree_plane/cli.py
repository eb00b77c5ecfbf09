import argparse
import logging
import sys
from typing import Callable, NoReturn, Sequence

from tree_plane.config import RepoConfig
from tree_plane.display import format_log_entry, format_status
from tree_plane.errors import CorruptionError, UsageError, UserError
from tree_plane.repo import Repository, create_file_repository

logger = logging.getLogger("tree_plane")

Handler = Callable[[Repository, list[str]], None]


class _Parser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:
        raise UsageError("Incorrect operands.")


def _init(repo: Repository, operands: list[str]) -> None:
    repo.init()


def _add(repo: Repository, operands: list[str]) -> None:
    repo.add(operands[0])


def _commit(repo: Repository, operands: list[str]) -> None:
    repo.commit(operands[0])


def _rm(repo: Repository, operands: list[str]) -> None:
    repo.rm(operands[0])


def _log(repo: Repository, operands: list[str]) -> None:
    for commit in repo.log():
        print(format_log_entry(commit))


def _global_log(repo: Repository, operands: list[str]) -> None:
    for commit in repo.global_log():
        print(format_log_entry(commit))


def _find(repo: Repository, operands: list[str]) -> None:
    for commit_id in repo.find(operands[0]):
        print(commit_id)


def _status(repo: Repository, operands: list[str]) -> None:
    print(format_status(repo.status()))


def _branch(repo: Repository, operands: list[str]) -> None:
    repo.branch(operands[0])


def _rm_branch(repo: Repository, operands: list[str]) -> None:
    repo.rm_branch(operands[0])


def _switch(repo: Repository, operands: list[str]) -> None:
    repo.switch(operands[0])


def _reset(repo: Repository, operands: list[str]) -> None:
    repo.reset(operands[0])


def _restore(repo: Repository, operands: list[str]) -> None:
    # `restore -- <file>` or `restore <commit> -- <file>`
    if len(operands) == 2 and operands[0] == "--":
        repo.restore(operands[1])
    elif len(operands) == 3 and operands[1] == "--":
        repo.restore(operands[2], commit_id=operands[0])
    else:
        raise UsageError("Incorrect operands.")


COMMANDS: dict[str, tuple[tuple[int, ...], Handler]] = {
    "init": ((0,), _init),
    "add": ((1,), _add),
    "commit": ((1,), _commit),
    "rm": ((1,), _rm),
    "log": ((0,), _log),
    "global-log": ((0,), _global_log),
    "find": ((1,), _find),
    "status": ((0,), _status),
    "branch": ((1,), _branch),
    "rm-branch": ((1,), _rm_branch),
    "switch": ((1,), _switch),
    "reset": ((1,), _reset),
    "restore": ((2, 3), _restore),
}

_OPTIONS_WITH_VALUE = ("--work-tree",)


def build_parser() -> argparse.ArgumentParser:
    parser = _Parser(prog="tree-plane", description="Local version control")
    parser.add_argument(
        "--work-tree",
        default=None,
        help="Working tree root (default: $TREE_PLANE_WORK_TREE or cwd)",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log debug output to stderr"
    )
    return parser


def split_argv(argv: Sequence[str]) -> tuple[list[str], str | None, list[str]]:
    """
    Split `argv` into global options, the command name and its operands.

    Options are only recognized before the command; everything after it is
    passed to the command verbatim, so `commit -fix` commits the message `-fix`.
    """
    argv = list(argv)
    i = 0
    while i < len(argv) and argv[i].startswith("-"):
        i += 2 if argv[i] in _OPTIONS_WITH_VALUE else 1
    options = argv[:i]
    if i >= len(argv):
        return options, None, []
    return options, argv[i], argv[i + 1 :]


def run(argv: Sequence[str], repo_factory: Callable[[RepoConfig], Repository]) -> None:
    options, command, operands = split_argv(argv)
    args = build_parser().parse_args(options)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="[%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if command is None:
        raise UsageError("Please enter a command.")
    if command not in COMMANDS:
        raise UsageError("No command with that name exists.")

    arities, handler = COMMANDS[command]
    if len(operands) not in arities:
        raise UsageError("Incorrect operands.")

    repo = repo_factory(RepoConfig.from_env(args.work_tree))
    handler(repo, operands)


def main(
    argv: Sequence[str] | None = None,
    repo_factory: Callable[[RepoConfig], Repository] = create_file_repository,
) -> int:
    try:
        run(sys.argv[1:] if argv is None else argv, repo_factory)
    except UserError as e:
        print(e)
        return 0
    except CorruptionError as e:
        logger.error("Repository is corrupt: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
