"""
Command-line interface for git-helper.

This module is responsible for argument parsing and delegating to the
operations, message drafting and configuration modules. It is the only
place where errors are turned into printed messages and exit codes.
"""

from __future__ import annotations

import argparse
import functools
import sys
from typing import Callable, Dict, List, Optional, Tuple

from . import __version__
from .ai.interface import CompletionClient
from .config import (
    KNOWN_MODELS,
    ConfigPaths,
    ConfigResolver,
    EffectiveConfig,
    RunOptions,
    mask_secret,
)
from .errors import (
    GitHelperError,
    MissingCredentialError,
    MissingMessageError,
    NotARepositoryError,
)
from .git_adapter import ensure_repository
from .logging_utils import configure_logging
from .messages import generate_commit_message
from .operations import OperationResult, run_pull, run_push

PROG = "git-helper"

# Failures that mean the command could not even start.
_FATAL_ERRORS = (NotARepositoryError, MissingMessageError, MissingCredentialError)


def build_parsers() -> Tuple[argparse.ArgumentParser, Dict[str, argparse.ArgumentParser]]:
    """
    Build the top-level parser and return it with the parser of each
    command, keyed by command name, for the help output.
    """

    parser = argparse.ArgumentParser(
        prog=PROG,
        description="Stage, commit, push and pull with git, optionally letting an AI model "
        "draft the commit message.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (can be specified multiple times).",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="<command>")

    push = subparsers.add_parser("push", help="Stage all changes, commit and push.")
    push.add_argument("message", nargs="?", help="Commit message.")
    push.add_argument("-b", "--branch", default="main", help="Branch to push (default: main).")
    push.add_argument("--remote", default="origin", help="Remote to push to (default: origin).")
    push.add_argument(
        "--ai",
        dest="use_ai",
        action="store_true",
        help="Generate the commit message from the diff with an AI model.",
    )
    push.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the git commands that would run without changing the repository.",
    )

    pull = subparsers.add_parser("pull", help="Pull changes from a remote branch.")
    pull.add_argument("-b", "--branch", default="main", help="Branch to pull (default: main).")
    pull.add_argument("--remote", default="origin", help="Remote to pull from (default: origin).")
    pull.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the git command that would run without changing the repository.",
    )

    generate = subparsers.add_parser(
        "generate", help="Print an AI-generated commit message for the pending changes."
    )
    generate.add_argument(
        "--staged-only",
        action="store_true",
        help="Only analyze staged changes.",
    )

    config = subparsers.add_parser("config", help="Manage the API key and model.")
    config_sub = config.add_subparsers(dest="config_command", metavar="<action>")

    set_key = config_sub.add_parser("set-key", help="Store the API key.")
    set_key.add_argument("value", help="API key.")
    set_model = config_sub.add_parser("set-model", help="Store the model identifier.")
    set_model.add_argument("value", help="Model identifier, e.g. gpt-4o-mini.")
    config_sub.add_parser("show", help="Show the effective configuration.")
    reset = config_sub.add_parser("reset", help="Clear a configuration file.")
    config_sub.add_parser("list-models", help="List known model identifiers.")
    for action in (set_key, set_model, reset):
        action.add_argument(
            "--local",
            action="store_true",
            help="Use the project file instead of the user-global file.",
        )

    help_cmd = subparsers.add_parser("help", help="Show help for git-helper or a command.")
    help_cmd.add_argument("topic", nargs="?", help="Command to describe.")

    command_parsers = {
        "push": push,
        "pull": pull,
        "generate": generate,
        "config": config,
        "help": help_cmd,
    }
    return parser, command_parsers


def _make_client(api_key: str) -> CompletionClient:
    from .ai.openai_client import OpenAIClient

    return OpenAIClient(api_key=api_key)


def _require_client(effective: EffectiveConfig) -> CompletionClient:
    if not effective.api_key:
        raise MissingCredentialError(
            "no API key configured; set OPENAI_API_KEY or run `git-helper config set-key <key>`"
        )
    return _make_client(effective.api_key)


def _report(result: OperationResult, success: str, dry_run: bool) -> None:
    if result.skipped or dry_run:
        return
    if result.ok:
        print(success)
        return
    step = result.failed.name if result.failed else "operation"
    print(f"{PROG}: {step} failed: {result.error}", file=sys.stderr)


def cmd_push(args: argparse.Namespace) -> None:
    repo = ensure_repository()
    options = RunOptions(
        message=args.message,
        branch=args.branch,
        remote=args.remote,
        use_ai=args.use_ai,
        dry_run=args.dry_run,
        verbosity=args.verbose,
    )
    if not options.message and not options.use_ai:
        raise MissingMessageError("a commit message is required (or pass --ai)")

    generate_message: Optional[Callable[[], str]] = None
    if options.use_ai and not options.message:
        effective = ConfigResolver(ConfigPaths.discover(repo)).resolve()
        client = _require_client(effective)
        generate_message = functools.partial(
            generate_commit_message, client, effective.model, cwd=repo
        )

    result = run_push(options, generate_message=generate_message, cwd=repo)
    _report(
        result,
        f"All good! Changes pushed to {options.remote}/{options.branch}.",
        options.dry_run,
    )


def cmd_pull(args: argparse.Namespace) -> None:
    repo = ensure_repository()
    options = RunOptions(
        branch=args.branch, remote=args.remote, dry_run=args.dry_run, verbosity=args.verbose
    )
    result = run_pull(options, cwd=repo)
    _report(result, f"Got changes from {options.remote}/{options.branch}.", options.dry_run)


def cmd_generate(args: argparse.Namespace) -> None:
    repo = ensure_repository()
    effective = ConfigResolver(ConfigPaths.discover(repo)).resolve()
    client = _require_client(effective)
    message = generate_commit_message(
        client, effective.model, staged_only=args.staged_only, cwd=repo
    )
    print(message)


def cmd_config(
    args: argparse.Namespace,
    command_parsers: Dict[str, argparse.ArgumentParser],
) -> None:
    resolver = ConfigResolver(ConfigPaths.discover())
    action = args.config_command
    scope = "project" if getattr(args, "local", False) else "global"

    if action == "set-key":
        path = resolver.set_value("api_key", args.value, scope)
        print(f"API key saved to {path}")
    elif action == "set-model":
        if args.value not in KNOWN_MODELS:
            print(f"Note: {args.value} is not in the known model list; saving it anyway.")
        path = resolver.set_value("model", args.value, scope)
        print(f"Model set to {args.value} in {path}")
    elif action == "reset":
        path = resolver.reset(scope)
        print(f"Configuration in {path} reset.")
    elif action == "show":
        effective = resolver.resolve()
        key = mask_secret(effective.api_key) if effective.api_key else "(not set)"
        key_source = f" [{effective.api_key_source}]" if effective.api_key_source else ""
        print(f"API key: {key}{key_source}")
        print(f"Model: {effective.model} [{effective.model_source}]")
        print(f"Project config: {resolver.paths.project}")
        print(f"Global config: {resolver.paths.user}")
    elif action == "list-models":
        current = resolver.resolve().model
        for model in KNOWN_MODELS:
            marker = "*" if model == current else " "
            print(f"{marker} {model}")
    else:
        command_parsers["config"].print_help()


def cmd_help(
    args: argparse.Namespace,
    parser: argparse.ArgumentParser,
    command_parsers: Dict[str, argparse.ArgumentParser],
) -> None:
    if args.topic and args.topic in command_parsers:
        command_parsers[args.topic].print_help()
        return
    if args.topic:
        print(f"Unknown command: {args.topic}")
    parser.print_help()


def main(argv: Optional[List[str]] = None) -> int:
    parser, command_parsers = build_parsers()
    args = parser.parse_args(argv)

    configure_logging(verbosity=args.verbose)

    handlers = {
        "push": cmd_push,
        "pull": cmd_pull,
        "generate": cmd_generate,
    }

    try:
        if args.command == "help":
            cmd_help(args, parser, command_parsers)
        elif args.command == "config":
            cmd_config(args, command_parsers)
        elif args.command in handlers:
            handlers[args.command](args)
        else:
            parser.print_help()
    except KeyboardInterrupt:
        return 130
    except _FATAL_ERRORS as exc:
        print(f"{PROG}: error: {exc}", file=sys.stderr)
        return 1
    except GitHelperError as exc:
        # Reported, but not fatal: the command ran and this is its outcome.
        print(f"{PROG}: error: {exc}", file=sys.stderr)
        return 0
    except Exception as exc:  # noqa: BLE001
        print(f"{PROG}: unexpected error: {exc}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":  # pragma: no cover - manual invocation
    raise SystemExit(main())
