"""
CLI subcommand implementations for makeaplan.

Subcommands::

    makeaplan                     (interactive menu)
    makeaplan new     [--idea TEXT] [--skip-questions] [--provider P] [--model M] [--api-key K]
    makeaplan resume  [SESSION_ID] [--api-key K]
    makeaplan list
    makeaplan export  [SESSION_ID] [--format markdown|json|both] [--only spec|structure]
    makeaplan clean   [--days N] [--force]
    makeaplan config  [reset|keys]
"""

import argparse
import asyncio
import logging
import sys
from typing import Optional

from dotenv import load_dotenv

from plan_platform import __version__
from plan_platform.errors import GenerationError, NotFoundError
from plan_platform.exporter import Exporter
from plan_platform.models import Session, SessionConfig
from plan_platform.persistence import SessionStore
from plan_platform.runtime.config import (
    API_KEY_ENV_VARS,
    DEFAULT_CLEAN_DAYS,
    SUPPORTED_PROVIDERS,
    resolve_api_key,
    resolve_model,
)
from plan_platform.runtime.llm import LLMClient, create_client
from plan_platform.services import LLMGenerationGateway
from plan_platform.session_state_machine import step_label
from plan_platform.user_config import (
    UserConfig,
    clear_api_keys,
    get_user_config_path,
    load_user_config,
    reset_user_config,
    set_api_key,
)
from plan_platform.workflow import WorkflowEngine, WorkflowResult, WorkflowStatus

from .answer_collector import ConsoleAnswerCollector
from .interface import (
    print_banner,
    print_clean_preview,
    print_config,
    print_exported,
    print_header,
    print_session_table,
)

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

MENU_ACTIONS = [
    ("Start a new plan", "new"),
    ("Resume a session", "resume"),
    ("List sessions", "list"),
    ("Export a session", "export"),
    ("Configuration", "config"),
    ("Exit", "exit"),
]


def _setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr, force=True)


def _notify(message: str) -> None:
    print(f"  {message}")


def _open_store(user_config: UserConfig) -> SessionStore:
    return SessionStore(user_config.resolved_sessions_dir())


def _resolve_client(provider: str, explicit_key: Optional[str], user_config: UserConfig,
                    collector: ConsoleAnswerCollector) -> LLMClient:
    """Build the provider client: --api-key, env var, stored key, then a prompt."""
    try:
        api_key = resolve_api_key(provider, explicit_key, user_config.api_key_for(provider))
    except ValueError:
        print(f"\nNo API key found for {provider} (set {API_KEY_ENV_VARS[provider]} or pass --api-key).")
        api_key = collector.ask_api_key(provider)
        if collector.confirm("Save this key to your config?", default=True):
            set_api_key(provider, api_key)
            print(f"  ✓ Saved to {get_user_config_path()}")
    return create_client(provider, api_key)


def _load_session(store: SessionStore, session_id: str) -> Session:
    session = store.load(session_id)
    if session is None:
        raise NotFoundError(session_id)
    return session


def _print_result(result: WorkflowResult):
    if result.status is WorkflowStatus.PAUSED:
        return
    print_header("EXPORT COMPLETE")
    if result.status is WorkflowStatus.COMPLETED:
        print("  Your product plan is complete!")
    else:
        print("  Your product plan has been exported.")
    print_exported(result.exported_files)
    print(f"  Session ID: {result.session.id}")


async def _run_workflow(session: Session, store: SessionStore, api_key: Optional[str],
                        user_config: UserConfig, collector: ConsoleAnswerCollector) -> WorkflowResult:
    config = session.config
    client = _resolve_client(config.provider, api_key, user_config, collector)
    gateway = LLMGenerationGateway.for_session_config(client, config.provider, config.model)
    engine = WorkflowEngine(store, gateway, collector, Exporter(), notify=_notify)

    try:
        result = await engine.run(session)
    except GenerationError:
        print(f"\nProgress saved. Retry with: makeaplan resume {session.id}")
        raise
    _print_result(result)
    return result


# ---------------------------------------------------------------------------
# Subcommand: new
# ---------------------------------------------------------------------------

async def cmd_new(args, collector: ConsoleAnswerCollector):
    """Start a new planning session and run it."""
    user_config = load_user_config()
    print_banner()

    idea = (args.idea or "").strip() or collector.ask_for_idea()
    provider = args.provider or user_config.default_provider
    model = args.model
    if model is None and provider == user_config.default_provider:
        model = user_config.default_model

    if args.skip_questions:
        config = SessionConfig(provider=provider, model=model)
    else:
        config = collector.ask_session_config(
            user_config.default_provider,
            provider=args.provider,
            model=model,
        )
    # Fail on an unknown model before anything is written
    resolve_model(config.provider, config.model)

    store = _open_store(user_config)
    session = store.create(idea, config)
    print(f"  ✓ Session created: {session.id}")

    return await _run_workflow(session, store, args.api_key, user_config, collector)


# ---------------------------------------------------------------------------
# Subcommand: resume
# ---------------------------------------------------------------------------

async def cmd_resume(args, collector: ConsoleAnswerCollector):
    """Continue a stored session from its current step."""
    user_config = load_user_config()
    store = _open_store(user_config)

    if args.session_id:
        session = _load_session(store, args.session_id)
    else:
        summaries = store.list()
        if not summaries:
            print("No existing sessions found. Starting a new session instead.")
            new_args = argparse.Namespace(
                idea=None, skip_questions=False, provider=None, model=None, api_key=args.api_key,
            )
            return await cmd_new(new_args, collector)
        session_id = collector.select_session(summaries)
        if session_id is None:
            return None
        session = _load_session(store, session_id)

    print(f"\nResuming session {session.id}: {session.idea}")
    print(f"  Current step: {step_label(session.current_step)}")
    return await _run_workflow(session, store, args.api_key, user_config, collector)


# ---------------------------------------------------------------------------
# Subcommand: list
# ---------------------------------------------------------------------------

def cmd_list(args):
    store = _open_store(load_user_config())
    summaries = store.list()
    print_session_table(summaries)
    return summaries


# ---------------------------------------------------------------------------
# Subcommand: export
# ---------------------------------------------------------------------------

def cmd_export(args, collector: ConsoleAnswerCollector):
    """Export a stored session, fully or one artifact only."""
    store = _open_store(load_user_config())

    session_id = args.session_id
    if not session_id:
        session_id = collector.select_session(store.list(), title="Select a session to export:")
        if session_id is None:
            return []
    session = _load_session(store, session_id)

    fmt = args.format or collector.select_export_format()
    exporter = Exporter()
    if args.only == "spec":
        paths = exporter.export_specification_only(session, fmt)
    elif args.only == "structure":
        paths = exporter.export_file_structure_only(session, fmt)
    else:
        paths = exporter.export_session(session, fmt)

    print_exported(paths)
    return paths


# ---------------------------------------------------------------------------
# Subcommand: clean
# ---------------------------------------------------------------------------

def cmd_clean(args, collector: ConsoleAnswerCollector) -> int:
    """Delete sessions not updated in ``args.days`` days. Returns the count deleted."""
    store = _open_store(load_user_config())

    stale = store.older_than(args.days)
    if not stale:
        print(f"No sessions older than {args.days} day(s).")
        return 0

    print_clean_preview(stale, args.days)
    if not args.force and not collector.confirm(f"Delete {len(stale)} session(s)?", default=False):
        print("Cancelled.")
        return 0

    # Only what was previewed; sessions that aged past the cutoff meanwhile stay
    deleted = sum(1 for summary in stale if store.delete(summary.id))
    print(f"  ✓ Deleted {deleted} session(s).")
    return deleted


# ---------------------------------------------------------------------------
# Subcommand: config
# ---------------------------------------------------------------------------

def cmd_config(args, collector: ConsoleAnswerCollector):
    action = args.config_action

    if action is None:
        user_config = load_user_config()
        print_config(user_config, get_user_config_path(), user_config.resolved_sessions_dir())
        print("\n  Commands: makeaplan config reset | makeaplan config keys")

    elif action == "reset":
        if collector.confirm("Reset all configuration? This cannot be undone.", default=False):
            reset_user_config()
            print("✓ Configuration reset.")
        else:
            print("Cancelled.")

    elif action == "keys":
        actions = [(f"Update {p} API key", p) for p in SUPPORTED_PROVIDERS]
        actions += [("Clear all API keys", "clear"), ("Back", "back")]
        choice = collector.select_menu_action(actions)
        if choice == "clear":
            if collector.confirm("Clear all stored API keys?", default=False):
                clear_api_keys()
                print("✓ API keys cleared.")
            else:
                print("Cancelled.")
        elif choice in SUPPORTED_PROVIDERS:
            set_api_key(choice, collector.ask_api_key(choice))
            print(f"✓ {choice} API key updated.")


# ---------------------------------------------------------------------------
# Interactive menu
# ---------------------------------------------------------------------------

async def cmd_menu(args, collector: ConsoleAnswerCollector):
    print_banner()
    action = collector.select_menu_action(MENU_ACTIONS)
    if action == "exit":
        print("Goodbye!")
        return None

    # Default arguments for the chosen subcommand
    sub_args = build_parser().parse_args([action])
    return await dispatch(sub_args, collector)


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """Build the top-level argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="makeaplan",
        description="Turn a product idea into a technical specification and project layout",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command")

    # --- new ---
    p_new = subparsers.add_parser("new", help="Start a new planning session")
    p_new.add_argument("--idea", help="Product idea (prompted for if omitted)")
    p_new.add_argument(
        "--skip-questions", action="store_true",
        help="Skip the configuration questions and use the defaults",
    )
    p_new.add_argument("--provider", choices=list(SUPPORTED_PROVIDERS), help="AI provider")
    p_new.add_argument("--model", help="Model short name (see 'makeaplan config')")
    p_new.add_argument("--api-key", help="API key (or set env var)")

    # --- resume ---
    p_resume = subparsers.add_parser("resume", help="Resume a stored session")
    p_resume.add_argument("session_id", nargs="?", help="Session ID (picked interactively if omitted)")
    p_resume.add_argument("--api-key", help="API key (or set env var)")

    # --- list ---
    subparsers.add_parser("list", aliases=["ls"], help="List stored sessions")

    # --- export ---
    p_export = subparsers.add_parser("export", help="Export a stored session")
    p_export.add_argument("session_id", nargs="?", help="Session ID (picked interactively if omitted)")
    p_export.add_argument("--format", choices=["markdown", "json", "both"], help="Export format")
    p_export.add_argument(
        "--only", choices=["spec", "structure"],
        help="Export only the specification or only the file structure",
    )

    # --- clean ---
    p_clean = subparsers.add_parser("clean", help="Delete old sessions")
    p_clean.add_argument(
        "--days", type=int, default=DEFAULT_CLEAN_DAYS,
        help=f"Delete sessions not updated in this many days (default: {DEFAULT_CLEAN_DAYS})",
    )
    p_clean.add_argument("--force", action="store_true", help="Do not ask for confirmation")

    # --- config ---
    p_config = subparsers.add_parser("config", help="Show or change configuration")
    p_config.add_argument("config_action", nargs="?", choices=["reset", "keys"], help="Action")

    return parser


async def dispatch(args, collector: ConsoleAnswerCollector):
    command = args.command
    if command == "new":
        return await cmd_new(args, collector)
    if command == "resume":
        return await cmd_resume(args, collector)
    if command in ("list", "ls"):
        return cmd_list(args)
    if command == "export":
        return cmd_export(args, collector)
    if command == "clean":
        return cmd_clean(args, collector)
    if command == "config":
        return cmd_config(args, collector)
    return await cmd_menu(args, collector)


async def main(argv: Optional[list[str]] = None):
    """Entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)
    load_dotenv()

    collector = ConsoleAnswerCollector()
    try:
        await dispatch(args, collector)
    except NotFoundError as e:
        print(f"{e}. Run 'makeaplan list' to see stored sessions.")
        sys.exit(1)
    except Exception as e:
        if args.verbose:
            logger.exception("Command '%s' failed", args.command or "menu")
        print(f"Error: {e}")
        sys.exit(1)


def run():
    """Console-script entry point."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\n\nInterrupted. Progress up to the last completed step is saved.")
        sys.exit(130)
