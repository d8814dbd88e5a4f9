"""
pi-planning — PI planning cards on a board, to and from tracker CSV
"""

import argparse
import json
import sys

from pi_planning import config
from pi_planning.commands import (
    cmd_cards,
    cmd_copy,
    cmd_export,
    cmd_import,
    cmd_insert,
    cmd_message,
    cmd_reconcile,
    cmd_templates,
    cmd_watch,
)
from pi_planning.exceptions import PlanningError

HELP_TEXT = """\
Usage: pi-planning <command> [args...]

Global flags:
  --format table          Output as readable text instead of JSON (default: json)
  --format csv            Output as tracker CSV (cards and export commands)
  --board <path>          Board file to operate on (default: .pi_board.json)
  --quiet, -q             Suppress notifications and warnings
  --verbose, -v           Enable structured event logging on stderr
  --version               Show version number

Commands:
  templates               - List card templates and their default fields
  insert <type>           - Insert a default card at the board's viewport center
                            (theme, milestone, userStory, epic, initiative,
                            task, spike, test)
  import <file>           - Create cards from a tracker CSV export ("-" for stdin)
  export                  - Export board cards as tracker CSV
    --output <path>         Write to <path> ("-" for stdout);
                            default: pi-planning-export-<date>.csv
  cards                   - List cards on the board
    --kind <type>           Only cards of one template type
  copy <frame_id>         - Duplicate a card frame (as a paste would)
    --dx <n>, --dy <n>      Offset of the copy (default: 40, 40)
  reconcile               - Detach copied cards that share an issue key
  watch                   - Reconcile on an interval until interrupted
    --interval <seconds>    Seconds between passes (default: 2)
    --passes <n>            Stop after n passes
  message <json>          - Handle one UI message ("-" for stdin), e.g.
                            '{"type": "insert-template", "templateType": "epic"}'
  version                 - Show version number
"""


# ---------------------------------------------------------------------------
# Global flag extraction (before argparse, so --format works after subcommand)
# ---------------------------------------------------------------------------


def _extract_global_flags(argv):
    """Extract global flags from argv regardless of position.

    Returns (format_str, board, quiet, verbose, remaining_argv).
    Handles --version directly.
    """
    fmt = "json"
    board = None
    quiet = False
    verbose = False
    remaining = []
    i = 0
    while i < len(argv):
        arg = argv[i]
        if arg == "--version":
            print(f"pi-planning {config.VERSION}")
            sys.exit(0)
        elif arg in ("--quiet", "-q"):
            quiet = True
        elif arg in ("--verbose", "-v"):
            verbose = True
        elif arg == "--board":
            if i + 1 >= len(argv):
                raise PlanningError("[ERROR] --board requires a path.")
            board = argv[i + 1]
            i += 1
        elif arg == "--format" and i + 1 < len(argv):
            fmt = argv[i + 1]
            if fmt not in config.VALID_FORMATS:
                raise PlanningError(f"[ERROR] Invalid format '{fmt}'. Use: json, table, csv")
            i += 1
        else:
            remaining.append(arg)
        i += 1
    if quiet and verbose:
        raise PlanningError("[ERROR] --quiet and --verbose are mutually exclusive.")
    return fmt, board, quiet, verbose, remaining


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


class _SubcommandParser(argparse.ArgumentParser):
    """Subparser that raises PlanningError instead of printing full help text."""

    def error(self, message):
        raise PlanningError(f"[ERROR] {message}")


def _positive_int(value):
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("must be a positive integer") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("must be a positive integer")
    return parsed


def _positive_float(value):
    try:
        parsed = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("must be a positive number") from exc
    if not parsed > 0:
        raise argparse.ArgumentTypeError("must be a positive number")
    return parsed


def build_parser():
    parser = _SubcommandParser(
        prog="pi-planning",
        description="PI planning cards on a board, to and from tracker CSV",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
    )
    parser.add_argument("--help", "-h", action="store_true", dest="show_help")
    sub = parser.add_subparsers(dest="command", parser_class=_SubcommandParser)

    sub.add_parser("templates").set_defaults(func=cmd_templates)

    p = sub.add_parser("insert")
    p.add_argument("template_type", choices=sorted(config.VALID_TEMPLATE_TYPES))
    p.set_defaults(func=cmd_insert)

    p = sub.add_parser("import")
    p.add_argument("file")
    p.set_defaults(func=cmd_import)

    p = sub.add_parser("export")
    p.add_argument("--output", "-o")
    p.set_defaults(func=cmd_export)

    p = sub.add_parser("cards")
    p.add_argument("--kind", choices=sorted(config.VALID_TEMPLATE_TYPES))
    p.set_defaults(func=cmd_cards)

    p = sub.add_parser("copy")
    p.add_argument("frame_id")
    p.add_argument("--dx", type=float, default=40.0)
    p.add_argument("--dy", type=float, default=40.0)
    p.set_defaults(func=cmd_copy)

    sub.add_parser("reconcile").set_defaults(func=cmd_reconcile)

    p = sub.add_parser("watch")
    p.add_argument("--interval", type=_positive_float)
    p.add_argument("--passes", type=_positive_int)
    p.set_defaults(func=cmd_watch)

    p = sub.add_parser("message")
    p.add_argument("json_message")
    p.set_defaults(func=cmd_message)

    sub.add_parser("version").set_defaults(func=None)

    return parser


# ---------------------------------------------------------------------------
# Command dispatch
# ---------------------------------------------------------------------------


def _error_type_from_message(message):
    if message.startswith("[ERROR]"):
        return "error"
    return "cli_error"


def _emit_cli_error(err, fmt):
    msg = str(err)
    if fmt == "json":
        payload = {
            "ok": False,
            "schema_version": config.CONTRACT_SCHEMA_VERSION,
            "error": {
                "type": _error_type_from_message(msg),
                "message": msg,
                "exit_code": getattr(err, "exit_code", 1),
            },
        }
        print(json.dumps(payload, ensure_ascii=False), file=sys.stderr)
        return
    print(msg, file=sys.stderr)


def main(argv=None):
    if hasattr(sys.stdout, "reconfigure"):
        sys.stdout.reconfigure(encoding="utf-8", errors="replace")

    argv = sys.argv[1:] if argv is None else argv
    if not argv:
        print(HELP_TEXT)
        sys.exit(0)

    fmt = "json"
    try:
        fmt, board, quiet, verbose, remaining_argv = _extract_global_flags(argv)
        config.RUNTIME_QUIET = quiet
        config.RUNTIME_VERBOSE = verbose
        if verbose:
            config.LOG_ENABLED = True

        if not remaining_argv:
            print(HELP_TEXT)
            sys.exit(0)

        parser = build_parser()
        ns = parser.parse_args(remaining_argv)
        ns.format = fmt  # inject global flags
        ns.board = board

        if ns.show_help or not ns.command:
            print(HELP_TEXT)
            sys.exit(0)

        if ns.command == "version":
            print(f"pi-planning {config.VERSION}")
            sys.exit(0)

        handler = getattr(ns, "func", None)
        if handler is None:
            raise PlanningError(f"[ERROR] Unknown command: {ns.command}")
        handler(ns)

    except PlanningError as e:
        _emit_cli_error(e, fmt)
        sys.exit(e.exit_code)


if __name__ == "__main__":
    main()
