"""Argument parsing functionality for cargo-liner."""

import argparse
import sys

from constants import BinstallChoice, Commands, Constants, RequirementStyle

_COMMAND_NAMES = [command.value for command in Commands]
_BINSTALL_CHOICES = [choice.value for choice in BinstallChoice]


def _add_toggle(parser, positive, negative, dest, help_text):
    """Add a ``--flag``/``--negation`` pair writing True/False to ``dest``.

    Both default to None so that an absent pair defers to the environment
    and configuration layers; when both appear, the last one wins.
    """
    parser.add_argument(positive,
                        dest=dest,
                        help=help_text,
                        action="store_const",
                        const=True,
                        default=None)
    parser.add_argument(negative,
                        dest=dest,
                        help=f"Negation of {positive}.",
                        action="store_const",
                        const=False,
                        default=None)


def _add_logging(parser):
    parser.add_argument("-v", "--verbose",
                        dest="VERBOSE",
                        help="Be more verbose; repeat to increase, also forwarded to Cargo.",
                        action="count",
                        default=0)
    parser.add_argument("-q", "--quiet",
                        dest="QUIET",
                        help="Be quieter; repeat to decrease, also forwarded to Cargo.",
                        action="count",
                        default=0)
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level (overrides -v/-q)",
                        action="store",
                        type=str.upper,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'])
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help=f"Path to the configuration file (TOML, YAML or JSON; "
                             f"default: $CARGO_HOME/{Constants.CONFIG_FILE_NAME})",
                        action="store",
                        type=str)


def _add_common(parser):
    _add_logging(parser)
    parser.add_argument("--color",
                        dest="COLOR",
                        help="Coloring of the tables and of Cargo's output",
                        action="store",
                        choices=["auto", "always", "never"],
                        default="auto")
    parser.add_argument("-o", "--output",
                        dest="OUTPUT",
                        help="Also write the plan and report to this file (JSON or CSV)",
                        action="store",
                        type=str)
    parser.add_argument("-f", "--format",
                        dest="OUTPUT_FORMAT",
                        help="Output format (json or csv). If not specified, inferred from "
                             "--output extension; defaults to json.",
                        action="store",
                        type=str.lower,
                        choices=Constants.SUPPORTED_FORMATS)


def build_parser():
    """Build the top-level parser with its ``ship``, ``jettison`` and ``import`` commands."""
    parser = argparse.ArgumentParser(
        prog="cargo-liner",
        description=(
            "cargo-liner - install, update and remove Cargo-installed packages "
            "from a declarative list"
        ),
        add_help=True,
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    ship = subparsers.add_parser(
        Commands.SHIP.value,
        help="Install or update the configured packages (default command).",
    )
    _add_common(ship)
    _add_toggle(ship, "--no-self", "--with-self", "NO_SELF",
                "Do not self-update.")
    _add_toggle(ship, "--only-self", "--no-only-self", "ONLY_SELF",
                "Only self-update; ignore the other packages.")
    _add_toggle(ship, "--skip-check", "--no-skip-check", "SKIP_CHECK",
                "Skip the version check and always run the installer.")
    _add_toggle(ship, "--no-fail-fast", "--fail-fast", "NO_FAIL_FAST",
                "Keep going after a package fails.")
    _add_toggle(ship, "--force", "--no-force", "FORCE",
                "Force overwriting existing packages.")
    _add_toggle(ship, "--dry-run", "--no-dry-run", "DRY_RUN",
                "Show what would be done without installing anything.")
    ship.add_argument("--binstall",
                      dest="BINSTALL",
                      help="When to use cargo-binstall instead of cargo install",
                      action="store",
                      type=str.lower,
                      choices=_BINSTALL_CHOICES,
                      default=None)
    ship.add_argument("--oracle",
                      dest="ORACLE",
                      help="How to find the latest versions: the sparse index over HTTP "
                           "or `cargo search`",
                      action="store",
                      choices=["sparse", "search"],
                      default="sparse")

    jettison = subparsers.add_parser(
        Commands.JETTISON.value,
        help="Uninstall every installed package that is not configured.",
    )
    _add_common(jettison)
    _add_toggle(jettison, "--no-confirm", "--confirm", "NO_CONFIRM",
                "Do not ask for confirmation before uninstalling.")
    _add_toggle(jettison, "--no-fail-fast", "--fail-fast", "NO_FAIL_FAST",
                "Keep going after a package fails.")
    _add_toggle(jettison, "--dry-run", "--no-dry-run", "DRY_RUN",
                "Show what would be done without uninstalling anything.")

    import_ = subparsers.add_parser(
        Commands.IMPORT.value,
        help="Write a new configuration file listing the installed packages "
             "(star requirements by default).",
    )
    _add_logging(import_)
    style = import_.add_mutually_exclusive_group()
    style.add_argument("-e", "--exact",
                       dest="REQUIREMENT",
                       help="Pin the installed versions exactly (=X.Y.Z).",
                       action="store_const",
                       const=RequirementStyle.EXACT.value)
    style.add_argument("-C", "--compatible",
                       dest="REQUIREMENT",
                       help="Allow compatible updates of the installed versions (^X.Y.Z).",
                       action="store_const",
                       const=RequirementStyle.COMPATIBLE.value)
    style.add_argument("-p", "--patch",
                       dest="REQUIREMENT",
                       help="Allow patch updates of the installed versions (~X.Y.Z).",
                       action="store_const",
                       const=RequirementStyle.PATCH.value)
    import_.set_defaults(REQUIREMENT=RequirementStyle.STAR.value)
    import_.add_argument("-f", "--force",
                         dest="FORCE",
                         help="Overwrite the configuration file if it already exists.",
                         action="store_true")
    import_.add_argument("--keep-self",
                         dest="KEEP_SELF",
                         help="Also list cargo-liner itself.",
                         action="store_true")
    import_.add_argument("--keep-local",
                         dest="KEEP_LOCAL",
                         help="Also list packages installed from a local path.",
                         action="store_true")

    return parser


def normalize_argv(argv):
    """Drop Cargo's subcommand token and default to ``ship``.

    When run as ``cargo liner ...``, Cargo passes ``liner`` as the first
    argument.
    """
    argv = list(argv)
    if argv and argv[0] == "liner":
        argv = argv[1:]
    if not argv or (argv[0] not in _COMMAND_NAMES and argv[0] not in ("-h", "--help")):
        argv = [Commands.SHIP.value, *argv]
    return argv


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    raw = sys.argv[1:] if argv is None else argv
    return build_parser().parse_args(normalize_argv(raw))
