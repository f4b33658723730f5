"""cargo-liner - keep Cargo-installed packages in line with a declarative list."""
import logging
import sys

from args import parse_args
from cli_config import verbosity
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from constants import Commands, ExitCodes
from errors import LinerError


def main(argv=None):
    """Main function of the program."""
    logger = logging.getLogger(__name__)

    args = parse_args(argv)
    configure_logging(args.LOG_LEVEL, verbosity=verbosity(args), log_file=args.LOG_FILE)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action=args.command)
        )

    # Imported late to keep --help fast.
    if args.command == Commands.JETTISON.value:
        from cli_jettison import run_jettison as handler  # pylint: disable=import-outside-toplevel
    elif args.command == Commands.IMPORT.value:
        from cli_import import run_import as handler  # pylint: disable=import-outside-toplevel
    else:
        from cli_ship import run_ship as handler  # pylint: disable=import-outside-toplevel

    try:
        handler(args)
    except KeyboardInterrupt:
        logger.error("Interrupted.")
        sys.exit(ExitCodes.INTERRUPTED.value)
    except LinerError as e:
        logger.error("%s", e)
        sys.exit(e.exit_code.value)

    sys.exit(ExitCodes.SUCCESS.value)


if __name__ == "__main__":
    main()
