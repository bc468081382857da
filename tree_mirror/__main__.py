"""Entry point for Tree Mirror.

Usage:
    python -m tree_mirror [CONFIG]        Sync now, then every intervalSeconds
    python -m tree_mirror once [CONFIG]   Sync once and exit

CONFIG defaults to ./path.json.
"""

import logging
import sys

from tree_mirror.errors import MirrorError

logger = logging.getLogger("tree_mirror")


def main() -> None:
    """Run the scheduler or a single sync; exit 1 on any fatal error."""
    from tree_mirror.config import Config
    from tree_mirror.service import run_forever, setup_logging
    from tree_mirror.sync import run_once

    args = sys.argv[1:]
    if args and args[0] in ("-h", "--help"):
        print(__doc__)
        return
    once = bool(args) and args[0] == "once"
    if once:
        args = args[1:]
    config_path = args[0] if args else None

    try:
        config = Config(config_path)
        setup_logging(config)
        if once:
            run_once(config)
        else:
            run_forever(config)
    except MirrorError as exc:
        if not logging.getLogger().handlers:
            print(f"ERROR: {exc}", file=sys.stderr)
        else:
            logger.error("%s", exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
