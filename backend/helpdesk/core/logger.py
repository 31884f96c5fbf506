# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Centralised logging configuration.

All log settings (levels, rotation, format …) live in  etc/logging.conf.
This module resolves the log-file path, patches it into the config text, and
applies it via the standard-library fileConfig loader.  When the config file
is not shipped (e.g. a wheel install) a plain console setup is used.

Import the ready-made logger anywhere:
    from helpdesk.core.logger import logger
"""

import configparser
import logging
import logging.config
from pathlib import Path

# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------
# backend/helpdesk/core/logger.py  →  ../../../  →  project root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent.parent
_LOG_FILE     = _PROJECT_ROOT / "log" / "app.log"
_LOGGING_CONF = _PROJECT_ROOT / "etc" / "logging.conf"


def configure_logging(conf_path: Path = _LOGGING_CONF, log_file: Path = _LOG_FILE) -> None:
    """
    Apply *conf_path* with its ``%(log_file)s`` placeholder set to *log_file*;
    console-only ``basicConfig`` when *conf_path* does not exist.
    """
    if not conf_path.is_file():
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
        )
        return

    # Ensure the log directory exists before the handler tries to open the file
    log_file.parent.mkdir(parents=True, exist_ok=True)

    # logging.conf uses %(log_file)s as a placeholder.
    raw = conf_path.read_text(encoding="utf-8")
    raw = raw.replace("%(log_file)s", str(log_file))

    # RawConfigParser: the format strings contain %(asctime)s etc. which
    # ConfigParser would try to interpolate.
    parser = configparser.RawConfigParser()
    parser.read_string(raw)

    logging.config.fileConfig(parser, disable_existing_loggers=False)


configure_logging()

# ---------------------------------------------------------------------------
# Module-level handle
# ---------------------------------------------------------------------------
logger = logging.getLogger("helpdesk")
