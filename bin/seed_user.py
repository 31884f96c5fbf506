# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Bootstrap script – creates the first helpdesk user.

Run once after the initial migration:
    python bin/seed_user.py

The script reads SEED_USERNAME and SEED_PASSWORD from the environment or the
etc/app.conf file.  After the row is inserted those values are no longer
used by the application.  Users cannot be changed through the API; re-run
with another name to add more.
"""

import sys
import os

# ---------------------------------------------------------------------------
# Path setup so the backend package is importable without installing it
# ---------------------------------------------------------------------------
# bin/seed_user.py  →  ../  →  project root
_PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
_BACKEND_DIR  = os.path.join(_PROJECT_ROOT, "backend")
if _BACKEND_DIR not in sys.path:
    sys.path.insert(0, _BACKEND_DIR)

from helpdesk.core.config import get_settings                         # noqa: E402
from helpdesk.core.logger import logger                               # noqa: E402
from helpdesk.core.security import hash_password                      # noqa: E402
from helpdesk.database import Base, build_engine, build_session_factory  # noqa: E402
from helpdesk.models.user import User                                 # noqa: E402
import helpdesk.models.ticket   # noqa: F401, E402
from helpdesk.models.session import app_tables  # noqa: E402


def seed() -> int:
    settings = get_settings()
    if not settings.seed_username or not settings.seed_password:
        logger.error("SEED_USERNAME or SEED_PASSWORD not set – nothing to do.")
        return 1

    engine = build_engine(settings.database_url)
    if settings.create_tables:
        Base.metadata.create_all(bind=engine, tables=app_tables(settings.session_table))

    db = build_session_factory(engine)()
    try:
        existing = db.query(User).filter(User.username == settings.seed_username).first()
        if existing:
            logger.info("User '%s' already exists – skipping.", settings.seed_username)
            return 0

        db.add(
            User(
                username=settings.seed_username,
                password_hash=hash_password(settings.seed_password, settings.password_hash_rounds),
            )
        )
        db.commit()
        logger.info("User '%s' created successfully.", settings.seed_username)
        return 0
    finally:
        db.close()
        engine.dispose()


if __name__ == "__main__":
    sys.exit(seed())
