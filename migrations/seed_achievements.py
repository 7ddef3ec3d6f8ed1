"""
Seed the achievement catalogue and its rewards

Safe to run repeatedly: existing achievements (matched by code) and
existing rewards are left untouched.

Usage: python migrations/seed_achievements.py
"""

# Ensure this script can be run directly from the repo root
import logging
import sys
from pathlib import Path

CURRENT_DIR = Path(__file__).resolve().parent
ROOT_DIR = CURRENT_DIR.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from remodra import models, models_achievement, models_invoice  # noqa: E402,F401
from remodra.achievement_seeds import seed_achievements  # noqa: E402
from remodra.database import Base, engine, session_scope  # noqa: E402

logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)


def upgrade() -> int:
    Base.metadata.create_all(bind=engine, checkfirst=True)
    with session_scope() as db:
        return seed_achievements(db)


if __name__ == "__main__":
    try:
        added = upgrade()
        logger.info(f"✅ Achievement seeding complete ({added} new)")
    except Exception as e:
        logger.error(f"❌ Seeding failed: {e}")
        sys.exit(1)
