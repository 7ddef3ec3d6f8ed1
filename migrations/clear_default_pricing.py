"""
Delete default service and material pricing rows

Lets each contractor start from an empty price list and add their own
services and materials. Materials still referenced by estimate items are
kept so existing estimates keep their links.

Usage:
    python migrations/clear_default_pricing.py                  # every contractor
    python migrations/clear_default_pricing.py --contractor 12  # one contractor
"""

# Ensure this script can be run directly from the repo root
import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

CURRENT_DIR = Path(__file__).resolve().parent
ROOT_DIR = CURRENT_DIR.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from remodra.database import session_scope  # noqa: E402
from remodra.models import Material, ServicePricing  # noqa: E402
from remodra.models_invoice import EstimateItem  # noqa: E402

logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)


def clear_default_pricing(contractor_id: Optional[int] = None) -> tuple[int, int]:
    """Returns (services_deleted, materials_deleted)"""
    with session_scope() as db:
        services = db.query(ServicePricing)
        materials = db.query(Material).filter(
            ~Material.id.in_(
                db.query(EstimateItem.material_id).filter(EstimateItem.material_id.isnot(None))
            )
        )
        if contractor_id is not None:
            services = services.filter(ServicePricing.contractor_id == contractor_id)
            materials = materials.filter(Material.contractor_id == contractor_id)

        logger.info("🗑️ Deleting default services...")
        services_deleted = services.delete(synchronize_session=False)
        logger.info(f"Services deleted: {services_deleted}")

        logger.info("🗑️ Deleting default materials...")
        materials_deleted = materials.delete(synchronize_session=False)
        logger.info(f"Materials deleted: {materials_deleted}")

        db.commit()
        return services_deleted, materials_deleted


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Delete default service and material pricing")
    parser.add_argument("--contractor", type=int, default=None, help="Only clear this contractor's rows")
    args = parser.parse_args()

    try:
        clear_default_pricing(args.contractor)
        logger.info("✅ Default pricing cleanup completed successfully")
    except Exception as e:
        logger.error(f"❌ Cleanup failed: {e}")
        sys.exit(1)
