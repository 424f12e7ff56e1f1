"""Create the tables and insert the default plan catalog if it is empty."""

import logging

from app.core import database
from app.repositories.plan_repository import PlanRepository

logger = logging.getLogger(__name__)


def seed_plans() -> int:
    database.init_db()
    db = database.SessionLocal()
    try:
        return PlanRepository(db).seed_defaults()
    finally:
        db.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    inserted = seed_plans()
    logger.info("Inserted %d default plans", inserted)
