"""
Seed default configuration entries.

Run after `alembic upgrade head`:
    python init_config.py

Does nothing if the configs table already has rows.
"""

import logging

from app.database import SessionLocal
from app.services.audit import record_audit
from app.services.config_provider import ConfigProvider

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("init_config")


def main():
    db = SessionLocal()
    try:
        created = ConfigProvider(db).init_defaults()
        if created:
            # actor_user_id is NULL for bootstrap events
            record_audit(db, "init_configurations", payload={"created": created})
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Failed to initialize configurations")
        raise
    finally:
        db.close()

    print(f"Configurations created: {created}")


if __name__ == "__main__":
    main()
