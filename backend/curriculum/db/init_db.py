import logging
import time
from sqlalchemy import func
from sqlalchemy.orm import Session
from curriculum.core.config import settings
from curriculum.core.logging import setup_logging
from curriculum.core.security import hash_password
from curriculum.db.session import Database
from curriculum.models.user import User

logger = logging.getLogger(__name__)


def seed_admin(db: Session, email: str, password: str) -> User | None:
    """Create the admin user once. Existing accounts are left untouched."""
    if not email or not password:
        logger.info("SEED_ADMIN_EMAIL / SEED_ADMIN_PASSWORD not set, skipping admin seed")
        return None
    admin = db.query(User).filter(func.lower(User.email) == email.lower()).first()
    if admin:
        return admin
    admin = User(
        email=email.lower(),
        name="Administrator",
        role="admin",
        is_active=True,
        password_hash=hash_password(password),
    )
    db.add(admin)
    db.commit()
    logger.info("Seeded admin user %s", admin.email)
    return admin


def wait_for_db(database: Database, max_retries: int = 30, delay_seconds: int = 2):
    """Loop until DB is reachable to avoid container start flapping when Postgres is not ready."""
    for attempt in range(1, max_retries + 1):
        try:
            database.ping()
            return
        except Exception:
            if attempt == max_retries:
                raise
            logger.warning("Database not reachable (attempt %d/%d)", attempt, max_retries)
            time.sleep(delay_seconds)


def main():
    setup_logging()
    database = Database(settings.DATABASE_URL, ssl_required=settings.DB_SSL_REQUIRED)
    try:
        wait_for_db(database)
        database.create_all()
        with database.session() as db:
            seed_admin(db, settings.SEED_ADMIN_EMAIL, settings.SEED_ADMIN_PASSWORD)
    finally:
        database.dispose()


if __name__ == "__main__":
    main()
