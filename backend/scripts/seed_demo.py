from taskhub.core.config import get_settings
from taskhub.core.log import configure_logging
from taskhub.db.seed import DEMO_PASSWORD, seed_demo_data
from taskhub.db.session import SessionLocal, init_db


def main() -> None:
    configure_logging(get_settings().log_level)
    init_db()

    db = SessionLocal()
    try:
        seeded = seed_demo_data(db)
    finally:
        db.close()

    if seeded:
        print(f"Seeded demo users (password: {DEMO_PASSWORD}):")
        for email in (
            "admin@example.com",
            "manager@example.com",
            "manager2@example.com",
            "user@example.com",
            "user2@example.com",
        ):
            print(f"  {email}")
    else:
        print("Database already has users; nothing to seed.")


if __name__ == "__main__":
    main()
