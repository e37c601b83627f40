import logging
from datetime import date, timedelta

from sqlalchemy.orm import Session

from taskhub.core.security import hash_password
from taskhub.db.models import Priority, Project, Role, Task, TaskStatus, User


logger = logging.getLogger(__name__)

DEMO_PASSWORD = "password"


def seed_demo_data(db: Session) -> bool:
    """Populate an empty database with a small demo data set.

    Returns ``False`` without touching anything if users already exist.
    """
    if db.query(User.id).first() is not None:
        return False

    password_hash = hash_password(DEMO_PASSWORD)

    def make_user(email: str, role: Role) -> User:
        return User(email=email, password_hash=password_hash, role=role.value)

    admin = make_user("admin@example.com", Role.ADMIN)
    manager = make_user("manager@example.com", Role.MANAGER)
    manager2 = make_user("manager2@example.com", Role.MANAGER)
    user = make_user("user@example.com", Role.USER)
    user2 = make_user("user2@example.com", Role.USER)
    db.add_all([admin, manager, manager2, user, user2])
    db.flush()

    website = Project(
        name="Website Redesign",
        description="Redesign the company website with a modern look and feel",
        owner_id=manager.id,
    )
    mobile = Project(
        name="Mobile App Development",
        description="Develop a mobile app for both iOS and Android platforms",
        owner_id=manager2.id,
    )
    db.add_all([website, mobile])
    db.flush()

    today = date.today()
    db.add_all(
        [
            Task(
                title="Design Homepage",
                description="Create wireframes and mockups for the homepage",
                status=TaskStatus.TODO.value,
                due_date=today + timedelta(days=7),
                priority=Priority.HIGH.value,
                project_id=website.id,
                assigned_user_id=user.id,
            ),
            Task(
                title="Implement User Authentication",
                description="Set up user registration and login functionality",
                status=TaskStatus.IN_PROGRESS.value,
                due_date=today + timedelta(days=14),
                priority=Priority.MEDIUM.value,
                project_id=website.id,
                assigned_user_id=user2.id,
            ),
            Task(
                title="Create App Wireframes",
                description="Design the user interface for the mobile app",
                status=TaskStatus.TODO.value,
                due_date=today + timedelta(days=10),
                priority=Priority.HIGH.value,
                project_id=mobile.id,
                assigned_user_id=user2.id,
            ),
            Task(
                title="Set Up CI/CD Pipeline",
                description="Configure continuous integration and deployment",
                status=TaskStatus.TODO.value,
                due_date=today + timedelta(days=21),
                priority=Priority.LOW.value,
                project_id=mobile.id,
            ),
        ]
    )
    db.commit()
    logger.info("Demo data seeded")
    return True
