from taskhub.db.models import Project, Task, User
from taskhub.db.seed import seed_demo_data
from taskhub.services import users as user_service
from taskhub.services.access import Caller, has_project_access


def test_seed_populates_empty_database_once(db):
    assert seed_demo_data(db) is True
    assert db.query(User).count() == 5
    assert db.query(Project).count() == 2
    assert db.query(Task).count() == 4
    assert db.query(Task).filter(Task.assigned_user_id.is_(None)).count() == 1

    assert seed_demo_data(db) is False
    assert db.query(User).count() == 5


def test_seeded_accounts_follow_access_rules(db):
    seed_demo_data(db)

    manager = user_service.authenticate(db, "manager@example.com", "password")
    user2 = user_service.authenticate(db, "user2@example.com", "password")
    website = db.query(Project).filter(Project.name == "Website Redesign").one()
    mobile = db.query(Project).filter(Project.name == "Mobile App Development").one()

    assert has_project_access(db, Caller.from_user(manager), website.id)
    assert not has_project_access(db, Caller.from_user(manager), mobile.id)
    assert has_project_access(db, Caller.from_user(user2), website.id)
    assert has_project_access(db, Caller.from_user(user2), mobile.id)
