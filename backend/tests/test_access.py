import pytest

from taskhub.core.errors import AccessDeniedError, NotFoundError
from taskhub.db.models import Priority, Project, Role, Task, TaskStatus
from taskhub.services import access
from taskhub.services.access import Action, Caller, Rule


def test_admin_has_access_to_every_project(db, seeded):
    other = Project(name="P2", owner_id=seeded["m2"].id)
    db.add(other)
    db.commit()

    for project_id in (seeded["p1"], other.id):
        assert access.has_project_access(db, seeded["admin"], project_id)


def test_manager_access_requires_ownership(db, seeded):
    assert access.has_project_access(db, seeded["m1"], seeded["p1"])
    assert not access.has_project_access(db, seeded["m2"], seeded["p1"])


def test_user_access_follows_assigned_tasks(db, seeded):
    assert access.has_project_access(db, seeded["e1"], seeded["p1"])

    outsider = Caller(id=9999, email="ghost@example.com", role=Role.USER)
    assert not access.has_project_access(db, outsider, seeded["p1"])


def test_user_loses_project_access_when_unassigned(db, seeded):
    task = db.get(Task, seeded["t2"])
    task.assigned_user_id = None
    db.commit()

    assert not access.has_project_access(db, seeded["e2"], seeded["p1"])


def test_lookups_raise_not_found_before_permission(db, seeded):
    with pytest.raises(NotFoundError):
        access.has_project_access(db, seeded["e1"], 404)
    with pytest.raises(NotFoundError):
        access.is_project_owner(db, seeded["admin"], 404)
    with pytest.raises(NotFoundError):
        access.is_assigned_to_task(db, seeded["e1"], 404)
    with pytest.raises(NotFoundError):
        access.has_task_access(db, seeded["admin"], 404)


def test_is_project_owner(db, seeded):
    assert access.is_project_owner(db, seeded["m1"], seeded["p1"])
    assert not access.is_project_owner(db, seeded["m2"], seeded["p1"])
    assert not access.is_project_owner(db, seeded["admin"], seeded["p1"])


def test_task_access_by_role(db, seeded):
    assert access.has_task_access(db, seeded["admin"], seeded["t1"])
    assert access.has_task_access(db, seeded["m1"], seeded["t3"])
    assert not access.has_task_access(db, seeded["m2"], seeded["t1"])
    assert access.has_task_access(db, seeded["e1"], seeded["t1"])
    assert not access.has_task_access(db, seeded["e1"], seeded["t2"])
    assert not access.has_task_access(db, seeded["e1"], seeded["t3"])


def test_is_assigned_to_task(db, seeded):
    assert access.is_assigned_to_task(db, seeded["e1"], seeded["t1"])
    assert not access.is_assigned_to_task(db, seeded["e2"], seeded["t1"])
    assert not access.is_assigned_to_task(db, seeded["e1"], seeded["t3"])


def test_missing_caller_is_denied(db, seeded):
    project = db.get(Project, seeded["p1"])
    for action in Action:
        assert not access.is_allowed(db, None, action, project=project)
    assert not access.has_project_access(db, None, seeded["p1"])
    assert not access.is_project_owner(db, None, seeded["p1"])


@pytest.mark.parametrize(
    ("action", "admin", "manager", "user"),
    [
        (Action.CREATE_PROJECT, Rule.ALLOW, Rule.ALLOW, Rule.DENY),
        (Action.UPDATE_PROJECT, Rule.ALLOW, Rule.PROJECT_OWNER, Rule.DENY),
        (Action.DELETE_PROJECT, Rule.ALLOW, Rule.PROJECT_OWNER, Rule.DENY),
        (Action.CREATE_TASK, Rule.ALLOW, Rule.PROJECT_OWNER, Rule.DENY),
        (Action.UPDATE_TASK, Rule.ALLOW, Rule.PROJECT_OWNER, Rule.ASSIGNEE),
        (Action.UPDATE_TASK_STATUS, Rule.ALLOW, Rule.PROJECT_OWNER, Rule.ASSIGNEE),
        (Action.DELETE_TASK, Rule.ALLOW, Rule.PROJECT_OWNER, Rule.DENY),
        (Action.DELETE_USER, Rule.ALLOW, Rule.DENY, Rule.DENY),
    ],
)
def test_permission_matrix(action, admin, manager, user):
    assert access.PERMISSIONS[action] == {Role.ADMIN: admin, Role.MANAGER: manager, Role.USER: user}


def test_task_mutations_for_owner_assignee_and_outsiders(db, seeded):
    task = db.get(Task, seeded["t1"])

    assert access.is_allowed(db, seeded["m1"], Action.UPDATE_TASK, task=task)
    assert access.is_allowed(db, seeded["e1"], Action.UPDATE_TASK_STATUS, task=task)
    assert not access.is_allowed(db, seeded["e2"], Action.UPDATE_TASK_STATUS, task=task)
    assert not access.is_allowed(db, seeded["m2"], Action.UPDATE_TASK, task=task)
    assert not access.is_allowed(db, seeded["e1"], Action.DELETE_TASK, task=task)
    assert access.is_allowed(db, seeded["m1"], Action.DELETE_TASK, task=task)


def test_ensure_allowed_raises_with_reason(db, seeded):
    project = db.get(Project, seeded["p1"])

    with pytest.raises(AccessDeniedError) as exc_info:
        access.ensure_allowed(db, seeded["m2"], Action.UPDATE_PROJECT, "nope", project=project)

    assert exc_info.value.message == "nope"


def test_visible_projects_for_each_role(db, seeded):
    db.add(Project(name="P2", owner_id=seeded["m2"].id))
    db.commit()

    def names(caller):
        return sorted(p.name for p in access.visible_projects(caller, db.query(Project)).all())

    assert names(seeded["admin"]) == ["P1", "P2"]
    assert names(seeded["m1"]) == ["P1"]
    assert names(seeded["m2"]) == ["P2"]
    assert names(seeded["e1"]) == []


def test_visible_tasks_scopes(db, seeded):
    query = db.query(Task)

    assert access.visible_tasks(db, seeded["admin"], query).count() == 3
    assert access.visible_tasks(db, seeded["m1"], query).count() == 3
    assert [t.id for t in access.visible_tasks(db, seeded["e1"], query).all()] == [seeded["t1"]]
    assert access.visible_tasks(db, None, query) is None


def test_visible_tasks_short_circuits_for_manager_without_projects(db, seeded):
    assert access.visible_tasks(db, seeded["m2"], db.query(Task)) is None


def test_assigned_tasks_scope(db, seeded):
    e1_id = seeded["e1"].id
    query = db.query(Task).filter(Task.assigned_user_id == e1_id)

    with pytest.raises(AccessDeniedError):
        access.assigned_tasks_scope(db, seeded["e2"], e1_id, query)

    assert access.assigned_tasks_scope(db, seeded["e1"], e1_id, query).count() == 1
    assert access.assigned_tasks_scope(db, seeded["admin"], e1_id, query).count() == 1
    assert access.assigned_tasks_scope(db, seeded["m1"], e1_id, query).count() == 1
    assert access.assigned_tasks_scope(db, seeded["m2"], e1_id, query) is None


def test_assigned_tasks_scope_limits_manager_to_owned_projects(db, seeded):
    other = Project(name="P2", owner_id=seeded["m2"].id)
    db.add(other)
    db.commit()
    db.add(
        Task(
            title="Elsewhere",
            status=TaskStatus.TODO.value,
            priority=Priority.MEDIUM.value,
            project_id=other.id,
            assigned_user_id=seeded["e1"].id,
        )
    )
    db.commit()

    e1_id = seeded["e1"].id
    query = db.query(Task).filter(Task.assigned_user_id == e1_id)

    assert access.assigned_tasks_scope(db, seeded["admin"], e1_id, query).count() == 2
    assert [t.title for t in access.assigned_tasks_scope(db, seeded["m2"], e1_id, query).all()] == ["Elsewhere"]
    assert [t.title for t in access.assigned_tasks_scope(db, seeded["m1"], e1_id, query).all()] == ["T1"]
