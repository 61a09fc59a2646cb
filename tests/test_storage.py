from datetime import datetime, timezone

from tracker.storage.repositories import ProjectRepository, TaskRepository, UserRepository
from tracker.utils.security import create_access_token, decode_access_token, hash_password, verify_password


class TestRepositories:
    """Repository behaviour against an in-memory database."""

    def test_task_lifecycle(self, db_session):
        user = UserRepository(db_session).create("Dana", "dana@example.com", hash_password("pw123456"))
        project = ProjectRepository(db_session).create(user.id, "Garden", None)
        tasks = TaskRepository(db_session)

        due = datetime(2026, 10, 30, 8, 0, tzinfo=timezone.utc)
        created = tasks.create(project.id, user.id, "Plant", due, None)
        assert created.due_date == due
        assert created.estimated_hours is None

        assert tasks.toggle_completion(created.id, user.id).is_completed is True
        assert [t.title for t in tasks.list_for_project(project.id)] == ["Plant"]

    def test_ownership_enforced(self, db_session):
        users = UserRepository(db_session)
        owner = users.create("Owner", "owner@example.com", "x")
        stranger = users.create("Stranger", "stranger@example.com", "x")
        project = ProjectRepository(db_session).create(owner.id, "Private", "desc")
        tasks = TaskRepository(db_session)

        assert ProjectRepository(db_session).get_by_id(project.id, stranger.id) is None
        assert tasks.create(project.id, stranger.id, "Nope", None, None) is None

        task = tasks.create(project.id, owner.id, "Yes", None, 2)
        assert tasks.update(task.id, stranger.id, "Hijack", None, None) is None
        assert tasks.delete(task.id, stranger.id) is False

    def test_project_delete_removes_tasks(self, db_session):
        user = UserRepository(db_session).create("Eve", "eve@example.com", "x")
        projects = ProjectRepository(db_session)
        project = projects.create(user.id, "Temp", None)
        TaskRepository(db_session).create(project.id, user.id, "Gone", None, None)

        projects.delete(project.id, user.id)
        assert TaskRepository(db_session).list_for_project(project.id) == []

    def test_duplicate_email_returns_none(self, db_session):
        users = UserRepository(db_session)
        first = users.create("Hana", "hana@example.com", "x")
        assert users.create("Hana Again", "hana@example.com", "y") is None
        # Session is still usable after the failed insert
        assert users.get_by_email("hana@example.com") == first


class TestSecurity:
    def test_password_hashing(self):
        hashed = hash_password("correct horse")
        assert hashed != "correct horse"
        assert verify_password("correct horse", hashed)
        assert not verify_password("wrong horse", hashed)

    def test_token_identifies_user(self, db_session):
        user = UserRepository(db_session).create("Finn", "finn@example.com", "x")
        payload = decode_access_token(create_access_token(user))
        assert payload["sub"] == str(user.id)
        assert payload["email"] == "finn@example.com"

    def test_tampered_token_rejected(self, db_session):
        user = UserRepository(db_session).create("Gus", "gus@example.com", "x")
        token = create_access_token(user)
        assert decode_access_token(token[:-2] + ("AA" if token[-2:] != "AA" else "BB")) is None
