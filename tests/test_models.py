"""Tests for model behaviour that does not go through HTTP."""

from datetime import timedelta

from task_manager.models import Task, User
from task_manager.utils import like_pattern, utcnow


def _task(db, creator, **fields):
    task = Task(title="Model task", creator=creator, **fields)
    db.session.add(task)
    db.session.commit()
    return task


class TestTaskDefaults:
    def test_column_defaults(self, db, user):
        task = _task(db, user)
        assert task.status == "pending"
        assert task.priority == "medium"
        assert task.is_public is False
        assert task.completed_at is None
        assert task.tags == []


class TestCompletionTimestamp:
    def test_set_on_transition_to_completed(self, db, user):
        task = _task(db, user)
        task.status = "completed"
        assert task.completed_at is not None

    def test_kept_when_completed_again(self, db, user):
        task = _task(db, user)
        task.status = "completed"
        db.session.commit()
        first = task.completed_at

        task.status = "completed"
        assert task.completed_at == first

    def test_cleared_on_any_other_status(self, db, user):
        for status in ("pending", "in-progress", "cancelled"):
            task = _task(db, user, status="completed")
            assert task.completed_at is not None
            task.status = status
            assert task.completed_at is None


class TestComputedFields:
    def test_overdue_when_due_date_passed(self, db, user):
        task = _task(db, user)
        task.due_date = utcnow() - timedelta(hours=1)
        assert task.is_overdue is True

    def test_not_overdue_when_completed(self, db, user):
        task = _task(db, user, status="completed")
        task.due_date = utcnow() - timedelta(hours=1)
        assert task.is_overdue is False

    def test_not_overdue_without_due_date(self, db, user):
        assert _task(db, user).is_overdue is False

    def test_age_in_whole_days(self, db, user):
        task = _task(db, user)
        task.created_at = utcnow() - timedelta(days=3, hours=5)
        assert task.age == 3


class TestVisibility:
    def test_rules(self, db, user, other_user, admin):
        task = _task(db, user, assignee=other_user)

        assert task.is_visible_to(user)
        assert task.is_visible_to(other_user)
        assert not task.is_visible_to(admin)
        assert not task.is_visible_to(None)

        task.is_public = True
        assert task.is_visible_to(admin)
        assert task.is_visible_to(None)

    def test_edit_and_status_permissions(self, db, user, other_user, admin):
        task = _task(db, user, assignee=other_user)

        assert task.is_editable_by(user)
        assert not task.is_editable_by(other_user)
        assert task.can_change_status(user)
        assert task.can_change_status(other_user)
        assert not task.can_change_status(admin)


class TestTags:
    def test_replacing_tags_removes_old_rows(self, db, user):
        from task_manager.models import TaskTag

        task = _task(db, user, tags=["a", "b"])
        task.tags = ["c"]
        db.session.commit()

        assert task.tags == ["c"]
        assert db.session.query(TaskTag).count() == 1

    def test_deleting_task_removes_tags(self, db, user):
        from task_manager.models import TaskTag

        task = _task(db, user, tags=["a"])
        db.session.delete(task)
        db.session.commit()
        assert db.session.query(TaskTag).count() == 0


class TestUserPassword:
    def test_password_is_hashed(self, db):
        user = User(username="hashme", email="hash@example.com")
        user.set_password("secret123")
        assert user.password_hash != "secret123"
        assert user.check_password("secret123")
        assert not user.check_password("wrong")


def test_like_pattern_escapes_wildcards():
    assert like_pattern("50%_off") == "%50\\%\\_off%"
