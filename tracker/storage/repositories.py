from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tracker.models.entities import Project, StoredTask, User
from tracker.storage.database import ProjectModel, TaskModel, UserModel
from tracker.utils.clock import ensure_utc


class UserRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: int) -> Optional[User]:
        model = self.db.query(UserModel).filter(UserModel.id == user_id).first()
        if not model:
            return None
        return self._model_to_user(model)

    def get_by_email(self, email: str) -> Optional[User]:
        model = self.db.query(UserModel).filter(UserModel.email == email).first()
        if not model:
            return None
        return self._model_to_user(model)

    def email_exists(self, email: str) -> bool:
        return self.db.query(UserModel.id).filter(UserModel.email == email).first() is not None

    def create(self, display_name: str, email: str, password_hash: str) -> Optional[User]:
        """Insert a user; None if the email is already taken."""
        model = UserModel(display_name=display_name, email=email, password_hash=password_hash)
        self.db.add(model)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            return None
        self.db.refresh(model)
        return self._model_to_user(model)

    @staticmethod
    def _model_to_user(model: UserModel) -> User:
        return User(
            id=model.id,
            display_name=model.display_name,
            email=model.email,
            password_hash=model.password_hash,
        )


class ProjectRepository:
    def __init__(self, db: Session):
        self.db = db

    def _owned(self, project_id: int, user_id: int) -> Optional[ProjectModel]:
        return (
            self.db.query(ProjectModel)
            .filter(ProjectModel.id == project_id, ProjectModel.user_id == user_id)
            .first()
        )

    def get_by_id(self, project_id: int, user_id: int) -> Optional[Project]:
        model = self._owned(project_id, user_id)
        if not model:
            return None
        return self._model_to_project(model)

    def list_for_user(self, user_id: int) -> List[Project]:
        models = (
            self.db.query(ProjectModel)
            .filter(ProjectModel.user_id == user_id)
            .order_by(ProjectModel.created_at.desc(), ProjectModel.id.desc())
            .all()
        )
        return [self._model_to_project(m) for m in models]

    def create(self, user_id: int, title: str, description: Optional[str]) -> Project:
        model = ProjectModel(user_id=user_id, title=title, description=description)
        self.db.add(model)
        self.db.commit()
        self.db.refresh(model)
        return self._model_to_project(model)

    def delete(self, project_id: int, user_id: int) -> None:
        model = self._owned(project_id, user_id)
        if not model:
            return
        self.db.delete(model)
        self.db.commit()

    @staticmethod
    def _model_to_project(model: ProjectModel) -> Project:
        return Project(
            id=model.id,
            title=model.title,
            description=model.description,
            created_at=ensure_utc(model.created_at),
            user_id=model.user_id,
        )


class TaskRepository:
    def __init__(self, db: Session):
        self.db = db

    def _owned(self, task_id: int, user_id: int) -> Optional[TaskModel]:
        return (
            self.db.query(TaskModel)
            .join(ProjectModel, TaskModel.project_id == ProjectModel.id)
            .filter(TaskModel.id == task_id, ProjectModel.user_id == user_id)
            .first()
        )

    def list_for_project(self, project_id: int) -> List[StoredTask]:
        models = (
            self.db.query(TaskModel)
            .filter(TaskModel.project_id == project_id)
            .order_by(TaskModel.id)
            .all()
        )
        return [self._model_to_task(m) for m in models]

    def create(
        self,
        project_id: int,
        user_id: int,
        title: str,
        due_date: Optional[datetime],
        estimated_hours: Optional[int],
    ) -> Optional[StoredTask]:
        """Add a task to a project owned by user_id; None if no such project."""
        project = (
            self.db.query(ProjectModel)
            .filter(ProjectModel.id == project_id, ProjectModel.user_id == user_id)
            .first()
        )
        if not project:
            return None
        model = TaskModel(
            project_id=project_id,
            title=title,
            due_date=ensure_utc(due_date),
            estimated_hours=estimated_hours,
        )
        self.db.add(model)
        self.db.commit()
        self.db.refresh(model)
        return self._model_to_task(model)

    def update(
        self,
        task_id: int,
        user_id: int,
        title: str,
        due_date: Optional[datetime],
        estimated_hours: Optional[int],
    ) -> Optional[StoredTask]:
        model = self._owned(task_id, user_id)
        if not model:
            return None
        model.title = title
        model.due_date = ensure_utc(due_date)
        model.estimated_hours = estimated_hours
        self.db.commit()
        self.db.refresh(model)
        return self._model_to_task(model)

    def toggle_completion(self, task_id: int, user_id: int) -> Optional[StoredTask]:
        model = self._owned(task_id, user_id)
        if not model:
            return None
        model.is_completed = not model.is_completed
        self.db.commit()
        self.db.refresh(model)
        return self._model_to_task(model)

    def delete(self, task_id: int, user_id: int) -> bool:
        model = self._owned(task_id, user_id)
        if not model:
            return False
        self.db.delete(model)
        self.db.commit()
        return True

    @staticmethod
    def _model_to_task(model: TaskModel) -> StoredTask:
        return StoredTask(
            id=model.id,
            title=model.title,
            project_id=model.project_id,
            due_date=ensure_utc(model.due_date),
            estimated_hours=model.estimated_hours,
            is_completed=bool(model.is_completed),
        )
