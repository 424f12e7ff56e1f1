from uuid import UUID

from sqlalchemy.orm import Session

from app.models.user import User
from app.schemas.user import UserCreate


class UserRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: UUID) -> User | None:
        return self.db.query(User).filter(User.id == user_id).first()

    def get_by_email(self, email: str) -> User | None:
        return self.db.query(User).filter(User.email == email.lower()).first()

    def create(self, data: UserCreate) -> User:
        values = data.model_dump()
        values["email"] = values["email"].lower()
        values["role"] = data.role.value
        user = User(**values)
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user
