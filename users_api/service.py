"""
Business rules for users.

The service decides which fields a request may change and how a
partial update merges into the stored user.  Errors raised by the
repository pass through untouched; translating them to HTTP is the
handlers' job.
"""

import abc
from typing import List

from users_api.models import User
from users_api.repository import UserRepository
from users_api.schemas import CreateUserRequest, UpdateUserRequest


def merge_update(user: User, req: UpdateUserRequest) -> User:
    """Apply the fields of ``req`` that are present onto ``user``.

    Text fields count as present when non-empty and ``age`` when it is
    greater than zero, so an explicit ``0`` cannot clear a stored age.
    """
    if req.name:
        user.name = req.name
    if req.email:
        user.email = req.email
    if req.age is not None and req.age > 0:
        user.age = req.age
    return user


class UserService(abc.ABC):
    @abc.abstractmethod
    def get_all_users(self) -> List[User]: ...

    @abc.abstractmethod
    def get_user_by_id(self, user_id: int) -> User: ...

    @abc.abstractmethod
    def create_user(self, req: CreateUserRequest) -> User: ...

    @abc.abstractmethod
    def update_user(self, user_id: int, req: UpdateUserRequest) -> User: ...

    @abc.abstractmethod
    def delete_user(self, user_id: int) -> None: ...


class DefaultUserService(UserService):
    def __init__(self, repository: UserRepository):
        self.repository = repository

    def get_all_users(self) -> List[User]:
        return self.repository.get_all()

    def get_user_by_id(self, user_id: int) -> User:
        return self.repository.get_by_id(user_id)

    def create_user(self, req: CreateUserRequest) -> User:
        user = User(name=req.name, email=req.email, age=req.age or 0)
        return self.repository.create(user)

    def update_user(self, user_id: int, req: UpdateUserRequest) -> User:
        # No lock between read and write: concurrent updates are last-write-wins.
        user = self.repository.get_by_id(user_id)
        merge_update(user, req)
        return self.repository.update(user)

    def delete_user(self, user_id: int) -> None:
        self.repository.delete(user_id)
