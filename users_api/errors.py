class UserStoreError(Exception):
    """Base class for failures the user store reports by kind."""


class UserNotFoundError(UserStoreError):
    def __init__(self, user_id: int):
        super().__init__(f"User {user_id} not found")
        self.user_id = user_id


class EmailConflictError(UserStoreError):
    def __init__(self, email: str):
        super().__init__(f"Email {email} already exists")
        self.email = email
