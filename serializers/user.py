from pydantic import BaseModel, ConfigDict
from typing import Optional
from models.user import UserRole


class UserResponseSchema(BaseModel):
    username: str
    email: Optional[str] = None
    role: UserRole

    model_config = ConfigDict(from_attributes=True)


class CurrentUser(BaseModel):
    """The signed-in user as decoded by the auth layer."""
    id: int
    username: str
    role: UserRole = UserRole.CUSTOMER

    model_config = ConfigDict(from_attributes=True)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
