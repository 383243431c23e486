from dataclasses import dataclass
from typing import Optional
from usermgmt.models.user import User
from usermgmt.types import LoginRequest, LoginResponse


@dataclass
class Login:
    """A single login attempt. Lives for one call and is never persisted."""
    username: str
    password: str
    user: Optional[User] = None
    access_token: str = ""

    @classmethod
    def from_request(cls, request: LoginRequest) -> "Login":
        return cls(username=request.username, password=request.password)

    def to_response(self) -> LoginResponse:
        return LoginResponse(access_token=self.access_token)
