from dataclasses import dataclass
from typing import Optional

from ledger.errors import AuthenticationError


@dataclass(frozen=True)
class UserSession:
    """Who is calling. Passed explicitly to every user-scoped ledger operation."""

    user_id: Optional[str] = None

    @classmethod
    def signed_out(cls) -> "UserSession":
        return cls(user_id=None)

    @property
    def is_signed_in(self) -> bool:
        return bool(self.user_id)

    def require_user(self, message: str = "Please sign in to continue.") -> str:
        if not self.is_signed_in:
            raise AuthenticationError(message)
        return self.user_id
