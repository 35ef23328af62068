"""
Per-request user context.

Requests carry the reader's numeric id explicitly; there is no login, so the
context is only as trustworthy as the caller.
"""

from dataclasses import dataclass
from typing import Optional

from .errors import ValidationError
from .utils import parse_positive_int


@dataclass(frozen=True)
class UserSession:
    """Identity of the reader a request is made on behalf of."""

    user_id: Optional[int] = None

    @property
    def is_anonymous(self) -> bool:
        return self.user_id is None

    @classmethod
    def from_param(cls, raw: Optional[str], required: bool = False) -> "UserSession":
        """
        Build a session from a raw ``userId`` query value.

        Args:
            raw: Value as received, may be None or empty
            required: Reject a missing value instead of returning an anonymous session

        Returns:
            UserSession

        Raises:
            ValidationError: If the value is missing (when required) or not a valid id
        """
        if raw is None or str(raw).strip() == "":
            if required:
                raise ValidationError("Invalid user ID")
            return cls()

        return cls(user_id=parse_positive_int(raw, "Invalid user ID"))
