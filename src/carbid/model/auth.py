from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from carbid.constant import Role
from carbid.util.config import AccountConfig

from .errors import PermissionDeniedError


@dataclass(frozen=True)
class AuthContext:
    """Identity of an authenticated account.

    Fields:
        user_id: (str) The id of the account.
        role: (Role) The role of the account.
        name: (str) Display name of the account.
    """

    user_id: str
    role: Role
    name: str = ""

    def is_admin(self) -> bool:
        """Returns whether the account is an administrator."""
        match self.role:
            case Role.ADMIN:
                return True
            case Role.USER:
                return False

    def require_admin(self) -> None:
        """Raises if the account is not an administrator.

        Raises:
            PermissionDeniedError: If the account is not an administrator.
        """
        if not self.is_admin():
            raise PermissionDeniedError(f"Account {self.user_id} is not an administrator")


class Authenticator(ABC):
    """Turns credentials into an authenticated identity.

    Token verification lives outside the auction core; implementations adapt it.
    """

    @abstractmethod
    def authenticate(self, credential: str) -> AuthContext | None:
        """Returns the identity for the credential, None if it is unknown."""


class StaticAuthenticator(Authenticator):
    """Authenticator over the accounts listed in the configuration.

    The credential is the account name.
    """

    def __init__(self, accounts: list[AccountConfig]) -> None:
        self._accounts: dict[str, AuthContext] = {
            account.name: AuthContext(
                user_id=account.id, role=account.get_role(), name=account.name
            )
            for account in accounts
        }

    def authenticate(self, credential: str) -> AuthContext | None:
        return self._accounts.get(credential)

    def names(self) -> list[str]:
        """Returns the names of the known accounts."""
        return list(self._accounts.keys())
