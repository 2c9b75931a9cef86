"""Admin check shared by the API guard and the ledger."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Identity:
    """Authenticated caller, as supplied by the auth layer."""

    id: str
    role: str | None = None
    email: str | None = None


class AccessPolicy:
    """Decides who may run and discard draws."""

    def __init__(self, admin_role: str = "admin", admin_email_suffix: str = "@admin.com"):
        self.admin_role = admin_role
        self.admin_email_suffix = admin_email_suffix

    def is_admin(self, identity: Identity | None) -> bool:
        if identity is None:
            return False
        # An explicit role wins; the email suffix is only a legacy fallback.
        if identity.role:
            return identity.role == self.admin_role
        return isinstance(identity.email, str) and identity.email.endswith(
            self.admin_email_suffix
        )
