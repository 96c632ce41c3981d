import base64
from dataclasses import dataclass, field

from paylink.config import Settings


class MissingCredentialsError(Exception):
    """Provider key id or key secret is not configured."""


@dataclass(frozen=True)
class CredentialContext:
    key_id: str
    key_secret: str = field(repr=False)
    webhook_secret: str | None = field(default=None, repr=False)

    def auth_header_value(self) -> str:
        """Return the HTTP Basic Authorization value for the provider API."""
        token = base64.b64encode(f"{self.key_id}:{self.key_secret}".encode()).decode("ascii")
        return f"Basic {token}"


def load(settings: Settings) -> CredentialContext:
    """
    Build the credential context from process settings.

    Raises:
        MissingCredentialsError: If the key id or key secret is missing or empty.
    """
    missing = [
        name
        for name, value in (
            ("RAZOR_KEY_ID", settings.razor_key_id),
            ("RAZOR_KEY_SECRET", settings.razor_key_secret),
        )
        if not value
    ]
    if missing:
        raise MissingCredentialsError(f"Missing {' or '.join(missing)} in environment.")

    return CredentialContext(
        key_id=settings.razor_key_id,
        key_secret=settings.razor_key_secret,
        webhook_secret=settings.razor_webhook_secret or None,
    )
