"""The closed set of auth providers known to the linking flow."""

from enum import Enum


class AuthProvider(Enum):
    """An auth provider a user can sign in with.

    Each member carries the stable ID the backend uses, the title shown to the
    user, and whether the provider can be linked to an existing account.
    Declaration order is the display priority of the linking screen.
    """

    GOOGLE = ("google.com", "Google", True)
    APPLE = ("apple.com", "Apple", True)
    TWITTER = ("twitter.com", "Twitter", True)
    MICROSOFT = ("microsoft.com", "Microsoft", True)
    GITHUB = ("github.com", "GitHub", True)
    YAHOO = ("yahoo.com", "Yahoo", True)
    FACEBOOK = ("facebook.com", "Facebook", True)
    EMAIL_PASSWORD = ("password", "Email & Password Login", True)
    PASSWORDLESS = ("emailLink", "Email Link/Passwordless", True)
    PHONE_NUMBER = ("phone", "Phone Auth", True)
    ANONYMOUS = ("anonymous", "Anonymous Authentication", False)
    CUSTOM = ("custom", "Custom Auth System", False)

    def __init__(self, provider_id: str, title: str, linkable: bool) -> None:
        self.provider_id = provider_id
        self.title = title
        self.linkable = linkable

    def __str__(self) -> str:
        return self.provider_id
