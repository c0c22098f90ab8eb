"""Repository access: session, credentials, options and the checkout workflow."""
from tagsnap.repo.credentials import CredentialProvider
from tagsnap.repo.options import CheckoutOptions
from tagsnap.repo.report import CheckoutReport
from tagsnap.repo.session import RepositorySession, SessionState
from tagsnap.repo.workflow import checkout_tag

__all__ = [
    "CheckoutOptions",
    "CheckoutReport",
    "CredentialProvider",
    "RepositorySession",
    "SessionState",
    "checkout_tag",
]
