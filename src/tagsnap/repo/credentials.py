"""Remote callbacks supplying SSH key material and the certificate policy."""
import logging
import os
from typing import Optional

import pygit2

from tagsnap.repo.options import CheckoutOptions

logger = logging.getLogger(__name__)


class CredentialProvider(pygit2.RemoteCallbacks):
    """Callbacks handed to ``Remote.fetch``.

    The keypair is offered unconditionally: ``allowed_types`` and the
    username embedded in the URL are ignored. Key files are not checked
    here; a missing key only surfaces when the transport tries to use it.
    """

    def __init__(self, ssh_path: str = "", options: Optional[CheckoutOptions] = None):
        super().__init__()
        self.ssh_path = str(ssh_path or "")
        self.options = options or CheckoutOptions()

    @property
    def public_key_path(self) -> str:
        return os.path.join(self.ssh_path, self.options.ssh_public_key)

    @property
    def private_key_path(self) -> str:
        return os.path.join(self.ssh_path, self.options.ssh_private_key)

    def certificate_check(self, certificate, valid, host):
        if self.options.trust_all_certificates:
            return True
        if not valid:
            logger.warning(f"Rejecting invalid certificate for {host}")
        return bool(valid)

    def credentials(self, url, username_from_url, allowed_types):
        logger.debug(f"Offering SSH key {self.public_key_path} for {url}")
        return pygit2.Keypair(
            self.options.ssh_username,
            self.public_key_path,
            self.private_key_path,
            self.options.ssh_passphrase,
        )

    def transfer_progress(self, stats):
        logger.debug(
            f"Received {stats.received_objects}/{stats.total_objects} objects "
            f"({stats.received_bytes} bytes)"
        )
