"""Checkout options: remote, credentials, certificate and strategy settings."""
from pathlib import Path
from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pygit2.enums import CheckoutStrategy

from tagsnap.core.errors import ConfigError

DEFAULT_REFSPECS = [
    "+refs/heads/*:refs/remotes/origin/*",
    "refs/tags/*:refs/tags/*",
]

# Safe base plus conflict resolution in favour of the incoming tree
DEFAULT_CHECKOUT_STRATEGY = [
    "SAFE",
    "RECREATE_MISSING",
    "ALLOW_CONFLICTS",
    "USE_THEIRS",
]


class CheckoutOptions(BaseModel):
    """Tunable behaviour of a fetch + tag checkout run.

    Defaults reproduce the historical behaviour: every remote certificate
    is trusted, an SSH keypair named ``id_rsa`` is always offered as user
    ``git``, and checkout overwrites local divergence.
    """

    model_config = ConfigDict(extra="forbid")

    remote_name: str = Field(default="origin", description="Remote to fetch from")
    refspecs: List[str] = Field(
        default_factory=lambda: list(DEFAULT_REFSPECS),
        description="Refspecs passed to fetch",
    )
    trust_all_certificates: bool = Field(
        default=True, description="Accept any remote certificate"
    )
    ssh_username: str = Field(default="git")
    ssh_public_key: str = Field(default="id_rsa.pub", description="Relative to the ssh path")
    ssh_private_key: str = Field(default="id_rsa", description="Relative to the ssh path")
    ssh_passphrase: str = Field(default="")
    checkout_strategy: List[str] = Field(
        default_factory=lambda: list(DEFAULT_CHECKOUT_STRATEGY),
        description="pygit2 CheckoutStrategy member names, OR-ed together",
    )
    tag_lookup: Literal["scan", "ref"] = Field(
        default="scan",
        description="'scan' walks the object database, 'ref' reads refs/tags/<name>",
    )

    @field_validator("checkout_strategy")
    @classmethod
    def validate_strategy_names(cls, v: List[str]) -> List[str]:
        """Ensure every name is a CheckoutStrategy member."""
        if not v:
            raise ValueError("checkout_strategy must name at least one flag")
        unknown = [name for name in v if name not in CheckoutStrategy.__members__]
        if unknown:
            raise ValueError(f"unknown checkout strategy flags: {', '.join(unknown)}")
        return v

    @field_validator("refspecs")
    @classmethod
    def validate_refspecs(cls, v: List[str]) -> List[str]:
        if not v:
            raise ValueError("refspecs must not be empty")
        return v

    @property
    def strategy_flags(self) -> CheckoutStrategy:
        flags = CheckoutStrategy(0)
        for name in self.checkout_strategy:
            flags |= CheckoutStrategy[name]
        return flags

    @classmethod
    def load(cls, path: Path) -> "CheckoutOptions":
        """Load options from a JSON file."""
        path = Path(path)
        try:
            return cls.model_validate_json(path.read_text())
        except OSError as e:
            raise ConfigError(f"Cannot read config file {path}: {e}") from e
        except ValidationError as e:
            raise ConfigError(f"Invalid config file {path}: {e}") from e
