"""Transport client configuration loaded from the environment."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

from companion.config import ConfigurationError, env_bool, env_int, env_str

AUTH_TYPES = ("qr", "pairing")
DATABASE_TYPES = ("sqlite", "postgresql", "mysql")
DEFAULT_DATABASE_URL = "./session/companion.db"


@dataclass(frozen=True)
class DatabaseConfig:
    """Session store the transport library persists its credentials to."""

    type: str = "sqlite"
    url: str = DEFAULT_DATABASE_URL

    def __post_init__(self) -> None:
        if self.type not in DATABASE_TYPES:
            raise ConfigurationError.invalid_value("DATABASE_TYPE", self.type, f"Expected one of {', '.join(DATABASE_TYPES)}")


@dataclass(frozen=True)
class ClientConfig:
    """Fixed configuration handed to the transport factory on every construction."""

    auth_type: str = "qr"
    phone_number: int = 0
    prefix: str = "/"
    ignore_me: bool = False
    show_logs: bool = True
    auto_read: bool = True
    auto_online: bool = True
    auto_presence: bool = True
    auto_reject_call: bool = True
    load_llm_schemas: bool = False
    database: DatabaseConfig = field(default_factory=DatabaseConfig)

    def __post_init__(self) -> None:
        if self.auth_type not in AUTH_TYPES:
            raise ConfigurationError.invalid_value("CLIENT_AUTH_TYPE", self.auth_type, "Expected 'qr' or 'pairing'")

    def to_dict(self) -> Dict[str, Any]:
        """Return the mapping form accepted by transport libraries."""
        payload: Dict[str, Any] = {
            "authType": self.auth_type,
            "prefix": self.prefix,
            "ignoreMe": self.ignore_me,
            "showLogs": self.show_logs,
            "autoRead": self.auto_read,
            "autoOnline": self.auto_online,
            "autoPresence": self.auto_presence,
            "autoRejectCall": self.auto_reject_call,
            "loadLLMSchemas": self.load_llm_schemas,
            "database": {"type": self.database.type, "connection": {"url": self.database.url}},
        }
        if self.auth_type == "pairing":
            payload["phoneNumber"] = self.phone_number
        return payload


def _flag(name: str, default: bool) -> bool:
    value = env_bool(name, or_value=default)
    return default if value is None else value


def load_client_config() -> ClientConfig:
    """Build the client configuration from ``CLIENT_*`` and ``DATABASE_*`` variables."""
    auth_type = (env_str("CLIENT_AUTH_TYPE", or_value="qr") or "qr").strip().lower()
    phone_number = 0
    if auth_type == "pairing":
        phone_number = env_int("CLIENT_PHONE_NUMBER", or_value=0) or 0
        if phone_number <= 0:
            raise ConfigurationError.missing_value("CLIENT_PHONE_NUMBER", "required for pairing authentication")

    database = DatabaseConfig(
        type=env_str("DATABASE_TYPE", or_value="sqlite") or "sqlite",
        url=env_str("DATABASE_URL", or_value=DEFAULT_DATABASE_URL) or DEFAULT_DATABASE_URL,
    )

    return ClientConfig(
        auth_type=auth_type,
        phone_number=phone_number,
        prefix=env_str("CLIENT_PREFIX", or_value="/") or "/",
        ignore_me=_flag("CLIENT_IGNORE_ME", False),
        show_logs=_flag("CLIENT_SHOW_LOGS", True),
        auto_read=_flag("CLIENT_AUTO_READ", True),
        auto_online=_flag("CLIENT_AUTO_ONLINE", True),
        auto_presence=_flag("CLIENT_AUTO_PRESENCE", True),
        auto_reject_call=_flag("CLIENT_AUTO_REJECT_CALL", True),
        load_llm_schemas=_flag("CLIENT_LOAD_LLM_SCHEMAS", False),
        database=database,
    )
