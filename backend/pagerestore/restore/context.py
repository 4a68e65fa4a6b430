from dataclasses import dataclass, field
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class RestoreSettings:
    staging_dir: str
    salt: str
    ping_seconds: int = 300
    validate_user_cookie: bool = True
    validate_post_cookie: bool = True
    log_enabled: bool = False
    debug: bool = False

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "RestoreSettings":
        return cls(
            staging_dir=config["RESTORE_STAGING_DIR"],
            salt=config["RESTORE_SALT"],
            ping_seconds=int(config.get("RESTORE_PING_SECONDS", 300)),
            validate_user_cookie=bool(config.get("RESTORE_VALIDATE_USER_COOKIE", True)),
            validate_post_cookie=bool(config.get("RESTORE_VALIDATE_POST_COOKIE", True)),
            log_enabled=bool(config.get("RESTORE_LOG_ENABLED", False)),
            debug=bool(config.get("RESTORE_DEBUG", False)),
        )


@dataclass
class OutgoingCookie:
    name: str
    value: str
    max_age: int


@dataclass
class RequestContext:
    """
    Everything the restore components need from the current request.

    Built once per request by the edit context middleware and passed
    explicitly; components never reach into ``flask.request`` or ``g``.
    """

    site: Any
    host: str
    settings: RestoreSettings
    user: Optional[Any] = None
    cookies: Mapping[str, str] = field(default_factory=dict)
    outgoing_cookies: list = field(default_factory=list)

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    def queue_cookie(self, name: str, value: str, max_age: int) -> None:
        self.outgoing_cookies.append(OutgoingCookie(name, value, max_age))
