"""Configuration loading and logging setup for the PocketBase client."""

import logging
import os
import pathlib

import pydantic
import structlog

from .credentials import AdminEmailPassword, Anonymous, Credentials, Token
from .session import DEFAULT_TIMEOUT, Session

CONFIG_ENV_VAR = "POCKETBASE_CLIENT_CONFIG_PATH"
SECRET_ENV_VARS = {
    "admin_password": "POCKETBASE_ADMIN_PASSWORD",
    "token": "POCKETBASE_TOKEN",
}
logger = structlog.get_logger(__name__)


class ClientConfig(pydantic.BaseModel):
    """Configuration for a PocketBase client session."""

    base_url: str = pydantic.Field(description="Origin of the PocketBase server", min_length=1)
    admin_email: str | None = pydantic.Field(None, description="Admin login email")
    admin_password: str | None = pydantic.Field(
        None,
        description="Admin login password",
        repr=False,
    )
    token: str | None = pydantic.Field(
        None,
        description="Pre-supplied auth token; skips the login exchange",
        repr=False,
    )
    timeout: float = pydantic.Field(
        DEFAULT_TIMEOUT,
        description="Request timeout in seconds",
        gt=0,
    )

    @pydantic.model_validator(mode="after")
    def _check_credentials(self) -> "ClientConfig":
        if (self.admin_email is None) != (self.admin_password is None):
            msg = "admin_email and admin_password must be set together"
            raise ValueError(msg)
        if self.token and self.admin_email is not None:
            msg = "token and admin credentials are mutually exclusive"
            raise ValueError(msg)
        return self

    def credentials(self) -> Credentials:
        """Map the configured options to a credential source."""
        if self.token:
            return Token(self.token)
        if self.admin_email is not None and self.admin_password is not None:
            return AdminEmailPassword(self.admin_email, self.admin_password)
        return Anonymous()


def configure_logging(log_level_name: str = "INFO", json_output: bool = False) -> None:
    """Opt-in structlog setup for applications without their own.

    The client never calls this itself; it only emits through
    ``structlog.get_logger``. Loggers are not cached so the application may
    reconfigure later.

    Args:
        log_level_name: Minimum level name (e.g., "DEBUG").
        json_output: Render JSON lines instead of logfmt.
    """
    log_level = getattr(logging, log_level_name.upper(), logging.INFO)
    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.processors.LogfmtRenderer(key_order=("timestamp", "level", "msg"))
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.EventRenamer("msg"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


def load_config(config_path: str | pathlib.Path) -> ClientConfig:
    """Load configuration from a JSON file.

    Secrets may be kept out of the file: ``POCKETBASE_ADMIN_PASSWORD`` and
    ``POCKETBASE_TOKEN`` override the corresponding keys when set.

    Raises:
        FileNotFoundError: If the file does not exist.
        pydantic.ValidationError: If the file content is invalid.
    """
    path = pathlib.Path(config_path)
    if not path.is_file():
        msg = f"Configuration file not found: {config_path}"
        raise FileNotFoundError(msg)

    config = ClientConfig.model_validate_json(path.read_bytes())
    overrides = {
        field: value
        for field, env_var in SECRET_ENV_VARS.items()
        if (value := os.environ.get(env_var))
    }
    if not overrides:
        return config
    return ClientConfig.model_validate(config.model_dump() | overrides)


def session_from_config(config: ClientConfig) -> Session:
    """Construct a session from validated config."""
    session = Session(
        base_url=config.base_url,
        credentials=config.credentials(),
        timeout=config.timeout,
    )
    logger.info(
        "Created session",
        base_url=session.base_url,
        credentials=type(session.credentials).__name__,
    )
    return session


def create_session(config_path: str | None = None) -> Session:
    """Create a session using a config path or the environment default.

    Logging configuration is left to the caller.
    """
    resolved_path = config_path or os.environ.get(CONFIG_ENV_VAR, "pocketbase.json")
    return session_from_config(load_config(resolved_path))
