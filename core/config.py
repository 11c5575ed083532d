"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for the bloglist API happen here. No module
should call os.getenv() or os.environ.get() directly.

Design patterns used:
  Explicit configuration object: Settings is constructed once by an entry
      point (asgi.py, main.py) and passed by reference into create_app(),
      which hands it to the password hasher, the token codec, and the stores.
      Library modules never look settings up on their own.

  Singleton via lru_cache: get_settings() is the entry-point helper. It
      instantiates Settings once and returns the cached instance afterwards.

  @model_validator(mode="after"): cross-field validation after all fields are
      resolved. Implements the DEBUG-conditional SECRET_KEY policy: dev mode
      generates a key with a warning, production mode refuses to start.

Security notes:
  SECRET_KEY shorter than 32 chars is rejected outright. JWT signing relies on
  key entropy -- a short key makes forged tokens practical.

Layer rule: core/ is the kernel. This module may not import from api/,
auth/, or posts/.
"""

import logging
import secrets
from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("bloglist.config")

# Relative to the working directory, like the .env file.
_DEFAULT_DB_URL = "sqlite:///bloglist.db"


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    All fields have defaults except the effective secret key, so tests can
    build Settings(secret_key=..., database_url=...) without a .env file.

    Environment variable name mapping: field names are uppercased.
    E.g. `secret_key` reads from SECRET_KEY, `bcrypt_rounds` from BCRYPT_ROUNDS.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    debug: bool = False
    # Empty string is the sentinel for "not configured". The model_validator
    # below either generates a dev key or raises, so callers never see "".
    secret_key: str = ""
    database_url: str = _DEFAULT_DB_URL

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    token_expire_seconds: int = Field(default=3600, gt=0)
    # bcrypt accepts 4..31. 10 matches the salt rounds the service has
    # always used; tests drop to 4 to keep the suite fast.
    bcrypt_rounds: int = Field(default=10, ge=4, le=31)

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    cors_origins: list[str] = ["http://localhost", "http://localhost:3000", "http://127.0.0.1"]
    rate_limit_enabled: bool = True

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_secret_key(self) -> "Settings":
        """Enforce the SECRET_KEY policy.

        Dev mode (DEBUG=true): auto-generate a random key with a warning.
            Tokens will not survive a restart -- acceptable for local dev.

        Production mode: refuse to start without SECRET_KEY. A random key in
            production would silently invalidate every issued token on restart.

        Both modes: reject keys shorter than 32 characters.
        """
        if not self.secret_key:
            if self.debug:
                self.secret_key = secrets.token_hex(32)
                logger.warning("Using auto-generated SECRET_KEY. Tokens will not persist across restarts.")
            else:
                raise ValueError(
                    "SECRET_KEY is required in production mode. "
                    "Set SECRET_KEY in your environment or .env file. "
                    "To run in development mode, set DEBUG=true."
                )
        if len(self.secret_key) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide Settings instance for entry points.

    Only asgi.py and main.py call this. Everything else receives the Settings
    object as an argument.

    In tests: build Settings(...) directly, or call get_settings.cache_clear()
    after changing the environment.
    """
    return Settings()
