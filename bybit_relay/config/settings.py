"""
PURPOSE: Configuration settings for the Bybit webhook relay.

This module uses Pydantic Settings to manage configuration from environment
variables and .env files. All settings are validated and typed. Values are
read once at process start and never mutated afterwards.
"""

from pydantic_settings import BaseSettings

from bybit_relay.bybit.models import Credentials

# Settings that must hold a non-empty value outside development
_REQUIRED_SECRETS = ("BYBIT_API_KEY", "BYBIT_API_SECRET", "WEBHOOK_TOKEN")


class Settings(BaseSettings):
    """
    PURPOSE: Central configuration class for the relay.

    Manages the exchange credentials, the shared webhook token, the outbound
    HTTP parameters and the runtime mode. Settings are loaded from
    environment variables and .env file.
    """

    # Bybit credentials
    BYBIT_API_KEY: str = ""
    BYBIT_API_SECRET: str = ""

    # Shared secret every inbound webhook must carry in data.token
    WEBHOOK_TOKEN: str = ""

    # Outbound HTTP
    BYBIT_BASE_URL: str = "https://api.bybit.com"
    BYBIT_RECV_WINDOW: str = "5000"
    HTTP_TIMEOUT_SECONDS: float = 10.0

    # System Settings
    APP_ENV: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    def is_production(self) -> bool:
        """
        PURPOSE: Determine whether the app is running in production mode.

        Returns:
            bool: True when APP_ENV indicates production.
        """
        return self.APP_ENV.strip().lower() in {"prod", "production"}

    def is_development(self) -> bool:
        """
        PURPOSE: Determine whether the app is running in development mode.

        Returns:
            bool: True when APP_ENV indicates development or debug is on.
        """
        return self.APP_ENV.strip().lower() in {"dev", "development"} or self.DEBUG

    def get_missing_secrets(self) -> list[str]:
        """
        PURPOSE: Return list of secret settings that are still empty.

        Returns:
            list[str]: Setting names without a configured value.
        """
        return [name for name in _REQUIRED_SECRETS if not getattr(self, name).strip()]

    def validate_credentials(self) -> None:
        """
        PURPOSE: Enforce that secrets are configured outside development.

        CALLED BY: Application factory (create_app).

        In production/staging: raises ValueError with clear instructions.
        In development: returns silently; startup logs the missing names.

        Raises:
            ValueError: If any secret is empty in non-dev mode.
        """
        missing = self.get_missing_secrets()
        if not missing:
            return

        hint = (
            "Set these in your .env file or as environment variables:\n"
            + "\n".join(f"  {name}=<your-secret-value>" for name in missing)
        )

        if not self.is_development():
            raise ValueError(
                f"SECURITY: Missing secrets detected for: "
                f"{', '.join(missing)}.\n{hint}"
            )

    def credentials(self) -> Credentials:
        """
        PURPOSE: Build the immutable credential pair used to sign Bybit requests.

        CALLED BY: api/routes_webhook.py get_credentials dependency

        Returns:
            Credentials: API key and secret.
        """
        return Credentials(api_key=self.BYBIT_API_KEY, api_secret=self.BYBIT_API_SECRET)

    class Config:
        """Pydantic model configuration."""

        env_file: str = ".env"
        env_file_encoding: str = "utf-8"
        case_sensitive: bool = True
        extra: str = "ignore"


settings: Settings = Settings()
