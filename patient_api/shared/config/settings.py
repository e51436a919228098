# 📄 File: patient_api/shared/config/settings.py
#
# 🧭 Purpose (Layman Explanation):
# One place for every knob of the consultation app: where the database is, the Supabase,
# Stripe, Resend and PDF keys, the registration price and who receives support email.
#
# 🧪 Purpose (Technical Summary):
# pydantic-settings model read from the process environment and an optional .env file,
# with validators for environment, log level, CORS origins and currency, plus derived
# values (async database URL, CORS origin list, normalized site URL).
#
# 🔗 Dependencies:
# - pydantic / pydantic-settings
# - python-dotenv (used by pydantic-settings to read .env)
#
# 🔄 Connected Modules / Calls From:
# - patient_api.main, database connection, migrations/env.py
# - Stripe, Resend, Supabase and HTML to PDF gateways
# - Payment, notification and market services

from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Runtime configuration for the consultation API.

    Names are case sensitive and match the deployed environment variables;
    unknown variables are ignored.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # =========================================================================
    # APPLICATION SETTINGS
    # =========================================================================

    APP_NAME: str = Field(default="Patient Consultation API", description="Application name")
    APP_VERSION: str = Field(default="1.0.0", description="Application version")
    APP_DESCRIPTION: str = Field(
        default="Guided menopause consultation, payments and document delivery",
        description="Application description"
    )
    SERVICE_NAME: str = Field(default="patient-consultation-api", description="Service name used in logs")
    ENVIRONMENT: str = Field(default="development", description="Runtime environment")
    DEBUG: bool = Field(default=False, description="Debug mode flag")
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: str = Field(default="json", description="Log output format: json or text")
    LOG_FILE: Optional[str] = Field(None, description="Optional log file path")

    # =========================================================================
    # SERVER CONFIGURATION
    # =========================================================================

    HOST: str = Field(default="0.0.0.0", description="Server host")
    PORT: int = Field(default=8000, description="Server port")
    RELOAD: bool = Field(default=False, description="Auto-reload on changes")
    WORKERS: int = Field(default=1, description="Number of worker processes")

    # =========================================================================
    # DATABASE CONFIGURATION
    # =========================================================================

    # Direct PostgreSQL connection to the Supabase database
    DATABASE_URL: Optional[str] = Field(None, description="Database connection URL")
    DB_HOST: str = Field(default="localhost", description="Database host")
    DB_PORT: int = Field(default=5432, description="Database port")
    DB_NAME: str = Field(default="postgres", description="Database name")
    DB_USER: str = Field(default="postgres", description="Database user")
    DB_PASSWORD: str = Field(default="", description="Database password")

    # Connection Pool Settings
    DB_POOL_SIZE: int = Field(default=10, description="Database pool size")
    DB_MAX_OVERFLOW: int = Field(default=20, description="Database pool overflow")
    DB_POOL_TIMEOUT: int = Field(default=30, description="Database pool timeout")
    DB_POOL_RECYCLE: int = Field(default=3600, description="Database pool recycle time")
    DB_AUTO_CREATE_TABLES: bool = Field(
        default=False,
        description="Create missing tables at startup (tests and local development)"
    )

    # =========================================================================
    # SUPABASE
    # =========================================================================

    SUPABASE_URL: str = Field(..., description="Supabase project URL")
    SUPABASE_ANON_KEY: str = Field(..., description="Supabase anonymous key")
    SUPABASE_SERVICE_ROLE_KEY: str = Field(..., description="Supabase service role key")

    # =========================================================================
    # STRIPE
    # =========================================================================

    STRIPE_SECRET_KEY: Optional[str] = Field(None, description="Stripe secret API key")
    STRIPE_WEBHOOK_SECRET: Optional[str] = Field(None, description="Stripe webhook signing secret")
    STRIPE_API_VERSION: str = Field(default="2023-10-16", description="Pinned Stripe API version")
    STRIPE_TIMEOUT_SECONDS: int = Field(default=30, description="Stripe API request timeout")
    STRIPE_MAX_NETWORK_RETRIES: int = Field(default=2, description="Stripe retries on network errors")
    STRIPE_PRICE_ID: Optional[str] = Field(
        None,
        description="Stripe price used for registration checkout; inline price data when unset"
    )

    # =========================================================================
    # PRICING
    # =========================================================================

    MIN_CHARGE_AMOUNT: float = Field(
        default=0.50,
        description="Amounts below this grant free access without a checkout session"
    )
    REGISTRATION_BASE_PRICE: float = Field(default=19.0, description="Price quoted at registration")
    DEFAULT_CURRENCY: str = Field(default="gbp", description="Fallback ISO currency code")
    SUBSCRIPTION_DURATION_DAYS: int = Field(default=365, description="Length of paid access")
    PRODUCT_NAME: str = Field(default="Menopause Doctors Visit UK", description="Checkout product name")
    PRODUCT_DESCRIPTION: str = Field(
        default="12 months access to guided assessment tool with personalized report",
        description="Checkout product description"
    )

    # =========================================================================
    # EMAIL (RESEND)
    # =========================================================================

    RESEND_API_KEY: Optional[str] = Field(None, description="Resend API key")
    EMAIL_FROM: str = Field(
        default="The Empowered Patient <support@the-empowered-patient.org>",
        description="Sender for patient-facing emails"
    )
    CONTACT_EMAIL_FROM: str = Field(
        default="Contact Form <onboarding@resend.dev>",
        description="Sender for contact form notifications"
    )
    SUPPORT_EMAIL: str = Field(
        default="support@the-empowered-patient.org",
        description="Support inbox receiving contact form messages"
    )
    DOCUMENT_EMAIL_SUBJECT: str = Field(
        default="Your Menopause Consultation Document",
        description="Subject of the consultation document email"
    )
    WELCOME_EMAIL_SUBJECT: str = Field(
        default="Welcome to Your Health Assessment Journey!",
        description="Subject of the welcome email"
    )
    EMAIL_LOGO_URL: str = Field(
        default=(
            "https://ppnunnmjvpiwrrrbluno.supabase.co/storage/v1/object/public/logos/"
            "website_logo_transparent.png"
        ),
        description="Logo shown in emails and the consultation document"
    )
    DOCUMENT_RESEND_WINDOW_SECONDS: int = Field(
        default=120,
        description="Window in which a repeated document request is skipped"
    )

    # =========================================================================
    # PDF GENERATION
    # =========================================================================

    HTMLPDF_API_KEY: Optional[str] = Field(None, description="HTML to PDF API key")
    HTMLPDF_API_URL: str = Field(
        default="https://api.htmlpdfapi.com/v1/generate",
        description="HTML to PDF API endpoint"
    )
    HTMLPDF_TIMEOUT_SECONDS: int = Field(default=30, description="PDF API request timeout")

    # =========================================================================
    # SITE & CORS
    # =========================================================================

    SITE_URL: str = Field(default="http://localhost:5173", description="Public URL of the web client")
    CORS_ORIGINS: str = Field(
        default=(
            "http://localhost:5173,http://localhost:3000,"
            "https://menopause.the-empowered-patient.org,"
            "https://menopause.the-empowered-patient.com,"
            "https://menopause.the-empowered-patient.com.au"
        ),
        description="CORS allowed origins"
    )
    CORS_ALLOW_CREDENTIALS: bool = Field(default=True, description="CORS allow credentials")
    CORS_MAX_AGE: int = Field(default=600, description="Preflight cache lifetime in seconds")

    # =========================================================================
    # MARKETS
    # =========================================================================

    AFFILIATE_TRACKING_ID_UK: Optional[str] = Field(None, description="Endorsely tracking id for the UK site")
    AFFILIATE_TRACKING_ID_US: Optional[str] = Field(None, description="Endorsely tracking id for the US site")
    AFFILIATE_TRACKING_ID_AU: Optional[str] = Field(None, description="Endorsely tracking id for the AU site")

    # =========================================================================
    # RATE LIMITING
    # =========================================================================

    RATE_LIMIT_ENABLED: bool = Field(default=True, description="Enable endpoint rate limits")
    RATE_LIMIT_STORAGE_URI: str = Field(default="memory://", description="slowapi storage backend")
    REGISTRATION_RATE_LIMIT: str = Field(default="5/minute", description="Registration rate limit")
    CONTACT_RATE_LIMIT: str = Field(default="5/minute", description="Contact form rate limit")
    DOCUMENT_RATE_LIMIT: str = Field(default="10/minute", description="Document generation rate limit")

    # =========================================================================
    # VALIDATORS
    # =========================================================================

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        allowed_environments = ["development", "staging", "production", "test"]
        if v.lower() not in allowed_environments:
            raise ValueError(f"Environment must be one of {allowed_environments}")
        return v.lower()

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level value."""
        allowed_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed_levels:
            raise ValueError(f"Log level must be one of {allowed_levels}")
        return v.upper()

    @field_validator("CORS_ORIGINS")
    @classmethod
    def validate_cors_origins(cls, v: str) -> str:
        """Validate CORS origins format."""
        origins = [origin.strip() for origin in v.split(",") if origin.strip()]
        for origin in origins:
            if not origin.startswith(("http://", "https://", "*")):
                raise ValueError(f"Invalid CORS origin format: {origin}")
        return v

    @field_validator("DEFAULT_CURRENCY")
    @classmethod
    def validate_currency(cls, v: str) -> str:
        """Currencies are stored lowercase, as Stripe reports them."""
        if len(v) != 3:
            raise ValueError("Currency must be a three letter ISO code")
        return v.lower()

    # =========================================================================
    # COMPUTED PROPERTIES
    # =========================================================================

    @property
    def database_url(self) -> str:
        """
        Async SQLAlchemy URL for the consultation database.

        Supabase hands out plain ``postgresql://`` URLs, which are pointed at the
        asyncpg driver here. Without DATABASE_URL the DB_* parts are used.
        """
        if self.DATABASE_URL:
            scheme, _, rest = self.DATABASE_URL.partition("://")
            if scheme in ("postgres", "postgresql"):
                return f"postgresql+asyncpg://{rest}"
            return self.DATABASE_URL

        return (
            f"postgresql+asyncpg://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )

    @property
    def cors_origins_list(self) -> List[str]:
        """Get CORS origins as a list."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.ENVIRONMENT == "production"

    @property
    def is_testing(self) -> bool:
        """Check if running in test environment."""
        return self.ENVIRONMENT == "test"

    @property
    def site_url(self) -> str:
        """Site URL without a trailing slash."""
        return self.SITE_URL.rstrip("/")


# ============================================================================
# SETTINGS FACTORY
# ============================================================================

@lru_cache()
def get_settings() -> Settings:
    """
    Return the cached Settings instance.

    Tests call ``get_settings.cache_clear()`` after changing the environment.
    """
    return Settings()
