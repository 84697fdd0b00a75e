from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # DataForSEO API (optional; metrics checks are skipped without it)
    dataforseo_login: str = ""
    dataforseo_password: str = ""
    dataforseo_api_url: str = "https://api.dataforseo.com/v3"
    dataforseo_language_code: str = "en"
    dataforseo_location_name: str = "United Kingdom"
    dataforseo_timeout: float = 30.0

    @property
    def dataforseo_configured(self) -> bool:
        return bool(self.dataforseo_login and self.dataforseo_password)

    # Target page fetch
    fetch_timeout: float = 15.0
    fetch_max_redirects: int = 5
    fetch_user_agent: str = "Mozilla/5.0 (compatible; GEOAuditBot/1.0; +https://geo-audit.local)"

    # Resend (email delivery)
    resend_api_key: str = ""
    resend_api_url: str = "https://api.resend.com/emails"
    email_from: str = "GEO Audit <onboarding@resend.dev>"
    email_reply_to: str = ""

    # Report branding
    brand_name: str = "GEO Audit Tool"
    contact_url: str = ""
    contact_label: str = ""

    # Rate limits (slowapi syntax)
    analyze_rate_limit: str = "20/minute"
    send_report_rate_limit: str = "5/minute"

    # App
    app_env: str = "development"
    app_debug: bool = True
    app_host: str = "0.0.0.0"
    app_port: int = 8000

    # CORS
    allowed_origins: str = "*"  # comma-separated, e.g. "https://app.example.com,https://admin.example.com"

    # Logging
    log_level: str = "INFO"
    log_json: bool = False  # set True in production for structured JSON logs

    # Sentry
    sentry_dsn: str = ""  # leave empty to disable


settings = Settings()


def validate_settings_for_production() -> None:
    """Validate critical settings. Called on startup in non-test environments."""
    errors: list[str] = []

    if settings.app_env == "production":
        if settings.allowed_origins == "*":
            errors.append("ALLOWED_ORIGINS must not be '*' in production")
        if settings.app_debug:
            errors.append("APP_DEBUG must be false in production")

    if errors:
        raise SystemExit("Configuration errors:\n  - " + "\n  - ".join(errors))
