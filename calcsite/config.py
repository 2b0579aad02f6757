from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    APP_NAME: str = "calcsite"
    SITE_URL: str = "https://calculators.example.com"

    # Contact form relay
    CONTACT_RELAY_URL: str = "https://relay.example.com/f/contact"
    CONTACT_FALLBACK_EMAIL: str = "contact@calculators.example.com"
    CONTACT_TIMEOUT_SECONDS: float = 15.0

    CORS_ORIGINS: str = "*"  # comma-separated

    class Config:
        env_file = ".env"


settings = Settings()
