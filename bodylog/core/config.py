from dotenv import load_dotenv
from pydantic_settings import BaseSettings

load_dotenv()


class Settings(BaseSettings):
    POSTGRES_DSN: str | None = None
    ENVIRONMENT: str = "local"
    LOG_LEVEL: str = "INFO"

    # Object storage holding progress photos (Supabase storage REST API)
    STORAGE_URL: str | None = None
    STORAGE_KEY: str | None = None
    PHOTO_BUCKET: str = "progress-photos"

    # Validity of signed photo URLs handed to clients
    SIGNED_URL_TTL_SECONDS: int = 60 * 60


settings = Settings()
