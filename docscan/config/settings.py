from pydantic_settings import BaseSettings
import os

class Settings(BaseSettings):
    # API Server Configuration
    api_host: str = "0.0.0.0"
    api_port: int = int(os.getenv("PORT", "8000"))
    api_reload: bool = False

    # Gemini Configuration
    google_gemini_api_key: str | None = None
    # Ordered model ladder, most capable first
    gemini_models: list[str] = [
        "gemini-2.5-flash",
        "gemini-2.0-flash",
        "gemini-2.5-flash-lite",
        "gemini-2.0-flash-lite",
        "gemini-1.5-flash",
    ]
    llm_temperature: float = 0.0
    llm_num_retries: int = 0  # Only model-unavailable errors move down the ladder

    # Document download
    download_timeout: float | None = None  # None keeps the requests default (no timeout)

    # Enrollment API used when the request carries no enrollment payload.
    # Empty means "same origin as the incoming request".
    enrollment_api_base_url: str | None = None
    enrollment_api_timeout: float = 10.0

    # Firestore
    firebase_credentials_path: str | None = None  # Service account JSON; ADC when unset
    firebase_project_id: str | None = None
    students_collection: str = "students"

    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"

settings = Settings()
