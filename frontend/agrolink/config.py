from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # App
    environment: str = "development"
    debug: bool = True
    allowed_origins: str = "http://localhost:3000,http://localhost:5173"

    # AgroLink backend API
    api_base_url: str = "http://localhost:5001/api/"
    api_timeout_seconds: float = 10.0

    # Navigation targets handed back to the client
    dashboard_path: str = "/agronomist-dashboard"
    schedule_list_path: str = "/agronomist"

    # Wizard sessions
    wizard_session_ttl_minutes: int = 120

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
