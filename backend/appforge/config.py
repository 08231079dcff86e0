from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # App
    environment: str = "development"
    debug: bool = True
    log_level: str = "INFO"
    allowed_origins: str = "http://localhost:3000,http://localhost:5173"

    # Durable wizard storage (file | sql | redis | memory)
    storage_backend: str = "file"
    storage_dir: str = ".appforge"
    storage_key: str = "appforge_design_wizard_state"
    plan_storage_key: str = "appforge_plan_state"

    # SQL storage backend
    database_url: str = "sqlite:///./appforge.db"

    # Redis storage backend
    redis_url: str = "redis://localhost:6379/0"

    # Project persistence API
    project_api_url: str = ""
    project_api_timeout: float = 30.0

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
