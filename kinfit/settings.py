from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "sqlite:///./kinfit.db"
    jwt_secret: str = "kinfit_default_secret_change_in_production"
    jwt_algorithm: str = "HS256"
    jwt_expire_days: int = 7

    journal_path: str = "assets/Gym Journal 2025.txt"
    journal_output_dir: str = "assets"
    journal_import_email: str = "journal@kinfit.app"  # placeholder owner for imports

    target_sets_per_week: int = 10
    target_minutes_cardio: int = 150
    target_minutes_mobility: int = 60

    log_level: str = "INFO"
    log_file: str | None = None

    class Config:
        env_file = ".env"
        env_prefix = ""
        case_sensitive = False


@lru_cache
def get_settings() -> Settings:
    return Settings()
