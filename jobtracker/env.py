import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


def load_env() -> None:
    """Load .env from project root if present."""
    env_path = Path.cwd() / ".env"
    if not env_path.exists():
        return
    load_dotenv(dotenv_path=env_path)


@dataclass
class Settings:
    database_url: str = "sqlite:///data/jobtracker.db"
    log_level: str = "INFO"
    log_dir: Path = Path("logs")
    secret_key: str = "dev-secret-change-me"
    page_limit: int = 10
    trend_months: int = 6


def get_settings() -> Settings:
    """
    Build settings from the environment.

    Variables are read after load_env(), so values in .env apply unless the
    process environment already defines them.
    """
    load_env()
    defaults = Settings()
    return Settings(
        database_url=os.getenv("JOBTRACKER_DATABASE_URL", defaults.database_url),
        log_level=os.getenv("JOBTRACKER_LOG_LEVEL", defaults.log_level),
        log_dir=Path(os.getenv("JOBTRACKER_LOG_DIR", str(defaults.log_dir))),
        secret_key=os.getenv("JOBTRACKER_SECRET_KEY", defaults.secret_key),
        page_limit=int(os.getenv("JOBTRACKER_PAGE_LIMIT", defaults.page_limit)),
        trend_months=int(os.getenv("JOBTRACKER_TREND_MONTHS", defaults.trend_months)),
    )
