from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    data_dir: Path = Path.home() / ".lessonreview" / "data"
    sqlite_filename: str = "lessonreview.db"
    save_timeout_seconds: float | None = None  # None = wait for the store indefinitely
    session_ttl_seconds: float = 3600.0  # idle review sessions are dropped after this
    max_active_sessions: int = 1000
    host: str = "127.0.0.1"
    log_level: str = "warning"

    model_config = {"env_prefix": "LESSONREVIEW_"}


settings = Settings()
