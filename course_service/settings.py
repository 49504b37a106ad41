from dataclasses import dataclass
from pathlib import Path

from shared.config import get_env, get_int


@dataclass(frozen=True)
class Settings:
    data_file: Path
    grouped_file: Path
    backups_dir: Path
    backup_keep: int
    pages_dir: Path
    pages_base_path: str


def load_settings() -> Settings:
    return Settings(
        data_file=Path(get_env("COURSES_DATA_FILE", "data/all_courses.json")),
        grouped_file=Path(get_env("COURSES_GROUPED_FILE", "data/grouped_courses.json")),
        backups_dir=Path(get_env("BACKUPS_DIR", "backups")),
        backup_keep=get_int("BACKUP_KEEP", 10),
        pages_dir=Path(get_env("PAGES_DIR", "ai")),
        pages_base_path=get_env("PAGES_BASE_PATH", "/ai"),
    )
