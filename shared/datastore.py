import json
import logging
import os
import tempfile
import threading
import time
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

BACKUP_PREFIX = "all_courses.json.bak-"


class BackupError(RuntimeError):
    pass


class JsonFileStore:
    """
    A JSON array kept in one file and rewritten wholesale on every write.

    Each write copies the previous file into `backups_dir` first and keeps the
    `keep` most recent copies. Writes go through a temp file and os.replace, so
    a failed write leaves the previous file intact. Last writer wins.
    """
    def __init__(self, data_file: str | Path, backups_dir: str | Path, keep: int = 10):
        self.data_file = Path(data_file)
        self.backups_dir = Path(backups_dir)
        self.keep = keep
        self.lock = threading.Lock()

    # ---- reads ----

    def load(self) -> list[dict[str, Any]]:
        try:
            data = json.loads(self.data_file.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return []
        except ValueError as e:
            logger.error("Corrupt data file %s: %s", self.data_file, e)
            return []
        return data if isinstance(data, list) else []

    # ---- writes ----

    def _backup(self) -> Path | None:
        if not self.data_file.exists():
            return None
        try:
            self.backups_dir.mkdir(parents=True, exist_ok=True)
            # millisecond stamp, bumped until unused
            stamp = int(time.time() * 1000)
            target = self.backups_dir / f"{BACKUP_PREFIX}{stamp}"
            while target.exists():
                stamp += 1
                target = self.backups_dir / f"{BACKUP_PREFIX}{stamp}"
            target.write_bytes(self.data_file.read_bytes())
        except OSError as e:
            raise BackupError(f"Backup failed: {e}") from e
        self._prune()
        return target

    def _prune(self) -> None:
        for old in self.list_backups()[self.keep:]:
            try:
                (self.backups_dir / old["name"]).unlink()
            except OSError as e:
                logger.warning("Could not delete old backup %s: %s", old["name"], e)

    def _write(self, records: list[dict[str, Any]]) -> None:
        self.data_file.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.data_file.parent, prefix=".tmp-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(records, f, indent=2, ensure_ascii=False)
            os.replace(tmp, self.data_file)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def save(self, records: list[dict[str, Any]]) -> Path | None:
        """Backup, then replace the data file. Raises BackupError without writing."""
        with self.lock:
            backup = self._backup()
            self._write(records)
        logger.info("Wrote %d courses to %s", len(records), self.data_file)
        return backup

    # ---- backups ----

    def list_backups(self) -> list[dict[str, Any]]:
        if not self.backups_dir.exists():
            return []
        files = []
        for p in self.backups_dir.iterdir():
            if p.is_file() and p.name.startswith(BACKUP_PREFIX):
                files.append({"name": p.name, "path": f"/backups/{p.name}", "mtime": p.stat().st_mtime * 1000})
        # newest first; the name stamp breaks mtime ties
        files.sort(key=lambda f: (f["mtime"], f["name"]), reverse=True)
        return files

    def backup_path(self, name: str) -> Path:
        if not name.startswith(BACKUP_PREFIX) or "/" in name or "\\" in name or ".." in name:
            raise FileNotFoundError(name)
        path = self.backups_dir / name
        if not path.is_file():
            raise FileNotFoundError(name)
        return path

    def read_backup(self, name: str) -> str:
        return self.backup_path(name).read_text(encoding="utf-8")


def store_dependency(store: JsonFileStore):
    def get_store():
        yield store
    return get_store
