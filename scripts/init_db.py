from __future__ import annotations

import sys
from pathlib import Path

import importlib

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.class_attendance.class_attendance.app_logger import setup_logging
from src.class_attendance.class_attendance.database.bootstrap import apply_schema, list_tables


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    logger = setup_logging(getattr(settings, "LOG_LEVEL", None))
    db_config = dict(settings.DB_CONFIG)

    schema_path = REPO_ROOT / "database" / "schema.sql"
    count = apply_schema(db_config, schema_path=schema_path)
    tables = list_tables(db_config)
    logger.info(
        "schema applied (%d statements) -> %s@%s:%s/%s tables=%s",
        count, db_config.get("user"), db_config.get("host"), db_config.get("port", 3306),
        db_config.get("database"), ", ".join(sorted(tables)),
    )


if __name__ == "__main__":
    main()
