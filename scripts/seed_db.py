from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.church_checkin.church_checkin.database.bootstrap import apply_sql_file, ensure_default_ministries
from src.church_checkin.church_checkin.database.connection import DBConfig


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_sql_file(db_config, sql_path=REPO_ROOT / "database" / "seed.sql")
    added = ensure_default_ministries(db_config)

    print(
        "OK: Seeded database -> "
        f"{DBConfig.from_dict(db_config).label()} "
        f"(new ministries={added})"
    )


if __name__ == "__main__":
    main()
