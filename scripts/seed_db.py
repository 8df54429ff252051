from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.reimbursement_system.reimbursement_system.common.validators import normalize_email
from src.reimbursement_system.reimbursement_system.database.bootstrap import apply_seed_sql, ensure_admin_user


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    seed_path = REPO_ROOT / "database" / "seed.sql"
    apply_seed_sql(db_config, seed_path=seed_path)
    admin_email = normalize_email(settings.ADMIN_EMAIL)
    if not ensure_admin_user(db_config, name=settings.ADMIN_NAME, email=admin_email, password=settings.ADMIN_PASSWORD):
        print(f"WARN: {admin_email} is linked to an employee; admin account not created")

    print(
        "OK: Seeded database -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')} "
        f"(admin={admin_email})"
    )


if __name__ == "__main__":
    main()
