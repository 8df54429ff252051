"""Example: drive the bill workflow through the service layer (no Flask).

Signs in as the configured admin, lists every bill newest first and prints
the overall totals.
"""

import importlib

from config import get_settings_module

from src.reimbursement_system.reimbursement_system.container import build_container


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)

    admin = container.auth_service.authenticate(settings.ADMIN_EMAIL, settings.ADMIN_PASSWORD)
    listing = container.bill_service.list_bills(admin)
    for bill in listing.bills:
        print(f"#{bill.bill_id} {bill.submitted_by:<20} {bill.bill_type.value:<7} {bill.amount:>10} {bill.status.value}")
    print(f"submitted={listing.total_submitted} approved={listing.total_approved}")


if __name__ == "__main__":
    main()
