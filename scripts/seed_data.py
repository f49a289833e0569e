"""
Seed initial data: the organisation row and, optionally, a few demo members.
"""
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from bank_portal.core.config import settings
from bank_portal.core.errors import ConflictError
from bank_portal.db.base import SessionLocal
from bank_portal.services.member import create_member
from bank_portal.services.organisation import get_organisation
from decimal import Decimal


def seed_organisation(db):
    """Seed the organisation aggregate."""
    print("Seeding organisation...")
    organisation = get_organisation(db)
    db.commit()
    print(f"Organisation '{organisation.name}' ready")


def seed_demo_members(db):
    """Seed demo members. Existing account numbers are skipped."""
    print("Seeding demo members...")
    members = [
        {"name": "ravi kumar", "fathers_name": "mohan kumar", "mobile": "9876543210", "account_number": "ACC-001", "initial_amount": Decimal("5000.00")},
        {"name": "sita devi", "fathers_name": "ram prasad", "mobile": "9876543211", "account_number": "ACC-002", "initial_amount": Decimal("3000.00")},
        {"name": "arjun singh", "fathers_name": "balwant singh", "mobile": "9876543212", "account_number": "ACC-003", "initial_amount": Decimal("0.00")},
    ]

    for member_data in members:
        try:
            create_member(db, development_fee=settings.DEVELOPMENT_FEE, **member_data)
            print(f"  Created {member_data['account_number']}")
        except ConflictError:
            print(f"  Skipped {member_data['account_number']} (already exists)")

    print("Demo members seeded")


if __name__ == "__main__":
    db = SessionLocal()
    try:
        seed_organisation(db)
        if "--demo" in sys.argv[1:]:
            seed_demo_members(db)
        print("\nSeed data complete!")
    except Exception as e:
        db.rollback()
        print(f"Error seeding data: {e}")
        raise
    finally:
        db.close()
