# File: scripts/seed_accounts.py
"""
Create the demo personnel, directors and ICT admin, then print a bearer
token for each active account (login is handled outside this service).
"""
import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from datravel.db.database import SessionLocal
from datravel.core.security import create_access_token
from datravel.models.account import Director, IctAdmin, Personnel, Role

PERSONNEL = [
    {"username": "user0001", "first_name": "Juan", "middle_name": "P", "last_name": "Dela Cruz",
     "position": "Agricultural Technologist", "department": "Field Operations"},
    {"username": "user0002", "first_name": "Liza", "last_name": "Mendoza",
     "position": "Administrative Officer II", "department": "Administrative Division"},
]

DIRECTORS = [
    {"username": "director1", "first_name": "Maria", "last_name": "Santos",
     "position": "Director III", "department": "Department of Agriculture",
     "director_level": "Regional Director", "is_active": True},
    {"username": "director2", "first_name": "Jose", "last_name": "Reyes",
     "position": "OIC - Regional Executive Director", "department": None,
     "director_level": "Assistant Director", "is_active": True},
    {"username": "director_inactive", "first_name": "Ana", "last_name": "Dela Cruz",
     "position": "Director IV", "department": "Department of Agriculture",
     "director_level": "Head Director", "is_active": False,
     "reason_for_deactivation": "Retired"},
]

ICT_ADMINS = [
    {"username": "admin@admin.com", "first_name": "ICT", "last_name": "Administrator"},
]


def _upsert(db, model, rows):
    accounts = []
    for row in rows:
        account = db.query(model).filter(model.username == row["username"]).first()
        if account is None:
            account = model(**row)
            db.add(account)
            print(f"✅ Created {model.__tablename__}: {row['username']}")
        else:
            for key, value in row.items():
                setattr(account, key, value)
            print(f"⚠️  {model.__tablename__} {row['username']} already exists, updated")
        accounts.append(account)
    return accounts


def seed_accounts():
    db = SessionLocal()
    try:
        seeded = {
            Role.PERSONNEL: _upsert(db, Personnel, PERSONNEL),
            Role.DIRECTOR: _upsert(db, Director, DIRECTORS),
            Role.ADMIN: _upsert(db, IctAdmin, ICT_ADMINS),
        }
        db.commit()

        print()
        print("📋 BEARER TOKENS:")
        for role, accounts in seeded.items():
            for account in accounts:
                db.refresh(account)
                if not account.is_active:
                    print(f"   🚫 {role.value:<9} {account.username} (inactive, no token)")
                    continue
                token = create_access_token(account.id, role.value)
                print(f"   🔑 {role.value:<9} {account.username} (id {account.id})")
                print(f"      {token}")
        return True

    except Exception as e:
        print(f"❌ Failed to seed accounts: {e}")
        db.rollback()
        return False
    finally:
        db.close()


if __name__ == "__main__":
    print("🔧 SEEDING TRAVEL ORDER ACCOUNTS")
    sys.exit(0 if seed_accounts() else 1)
