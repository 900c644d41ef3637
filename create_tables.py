#!/usr/bin/env python3
"""
Create database tables directly using SQLAlchemy
"""
import sys
sys.path.append('.')

from datravel.db.database import Base, engine
import datravel.models  # noqa: F401  registers every model on Base.metadata

def create_tables():
    """Create all database tables"""
    try:
        print("Creating travel order tables...")
        Base.metadata.create_all(bind=engine)
        print("Tables created successfully!")
        return True

    except Exception as e:
        print(f"Error creating tables: {e}")
        return False

if __name__ == "__main__":
    success = create_tables()
    sys.exit(0 if success else 1)
