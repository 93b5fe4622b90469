"""
Initialize the log store schema and seed the default pricing catalog
"""
import sys
import os

# Add parent directory to path to import backend modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.database import Base, engine, SessionLocal
from models.visitor import Visitor
from models.order import Order
from models.searched_gmb import SearchedGmb
from models.pricing import PricingItem
from utils.pricing import seed_default_pricing

TABLES = [Visitor, Order, SearchedGmb, PricingItem]


def init_database():
    """Create all tables, then seed pricing when the catalog is empty"""
    print("Creating tables...")

    try:
        Base.metadata.create_all(bind=engine)
        print("✓ Tables created successfully!")
        print("\nCreated tables:")
        for model in TABLES:
            print(f"  - {model.__tablename__}")
    except Exception as e:
        print(f"✗ Error creating tables: {e}")
        sys.exit(1)

    db = SessionLocal()
    try:
        inserted = seed_default_pricing(db)
        if inserted:
            print(f"✓ Seeded {inserted} default pricing rows")
        else:
            print("Pricing catalog already populated; nothing seeded")
    except Exception as e:
        print(f"✗ Error seeding pricing: {e}")
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    init_database()
