# create_tables.py
from sqlalchemy import text

from mentorship.database import Base, engine, SessionLocal
from mentorship.models import Admin, Task, User  # noqa: F401  (registers the tables)
import os

DEFAULT_ADMIN = {
    "admin_id": os.getenv("DEFAULT_ADMIN_ID", "admin001"),
    "fullname": os.getenv("DEFAULT_ADMIN_NAME", "Program Admin"),
    "domain": "All",
}


def create_tables(drop_existing: bool = False):
    """Create all tables"""
    try:
        if drop_existing:
            Base.metadata.drop_all(bind=engine)
            print("🗑️  Dropped existing tables")

        Base.metadata.create_all(bind=engine)
        print("✅ All tables created successfully!")

        create_default_admin()

    except Exception as e:
        print(f"❌ Error creating tables: {e}")


def create_default_admin():
    """Create a default admin if none exists"""
    session = SessionLocal()
    try:
        admin_count = session.execute(text("SELECT COUNT(*) FROM admins")).scalar()
        if admin_count == 0:
            session.add(Admin(**DEFAULT_ADMIN))
            session.commit()
            print("✅ Default admin created!")
            print(f"   Username: {DEFAULT_ADMIN['fullname']}")
            print(f"   Password: {DEFAULT_ADMIN['admin_id']}")
        else:
            print("ℹ️  Admin already exists")
    except Exception as e:
        session.rollback()
        print(f"❌ Error creating default admin: {e}")
    finally:
        session.close()


if __name__ == "__main__":
    create_tables(drop_existing=os.getenv("DROP_EXISTING", "false").lower() == "true")
