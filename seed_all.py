#!/usr/bin/env python3
"""
Seed the database with demo mentors, mentees and tasks
Run create_tables.py first
"""

from mentorship.database import Base, SessionLocal, engine
from mentorship.errors import MentorshipError
from mentorship.models import Admin, Task, User
from mentorship.services.blob_store import BlobStore
from mentorship.services.task_service import TaskService
from mentorship.config.settings import settings
from mentorship.utils.security import hash_password
from demo_users import DEMO_ADMINS, DEMO_USERS, DEMO_TASKS


def seed_demo_admins(session) -> int:
    created = 0
    for admin_data in DEMO_ADMINS:
        if session.query(Admin).filter(Admin.admin_id == admin_data["admin_id"]).first():
            print(f"[SKIP] Admin {admin_data['admin_id']} already exists, skipping...")
            continue
        session.add(Admin(**admin_data))
        created += 1
        print(f"[SUCCESS] Created admin: {admin_data['fullname']} ({admin_data['domain']})")
    session.commit()
    return created


def seed_demo_users(session) -> int:
    created = 0
    for user_data in DEMO_USERS:
        if session.query(User).filter(User.user_id == user_data["user_id"]).first():
            print(f"[SKIP] User {user_data['user_id']} already exists, skipping...")
            continue
        session.add(User(
            user_id=user_data["user_id"],
            fullname=user_data["fullname"],
            domain=user_data["domain"],
            mentor=user_data["mentor"],
            password_hash=hash_password(user_data["password"]),
        ))
        created += 1
        print(f"[SUCCESS] Created user: {user_data['fullname']} ({user_data['domain']})")
    session.commit()
    return created


def seed_demo_tasks(session) -> int:
    blob_store = BlobStore(settings.UPLOAD_DIR, settings.MAX_FILE_SIZE)
    blob_store.open()
    service = TaskService(session, blob_store)

    created = 0
    for task_data in DEMO_TASKS:
        existing = session.query(Task).filter(
            Task.owner_user_id == task_data["user_id"],
            Task.title == task_data["title"],
        ).first()
        if existing:
            print(f"[SKIP] Task '{task_data['title']}' already exists, skipping...")
            continue
        try:
            service.create_task(
                owner_user_id=task_data["user_id"],
                title=task_data["title"],
                description=task_data["description"],
                resources=task_data["resources"],
                created_by=task_data["admin_id"],
            )
            created += 1
            print(f"[SUCCESS] Assigned '{task_data['title']}' to {task_data['user_id']}")
        except MentorshipError as e:
            print(f"[ERROR] Could not create task '{task_data['title']}': {e.message}")
    return created


def main():
    print("=" * 60)
    print("🚀 Seeding demo data")
    print("=" * 60)

    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        admins = seed_demo_admins(session)
        users = seed_demo_users(session)
        tasks = seed_demo_tasks(session)
        print(f"\n[SUCCESS] Created {admins} admins, {users} users, {tasks} tasks")
    except Exception as e:
        session.rollback()
        print(f"[ERROR] Seeding failed: {e}")
        raise
    finally:
        session.close()


if __name__ == "__main__":
    main()
