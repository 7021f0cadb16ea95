from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from mentorship.config.settings import settings

DATABASE_URL = settings.DATABASE_URL

# Managed PostgreSQL (Render and similar) requires sslmode=require
connect_args = {}
if DATABASE_URL.startswith("postgresql"):
    connect_args = {"sslmode": "require"}
elif DATABASE_URL.startswith("sqlite"):
    connect_args = {"check_same_thread": False}

engine = create_engine(DATABASE_URL, connect_args=connect_args)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


# Imported wherever a request-scoped DB session is needed
def get_db():
    db: Session = SessionLocal()
    try:
        yield db
    finally:
        db.close()
