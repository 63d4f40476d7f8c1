from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from launchpad.config import settings

engine = create_engine(settings.DATABASE_URL, pool_size=settings.DB_POOL_SIZE, pool_pre_ping=True)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
