from sqlalchemy import create_engine               # SQLAlchemy engine factory
from sqlalchemy.orm import declarative_base, sessionmaker

from config.settings import settings               # ✅ env-driven settings

# ✅ build the engine from the configured DB URL
engine = create_engine(settings.DATABASE_URL, pool_pre_ping=True)

# ✅ session factory used by every request
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# ✅ declarative base for all models
Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
