from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker

from config import Config


def enable_sqlite_foreign_keys(engine):
    """SQLite ignores FOREIGN KEY clauses unless the pragma is on per connection."""

    @event.listens_for(engine, "connect")
    def _set_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def make_engine(url: str):
    if url.startswith("sqlite"):
        engine = create_engine(
            url,
            connect_args={"check_same_thread": False},
            echo=Config.DB_ECHO,
        )
        enable_sqlite_foreign_keys(engine)
        return engine

    return create_engine(
        url,
        pool_size=Config.DB_POOL_SIZE,
        pool_pre_ping=True,
        echo=Config.DB_ECHO,
    )


engine = make_engine(Config.DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


# Har request ko apna session milta hai, aur har exit path par wapas pool mein jata hai
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
