from datetime import datetime, timezone

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from stockdesk.config import settings

connect_args = {}
if settings.DATABASE_URL.startswith("sqlite"):
    connect_args["check_same_thread"] = False

engine = create_engine(settings.DATABASE_URL, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    pass


def utcnow() -> datetime:
    """Naive UTC timestamp with microseconds, used where rows are ordered by creation time."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def import_models() -> None:
    # Import all models so Base.metadata knows about them
    import stockdesk.models.customer  # noqa: F401
    import stockdesk.models.grn  # noqa: F401
    import stockdesk.models.order  # noqa: F401
    import stockdesk.models.product  # noqa: F401
    import stockdesk.models.stock_movement  # noqa: F401
    import stockdesk.models.user  # noqa: F401
    import stockdesk.models.warehouse  # noqa: F401


def init_db():
    import_models()
    Base.metadata.create_all(bind=engine)


def contains_pattern(term: str) -> str:
    """LIKE pattern matching ``term`` literally anywhere, with backslash as the escape character."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"
