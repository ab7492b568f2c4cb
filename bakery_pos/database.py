from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from bakery_pos.config import settings


class Base(DeclarativeBase):
    pass


def _use_immediate_transactions(engine: Engine) -> None:
    """SQLite has no SELECT ... FOR UPDATE. Open every transaction with
    BEGIN IMMEDIATE so the write lock is taken before the first read and a
    second terminal blocks until the first commits or rolls back."""

    @event.listens_for(engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def create_db_engine(url: str) -> Engine:
    connect_args = {}
    if url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
        connect_args["timeout"] = settings.SQLITE_BUSY_TIMEOUT

    engine = create_engine(url, connect_args=connect_args)
    if url.startswith("sqlite"):
        _use_immediate_transactions(engine)
    return engine


engine = create_db_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind: Engine | None = None):
    # Import all models so Base.metadata knows about them
    import bakery_pos.models.dessert  # noqa: F401
    import bakery_pos.models.inventory  # noqa: F401
    import bakery_pos.models.inventory_audit_log  # noqa: F401
    import bakery_pos.models.order  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
