# storefront/data/database.py
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from storefront.utils.settings import DATABASE_URL, DB_ECHO, DB_STATEMENT_TIMEOUT_MS

Base = declarative_base()


def _enable_sqlite_write_locks(engine: Engine) -> None:
    """
    sqlite ignoruje SELECT ... FOR UPDATE, wiec kazda transakcja startuje
    jako BEGIN IMMEDIATE - pisarze sa serializowani tak jak przy row lockach
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # wylacz wlasne BEGIN drivera pysqlite
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def make_engine(url: str = DATABASE_URL, echo: bool = DB_ECHO) -> Engine:
    if url.startswith("sqlite"):
        engine = create_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False, "timeout": 30},
        )
        _enable_sqlite_write_locks(engine)
        return engine

    connect_args = {}
    if url.startswith("postgresql"):
        # timeout zapytan - transakcja po timeoucie jest wycofywana w calosci
        connect_args["options"] = f"-c statement_timeout={DB_STATEMENT_TIMEOUT_MS}"

    return create_engine(url, echo=echo, pool_pre_ping=True, connect_args=connect_args)


engine = make_engine()
SessionLocal = sessionmaker(bind=engine, autoflush=False)


def init_db(bind: Engine = engine) -> None:
    # rejestracja modeli w Base.metadata
    import storefront.data.models  # noqa: F401

    Base.metadata.create_all(bind=bind)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
