"""Database engine creation and initialization."""

from pathlib import Path

from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine

# Import all models so SQLModel registers them
import ituss.models  # noqa: F401


def create_db_engine(db_path: Path, echo: bool = False) -> Engine:
    return create_engine(
        f"sqlite:///{db_path}",
        echo=echo,
        connect_args={"check_same_thread": False},
    )


def init_db(engine: Engine) -> None:
    """Create all tables and enable WAL mode."""
    SQLModel.metadata.create_all(engine)

    # WAL lets readers proceed while a signup or device write commits
    with engine.connect() as conn:
        conn.exec_driver_sql("PRAGMA journal_mode=WAL")
        conn.exec_driver_sql("PRAGMA synchronous=NORMAL")
        conn.commit()
