"""
SQLite schema for the case archive.

One row per generated case. The mentor snapshot and the customer's
problem codes are stored as JSON so a case still renders after the
mentor is edited or removed from teachers.json.
"""

from datetime import datetime
from pathlib import Path
from sqlalchemy import create_engine, Column, String, DateTime, Text, JSON
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()


class Case(Base):
    """Generated case document."""

    __tablename__ = "cases"

    id = Column(String, primary_key=True)  # millisecond timestamp unless supplied
    timestamp = Column(DateTime, nullable=False, default=datetime.now, index=True)
    mentor_name = Column(String, nullable=True)
    mentor = Column(JSON, nullable=False, default=dict)
    direction = Column(String, nullable=False, default="")
    role = Column(String, nullable=False, default="")
    customer_problems = Column(JSON, nullable=False, default=list)
    core_content = Column(Text, nullable=False, default="")
    highlights = Column(Text, nullable=False, default="")
    language_style = Column(String, nullable=False, default="professional")
    content = Column(Text, nullable=False)


def get_engine(db_path: Path) -> Engine:
    return create_engine(f"sqlite:///{db_path}")


def init_database(db_path: Path) -> Engine:
    """Create the database file, its parent directory and the cases table if missing."""
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = get_engine(db_path)
    Base.metadata.create_all(engine)
    return engine


def get_session(db_path: Path):
    """Open a standalone session; the caller closes it."""
    Session = sessionmaker(bind=get_engine(db_path))
    return Session()
