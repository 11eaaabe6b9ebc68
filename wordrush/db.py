# Simple SQLite data layer using SQLAlchemy: a key/value table of round documents.

from __future__ import annotations
from sqlalchemy import create_engine, Column, BigInteger, String, Text, delete
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.sql import select
from pathlib import Path
from typing import Optional, List
from .config import DB_PATH
from .models import RoundDocument
from .store import GameStore

Base = declarative_base()

class RoundRow(Base):
    __tablename__ = "rounds"
    code = Column(String(16), primary_key=True)
    created_at = Column(BigInteger, index=True, nullable=False)  # epoch ms, copied out for the sweep
    document = Column(Text, nullable=False)

def sqlite_url(path: Path) -> str:
    return f"sqlite:///{path}"

class SqlGameStore(GameStore):
    def __init__(self, url: Optional[str] = None):
        if url is None:
            DB_PATH.parent.mkdir(parents=True, exist_ok=True)
            url = sqlite_url(DB_PATH)
        self._engine = create_engine(url, echo=False, future=True)
        self.SessionLocal = sessionmaker(bind=self._engine, autoflush=False, autocommit=False, future=True)
        Base.metadata.create_all(self._engine)

    def get(self, code: str) -> Optional[RoundDocument]:
        with self.SessionLocal() as s:
            row = s.execute(select(RoundRow).where(RoundRow.code == code)).scalar_one_or_none()
            if row is None:
                return None
            return RoundDocument.model_validate_json(row.document)

    def put(self, code: str, doc: RoundDocument) -> None:
        with self.SessionLocal() as s:
            # Upsert-like behavior
            row = s.get(RoundRow, code)
            if row is None:
                row = RoundRow(code=code, created_at=doc.created_at, document="")
                s.add(row)
            row.created_at = doc.created_at
            row.document = doc.model_dump_json(by_alias=True)
            s.commit()

    def delete(self, code: str) -> bool:
        with self.SessionLocal() as s:
            result = s.execute(delete(RoundRow).where(RoundRow.code == code))
            s.commit()
            return result.rowcount > 0

    def expired_codes(self, cutoff_ms: int) -> List[str]:
        with self.SessionLocal() as s:
            rows = s.execute(
                select(RoundRow.code).where(RoundRow.created_at < cutoff_ms).order_by(RoundRow.code)
            ).scalars().all()
        return list(rows)

    def dispose(self) -> None:
        self._engine.dispose()
