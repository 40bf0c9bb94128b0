from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any
from uuid import uuid4

from sqlalchemy.exc import OperationalError
from sqlmodel import Field, Session, SQLModel, create_engine, select

logger = logging.getLogger(__name__)


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


@dataclass
class MazeRecord:
    """A stored maze: its generation parameters plus the finished outputs."""

    id: str
    name: str
    maze_type: str
    size: int
    difficulty: int
    seed: int | None
    created_at: str
    updated_at: str
    session_id: str | None = None
    is_public: bool = True
    configuration: dict[str, Any] = field(default_factory=dict)
    generated_svg: str | None = None
    solution_path: list[list[int]] | None = None


def _newest_first(records: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return sorted(records, key=lambda r: r.get("updated_at", ""), reverse=True)


class JsonMazeRepository:
    def __init__(self, path: str | Path, schema_version: int = 1):
        self.path = Path(path)
        self.schema_version = schema_version
        self._ensure_store()

    def _empty_doc(self) -> dict[str, Any]:
        return {"schema_version": self.schema_version, "mazes": {}}

    def _ensure_store(self) -> None:
        if self.path.exists():
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._write_doc(self._empty_doc())

    def _read_doc(self) -> dict[str, Any]:
        if not self.path.exists():
            return self._empty_doc()
        raw = self.path.read_text(encoding="utf-8").strip()
        if not raw:
            return self._empty_doc()
        doc = json.loads(raw)
        doc.setdefault("schema_version", self.schema_version)
        doc.setdefault("mazes", {})
        return doc

    def _write_doc(self, doc: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(doc, indent=2, sort_keys=True), encoding="utf-8")
        tmp_path.replace(self.path)

    def _save_doc(self, doc: dict[str, Any]) -> None:
        doc["schema_version"] = self.schema_version
        self._write_doc(doc)

    def create_maze(
        self,
        *,
        name: str,
        maze_type: str,
        size: int,
        difficulty: int,
        seed: int | None,
        configuration: dict[str, Any] | None = None,
        session_id: str | None = None,
        is_public: bool = True,
        generated_svg: str | None = None,
        solution_path: list[list[int]] | None = None,
    ) -> dict[str, Any]:
        doc = self._read_doc()
        now = _utc_now_iso()
        record = asdict(
            MazeRecord(
                id=str(uuid4()),
                name=name,
                maze_type=maze_type,
                size=size,
                difficulty=difficulty,
                seed=seed,
                created_at=now,
                updated_at=now,
                session_id=session_id,
                is_public=is_public,
                configuration=dict(configuration or {}),
                generated_svg=generated_svg,
                solution_path=solution_path,
            )
        )
        doc["mazes"][record["id"]] = record
        self._save_doc(doc)
        return record

    def get_maze(self, maze_id: str) -> dict[str, Any] | None:
        doc = self._read_doc()
        return doc["mazes"].get(maze_id)

    def save_maze(self, record: dict[str, Any]) -> dict[str, Any]:
        doc = self._read_doc()
        if record["id"] not in doc["mazes"]:
            raise KeyError(f"Unknown maze_id: {record['id']}")
        updated = {**record, "updated_at": _utc_now_iso()}
        doc["mazes"][record["id"]] = updated
        self._save_doc(doc)
        return updated

    def delete_maze(self, maze_id: str) -> bool:
        doc = self._read_doc()
        if doc["mazes"].pop(maze_id, None) is None:
            return False
        self._save_doc(doc)
        return True

    def find_by_session(self, session_id: str) -> list[dict[str, Any]]:
        doc = self._read_doc()
        return _newest_first([m for m in doc["mazes"].values() if m.get("session_id") == session_id])

    def find_public(self, limit: int = 20) -> list[dict[str, Any]]:
        doc = self._read_doc()
        return _newest_first([m for m in doc["mazes"].values() if m.get("is_public")])[:limit]


# ---------------------------------------------------------------------------
# SQLModel table for SqliteMazeRepository
# ---------------------------------------------------------------------------


class MazeModel(SQLModel, table=True):
    __tablename__ = "user_mazes"
    id: str = Field(primary_key=True)
    session_id: str | None = Field(default=None, index=True)
    is_public: bool = True
    name: str
    maze_type: str = "ORTHOGONAL"
    size: int = 10
    difficulty: int = 3
    seed: int | None = None
    configuration_json: str = Field(default="{}", sa_column_kwargs={"name": "configuration"})
    generated_svg: str | None = None
    solution_path_json: str | None = Field(default=None, sa_column_kwargs={"name": "solution_path"})
    created_at: str
    updated_at: str


def _model_to_record(row: MazeModel) -> dict[str, Any]:
    return {
        "id": row.id,
        "name": row.name,
        "maze_type": row.maze_type,
        "size": row.size,
        "difficulty": row.difficulty,
        "seed": row.seed,
        "created_at": row.created_at,
        "updated_at": row.updated_at,
        "session_id": row.session_id,
        "is_public": row.is_public,
        "configuration": json.loads(row.configuration_json) if row.configuration_json else {},
        "generated_svg": row.generated_svg,
        "solution_path": json.loads(row.solution_path_json) if row.solution_path_json else None,
    }


class SqliteMazeRepository:
    """SQLite-backed repository using SQLModel. Same interface as JsonMazeRepository."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        url = f"sqlite:///{self.path}"
        self.engine = create_engine(url, connect_args={"check_same_thread": False})
        SQLModel.metadata.create_all(self.engine)
        self._verify_schema()

    def _verify_schema(self) -> None:
        """Drop and recreate tables if the existing schema is incompatible."""
        try:
            with Session(self.engine) as session:
                session.exec(select(MazeModel).limit(1)).all()
        except OperationalError:
            logger.warning(f"Incompatible maze schema in {self.path}; recreating tables")
            SQLModel.metadata.drop_all(self.engine)
            SQLModel.metadata.create_all(self.engine)

    def create_maze(
        self,
        *,
        name: str,
        maze_type: str,
        size: int,
        difficulty: int,
        seed: int | None,
        configuration: dict[str, Any] | None = None,
        session_id: str | None = None,
        is_public: bool = True,
        generated_svg: str | None = None,
        solution_path: list[list[int]] | None = None,
    ) -> dict[str, Any]:
        now = _utc_now_iso()
        with Session(self.engine) as session:
            row = MazeModel(
                id=str(uuid4()),
                session_id=session_id,
                is_public=is_public,
                name=name,
                maze_type=maze_type,
                size=size,
                difficulty=difficulty,
                seed=seed,
                configuration_json=json.dumps(configuration or {}),
                generated_svg=generated_svg,
                solution_path_json=json.dumps(solution_path) if solution_path is not None else None,
                created_at=now,
                updated_at=now,
            )
            session.add(row)
            session.commit()
            session.refresh(row)
            return _model_to_record(row)

    def get_maze(self, maze_id: str) -> dict[str, Any] | None:
        with Session(self.engine) as session:
            row = session.get(MazeModel, maze_id)
            if row is None:
                return None
            return _model_to_record(row)

    def save_maze(self, record: dict[str, Any]) -> dict[str, Any]:
        with Session(self.engine) as session:
            row = session.get(MazeModel, record["id"])
            if row is None:
                raise KeyError(f"Unknown maze_id: {record['id']}")
            row.name = record["name"]
            row.session_id = record.get("session_id")
            row.is_public = record.get("is_public", True)
            row.maze_type = record["maze_type"]
            row.size = record["size"]
            row.difficulty = record["difficulty"]
            row.seed = record.get("seed")
            row.configuration_json = json.dumps(record.get("configuration") or {})
            row.generated_svg = record.get("generated_svg")
            solution = record.get("solution_path")
            row.solution_path_json = json.dumps(solution) if solution is not None else None
            row.updated_at = _utc_now_iso()
            session.add(row)
            session.commit()
            session.refresh(row)
            return _model_to_record(row)

    def delete_maze(self, maze_id: str) -> bool:
        with Session(self.engine) as session:
            row = session.get(MazeModel, maze_id)
            if row is None:
                return False
            session.delete(row)
            session.commit()
        return True

    def find_by_session(self, session_id: str) -> list[dict[str, Any]]:
        with Session(self.engine) as session:
            stmt = select(MazeModel).where(MazeModel.session_id == session_id)
            rows = session.exec(stmt).all()
            return _newest_first([_model_to_record(r) for r in rows])

    def find_public(self, limit: int = 20) -> list[dict[str, Any]]:
        with Session(self.engine) as session:
            stmt = select(MazeModel).where(MazeModel.is_public == True)  # noqa: E712
            rows = session.exec(stmt).all()
            return _newest_first([_model_to_record(r) for r in rows])[:limit]

    def close(self) -> None:
        self.engine.dispose()


def open_repo(path: str | Path):
    """Return SqliteMazeRepository for .db paths, JsonMazeRepository otherwise."""
    path = Path(path)
    if path.suffix == ".db":
        return SqliteMazeRepository(path)
    return JsonMazeRepository(path)
