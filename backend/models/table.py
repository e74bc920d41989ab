"""Pydantic schemas for the introspected database structure."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ColumnMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    data_type: str                     # dialect-specific, as declared
    is_nullable: bool = True
    is_primary_key: bool = False
    comment: str = ""


class ForeignKeyMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    column: str
    foreign_table: str
    foreign_column: str


class TableMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    table_name: str
    columns: tuple[ColumnMetadata, ...] = ()
    foreign_keys: tuple[ForeignKeyMetadata, ...] = ()
    row_estimate: int = 0              # 0 = unknown

    @field_validator("row_estimate", mode="before")
    @classmethod
    def _clamp_estimate(cls, v):
        if v is None:
            return 0
        return max(int(v), 0)

    def foreign_key_for(self, column_name: str) -> Optional[ForeignKeyMetadata]:
        return next((fk for fk in self.foreign_keys if fk.column == column_name), None)


class SchemaSnapshot(BaseModel):
    """Immutable point-in-time description of the database structure."""

    model_config = ConfigDict(frozen=True)

    tables: tuple[TableMetadata, ...] = ()
    captured_at: Optional[datetime] = None
    dialect: str = ""                  # SQLAlchemy dialect name, e.g. "postgresql"

    @property
    def table_names(self) -> list[str]:
        return [t.table_name for t in self.tables]


class RefreshResponse(BaseModel):
    tables: int
    last_refresh: Optional[datetime] = None
    duration_ms: int = Field(0, ge=0)
