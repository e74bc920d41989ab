"""Pydantic schemas for natural-language query generation."""
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class GenerateRequest(BaseModel):
    prompt: str                        # natural language request from the user
    schema_text: str                   # serialized database schema
    max_tokens: Optional[int] = None   # None / <= 0 = provider default
    system: Optional[str] = None       # pre-built instruction; built from schema_text when absent


class GenerateResponse(BaseModel):
    sql: str = ""                      # candidate query, empty when missing is set
    missing: str = ""                  # why the schema cannot answer the request
    tokens: int = 0

    @model_validator(mode="after")
    def _sql_xor_missing(self):
        if self.sql and self.missing:
            raise ValueError("a generation response cannot carry both sql and missing")
        return self

    @property
    def is_missing(self) -> bool:
        return bool(self.missing) and not self.sql


class Completion(BaseModel):
    """Raw text returned by a provider before parsing."""
    text: str
    tokens: int = 0


class GenerateQueryRequest(BaseModel):
    prompt: str = ""
    max_tokens: Optional[int] = None


class GenerateQueryResponse(BaseModel):
    sql: str = ""
    missing: str = ""
    tokens: int = 0
    provider: str


class QuestionCategory(BaseModel):
    domain: str
    description: str = ""
    questions: list[str] = Field(default_factory=list)


class SuggestionsResponse(BaseModel):
    categories: list[QuestionCategory]
    tokens: int = 0
    provider: str
