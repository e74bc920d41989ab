from models.table import ColumnMetadata, ForeignKeyMetadata, TableMetadata, SchemaSnapshot  # noqa: F401
from models.query import QueryRequest, ExportRequest, QueryResult, ErrorResponse  # noqa: F401
from models.generation import GenerateRequest, GenerateResponse, QuestionCategory  # noqa: F401
