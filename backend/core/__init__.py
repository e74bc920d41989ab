from core.safety_gate import validate_select_query  # noqa: F401
from core.result_shaper import clamp_limit, shape_rows  # noqa: F401
from core.schema_cache import SchemaCache, introspect_schema  # noqa: F401
from core.query_executor import execute_bounded_query, export_query  # noqa: F401
from core.response_parser import parse_response  # noqa: F401
from core.query_generator import generate_query, suggest_questions  # noqa: F401
