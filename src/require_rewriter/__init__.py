from require_rewriter.core.errors import RequireConversionError, SourceParseError
from require_rewriter.core.transform import RequireTransformer
from require_rewriter.models import DynamicOptions, Options

__all__ = [
    "DynamicOptions",
    "Options",
    "RequireConversionError",
    "RequireTransformer",
    "SourceParseError",
]
