"""autoformat models"""

from autoformat.models.account import Account
from autoformat.models.base_models import DetailedHealthResponse, ErrorDetail, HealthResponse
from autoformat.models.format import Format, HtmlContext, HtmlFormat, JsonFormat

__all__ = [
    "Account",
    "DetailedHealthResponse",
    "ErrorDetail",
    "Format",
    "HealthResponse",
    "HtmlContext",
    "HtmlFormat",
    "JsonFormat",
]
