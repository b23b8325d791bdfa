"""
Pydantic schemas package.
"""

from poprev.schemas.common import (
    ApiModel,
    SortOrder,
    Pagination,
    Envelope,
    ListEnvelope,
    PageEnvelope,
    MessageResponse,
)
from poprev.schemas.response import (
    Reference,
    CategoryRef,
    ResponseCreate,
    ResponseUpdate,
    ResponseSummary,
    ResponseDetail,
    PdfExport,
    PdfExportResponse,
)
from poprev.schemas.category import (
    CategoryBase,
    CategoryCreate,
    CategoryUpdate,
    CategorySummary,
    CategoryRead,
    CategoryResponsesPage,
)
from poprev.schemas.auth import (
    RegisterRequest,
    LoginRequest,
    ProfileUpdate,
    ChangePasswordRequest,
    UserRead,
    UserCredentials,
    AuthPayload,
)

__all__ = [
    "ApiModel",
    "SortOrder",
    "Pagination",
    "Envelope",
    "ListEnvelope",
    "PageEnvelope",
    "MessageResponse",
    "Reference",
    "CategoryRef",
    "ResponseCreate",
    "ResponseUpdate",
    "ResponseSummary",
    "ResponseDetail",
    "PdfExport",
    "PdfExportResponse",
    "CategoryBase",
    "CategoryCreate",
    "CategoryUpdate",
    "CategorySummary",
    "CategoryRead",
    "CategoryResponsesPage",
    "RegisterRequest",
    "LoginRequest",
    "ProfileUpdate",
    "ChangePasswordRequest",
    "UserRead",
    "UserCredentials",
    "AuthPayload",
]
