from typing import Final

BASE_URL: Final[str] = "https://ismp.crpt.ru/api/v3"

AUTH_CHALLENGE_ENDPOINT: Final[str] = "/auth/cert/key"
AUTH_TOKEN_ENDPOINT: Final[str] = "/auth/cert/"
CREATE_DOCUMENT_ENDPOINT: Final[str] = "/lk/documents/create"

DOCUMENT_TYPE: Final[str] = "LP_INTRODUCE_GOODS"
DOCUMENT_FORMAT: Final[str] = "MANUAL"
DEFAULT_PRODUCT_GROUP: Final[str] = "shoes"

DEFAULT_TIMEOUT: Final[int] = 30
DEFAULT_REQUEST_LIMIT: Final[int] = 10
DEFAULT_TIME_UNIT: Final[str] = "SECONDS"

USER_AGENT: Final[str] = "crpt-document-client/0.1"

# Optional header fields of an introduce-goods document, dropped from the
# JSON when unset.
OPTIONAL_DOCUMENT_KEYS: Final[tuple[str, ...]] = (
    "doc_id",
    "doc_status",
    "doc_type",
    "import_request",
    "reg_date",
    "reg_number",
)
