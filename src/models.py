"""
Value objects for the introduce-goods document and the auth exchange.

Field names match the JSON keys the remote API expects, so to_dict() is a
field-for-field mapping and from_dict() its inverse.
"""

from dataclasses import dataclass, field, fields
from typing import Any, Dict, Optional, Tuple

from constants import OPTIONAL_DOCUMENT_KEYS
from exceptions import SerializationError


def _require_mapping(data: Any, what: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise SerializationError(f"Expected a JSON object for {what}, got {type(data).__name__}")
    return data


def _pick(data: Dict[str, Any], cls, what: str) -> Dict[str, Any]:
    known = {f.name for f in fields(cls)}
    unknown = set(data) - known
    if unknown:
        raise SerializationError(f"Unknown {what} fields: {', '.join(sorted(unknown))}")
    return {k: v for k, v in data.items() if k in known}


@dataclass(frozen=True)
class Item:
    certificate_document: Optional[str] = None
    certificate_document_date: Optional[str] = None
    certificate_document_number: Optional[str] = None
    owner_inn: Optional[str] = None
    producer_inn: Optional[str] = None
    production_date: Optional[str] = None
    tnved_code: Optional[str] = None
    uit_code: Optional[str] = None
    uitu_code: Optional[str] = None

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, data: Any) -> "Item":
        return cls(**_pick(_require_mapping(data, "product item"), cls, "product item"))


@dataclass(frozen=True)
class Document:
    """An introduce-goods document: participants, production info and items.

    `products` keeps the caller's order; a list passed in is frozen to a tuple.
    """

    participant_inn: Optional[str] = None
    producer_inn: Optional[str] = None
    owner_inn: Optional[str] = None
    production_date: Optional[str] = None
    production_type: Optional[str] = None
    products: Tuple[Item, ...] = field(default_factory=tuple)
    doc_id: Optional[str] = None
    doc_status: Optional[str] = None
    doc_type: Optional[str] = None
    import_request: Optional[bool] = None
    reg_date: Optional[str] = None
    reg_number: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "products", tuple(self.products))

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name == "products":
                out[f.name] = [item.to_dict() for item in value]
            elif f.name in OPTIONAL_DOCUMENT_KEYS and value is None:
                continue
            else:
                out[f.name] = value
        return out

    @classmethod
    def from_dict(cls, data: Any) -> "Document":
        values = _pick(_require_mapping(data, "document"), cls, "document")
        products = values.pop("products", None)
        if products is None:
            products = []
        elif not isinstance(products, list):
            raise SerializationError("Document 'products' must be a JSON array")
        return cls(products=tuple(Item.from_dict(p) for p in products), **values)


@dataclass(frozen=True)
class AuthChallenge:
    uuid: str
    data: str

    @classmethod
    def from_dict(cls, data: Any) -> "AuthChallenge":
        payload = _require_mapping(data, "auth challenge")
        try:
            return cls(uuid=str(payload["uuid"]), data=str(payload["data"]))
        except KeyError as e:
            raise SerializationError(f"Auth challenge response is missing {e.args[0]!r}") from None
