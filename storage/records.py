"""
Persisted property record: descriptive fields + the deal parameters stored verbatim.

Two stored shapes are accepted:
  1. nested: {"id", "last_modified", "city", ..., "content": {deal fields}}
  2. flat camelCase, as written by the earlier web app: descriptive and deal
     fields side by side ({"id", "lastModified", "city", "bidValue", ...})
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Literal, Mapping

from pydantic import BaseModel, Field, field_serializer, field_validator, model_validator

from analysis.market import MarketComparable, empty_comparables
from core.schema import AuctionType, DealParameters
from core.utils import to_number
from data_prep.normalize import is_deal_key, normalize_deal_input

logger = logging.getLogger(__name__)

# descriptive keys of the flat form
_FLAT_KEYS: Dict[str, str] = {
    "lastModified": "last_modified",
    "auctionLink": "auction_link",
    "propertyOrigin": "property_origin",
    "auctionType": "auction_type",
    "marketResearchItems": "comparables",
}

# present in flat rows, not modeled here
_UNMODELED_KEYS = frozenset({"images"})


class PropertyDocument(BaseModel):
    id: str
    name: str
    link: str = ""
    type: Literal["pdf", "image", "link", "other"] = "other"


class PropertyRecord(BaseModel):
    id: str = ""
    last_modified: int = 0  # epoch milliseconds

    city: str = ""
    address: str = ""
    auction_link: str = ""
    property_origin: str = "Banco"
    auction_type: AuctionType = AuctionType.EXTRAJUDICIAL_BANKS

    comparables: List[MarketComparable] = Field(default_factory=empty_comparables)
    documents: List[PropertyDocument] = Field(default_factory=list)

    content: DealParameters = Field(default_factory=DealParameters)

    @model_validator(mode="before")
    @classmethod
    def _unflatten(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        if "content" in data:
            record = dict(data)
        else:
            record = {_FLAT_KEYS.get(k, k): v for k, v in data.items() if not is_deal_key(k)}
            if any(is_deal_key(k) for k in data):
                record["content"] = normalize_deal_input(data)

        unknown = set(record) - set(cls.model_fields) - _UNMODELED_KEYS
        if unknown:
            logger.warning("Record %s: ignoring unknown keys %s", record.get("id", "?"), sorted(unknown))
        return record

    @field_validator("content", mode="before")
    @classmethod
    def _normalize_content(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return normalize_deal_input(value)
        return value

    @field_serializer("content")
    def _serialize_content(self, value: DealParameters) -> Dict[str, Any]:
        return value.to_dict()

    def with_comparables(self, rows: Iterable[Mapping[str, Any]]) -> "PropertyRecord":
        """Copy with comparables rebuilt from table rows; blank cells become 0 / ""."""
        comparables = [
            MarketComparable(
                id=int(row["id"]),
                price=to_number(row.get("price")),
                link=row.get("link") if isinstance(row.get("link"), str) else "",
                description=row.get("description") if isinstance(row.get("description"), str) else "",
            )
            for row in rows
        ]
        return self.model_copy(update={"comparables": comparables})

    @property
    def display_name(self) -> str:
        parts = [p for p in (self.address, self.city) if p]
        return " - ".join(parts) if parts else (self.id or "Novo imóvel")
