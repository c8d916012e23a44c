"""Data models for watched stocks.

Stored documents use camelCase keys (``currentPrice``, ``dateLastCheck``);
the models expose snake_case attributes with camelCase aliases so a
document loads and dumps without translation tables.
"""

import logging
from typing import Any, Dict, List, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

ObserverTo = Literal["C", "V"]
AnnotationType = Literal["info", "warning", "error"]

# Stored checklist keys, in display order
CHECKLIST_ITEMS = (
    "insider",
    "volume",
    "obv",
    "adx",
    "margemLiquida",
    "dividendYield",
    "magicFormula",
    "distanciaMedia200",
    "upside",
    "plAverage",
    "rent",
)

CHECKLIST_LABELS = {
    "insider": "Insider",
    "volume": "Volume",
    "obv": "OBV",
    "adx": "ADX",
    "margemLiquida": "Margem Líquida",
    "dividendYield": "Dividend Yield",
    "magicFormula": "Magic Formula",
    "distanciaMedia200": "Distância Média 200",
    "upside": "Upside",
    "plAverage": "PL Médio",
    "rent": "Aluguéis",
}


class _DocumentModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class Checklist(_DocumentModel):
    """The 11 qualitative investment criteria for a stock."""

    insider: bool = False
    volume: bool = False
    obv: bool = False
    adx: bool = False
    margem_liquida: bool = False
    dividend_yield: bool = False
    magic_formula: bool = False
    distancia_media200: bool = False
    upside: bool = False
    pl_average: bool = False
    rent: bool = False

    def to_document(self) -> Dict[str, bool]:
        return self.model_dump(by_alias=True)


def resolve_checklist_item(name: str) -> str:
    """
    Map a checklist item name to its model attribute.

    Accepts either the stored key ("margemLiquida") or the attribute
    name ("margem_liquida").

    Raises:
        ValueError: If the name is not a checklist item
    """
    if name in Checklist.model_fields:
        return name
    for attr in Checklist.model_fields:
        if to_camel(attr) == name:
            return attr
    raise ValueError(
        f"Unknown checklist item: {name}. Must be one of: {', '.join(CHECKLIST_ITEMS)}"
    )


class Annotation(_DocumentModel):
    """A dated note on a stock."""

    date: str
    text: str
    type: AnnotationType = "info"


class Stock(_DocumentModel):
    """
    One watched ticker for one CPF holder.

    Attributes:
        id: Document id (the uppercase symbol) for stocks loaded from the store
        symbol: Uppercase ticker symbol
        cpf: Owner's CPF (partition key)
        current_price: Last known quote, 0 until first fetched
        target_price: User-set desired price
        distance_negative: Lower threshold (%) for the 200-day average signal
        distance_positive: Upper threshold (%) for the 200-day average signal
        upside: Derived % gap between target and current price
        media200: 200-day moving average from the quote source
        average_percent200: Derived % deviation of price from media200
        checklist: Qualitative criteria flags
        score: Count of true checklist flags
        observer_to: "C" (buy-watch) or "V" (sell-watch)
        date_last_check: Timestamp of the last manual check
        rent_url: Custom link to the share-rental positions page
        annotations: Notes, newest first
    """

    id: Optional[str] = None
    symbol: str
    cpf: str
    current_price: float = 0
    distance_negative: float = 0
    distance_positive: float = 0
    target_price: Optional[float] = None
    upside: Optional[float] = None
    media200: Optional[float] = None
    average_percent200: Optional[float] = None
    checklist: Checklist = Field(default_factory=Checklist)
    score: int = 0
    observer_to: Optional[ObserverTo] = None
    date_last_check: Optional[str] = None
    rent_url: Optional[str] = None
    annotations: List[Annotation] = Field(default_factory=list)

    # Fundamentals carried through storage as-is
    pl: Optional[float] = None
    pl_average: Optional[float] = None
    pl_target: Optional[float] = None
    pl_target_percent: Optional[float] = None
    pl_target_price: Optional[float] = None
    dividend_yield: Optional[float] = None
    dividend_yield_target: Optional[float] = None
    dividend_yield_target_percent: Optional[float] = None
    dividend_yield_target_price: Optional[float] = None

    @classmethod
    def from_document(cls, doc_id: str, data: Mapping[str, Any]) -> "Stock":
        """
        Rebuild a stock from a stored document.

        The stored checklist is merged over the all-false default so keys
        added after the document was written load as False. A numeric
        stored score is kept as-is; otherwise it is recomputed.
        """
        from .metrics import compute_score

        raw_checklist = data.get("checklist")
        if not isinstance(raw_checklist, Mapping):
            raw_checklist = {}
        checklist = {**Checklist().to_document(), **raw_checklist}

        stored_score = data.get("score")
        if isinstance(stored_score, (int, float)) and not isinstance(stored_score, bool):
            score = int(stored_score)
        else:
            score = compute_score(checklist)

        return cls.model_validate(
            {**data, "id": doc_id, "checklist": checklist, "score": score}
        )

    def to_document(self) -> Dict[str, Any]:
        """Dump to the stored document shape, omitting unset fields."""
        return self.model_dump(by_alias=True, exclude_none=True, exclude={"id"})
