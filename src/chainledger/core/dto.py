from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


RawTx = Dict[str, Any]


@dataclass(frozen=True)
class RawPage:
    items: List[Optional[RawTx]] = field(default_factory=list)
    next_cursor: Optional[str] = None      # None = no more pages
