"""
Memory record and pipeline result types.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class VendorMemoryRecord:
    """This vendor means ``meaning`` when it writes ``pattern``."""
    id: int
    vendor: str
    pattern: str
    meaning: str
    confidence: float
    usage_count: int
    created_at: str
    updated_at: str

    @classmethod
    def from_row(cls, row) -> 'VendorMemoryRecord':
        return cls(**{k: row[k] for k in row.keys()})


@dataclass
class CorrectionMemoryRecord:
    """A recurring fix for a recurring issue. ``vendor=None`` applies globally."""
    id: int
    vendor: Optional[str]
    issue_type: str
    action: str
    confidence: float
    reinforcement_count: int
    created_at: str
    updated_at: str

    @classmethod
    def from_row(cls, row) -> 'CorrectionMemoryRecord':
        return cls(**{k: row[k] for k in row.keys()})


@dataclass
class ResolutionMemoryRecord:
    id: int
    vendor: Optional[str]
    issue_type: str
    resolution: str  # approved | rejected
    confidence: float
    created_at: str
    updated_at: str

    @classmethod
    def from_row(cls, row) -> 'ResolutionMemoryRecord':
        return cls(**{k: row[k] for k in row.keys()})


@dataclass
class AuditTrailEntry:
    id: int
    invoice_id: str
    step: str  # recall | apply | decide | learn
    details: str
    timestamp: str

    @classmethod
    def from_row(cls, row) -> 'AuditTrailEntry':
        return cls(**{k: row[k] for k in row.keys()})


@dataclass
class RecalledMemory:
    """Everything the store knows that is relevant to one invoice."""
    vendor_memory: List[VendorMemoryRecord] = field(default_factory=list)
    correction_memory: List[CorrectionMemoryRecord] = field(default_factory=list)
    resolution_memory: List[ResolutionMemoryRecord] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.vendor_memory or self.correction_memory or self.resolution_memory)


@dataclass
class ApplyResult:
    normalized_invoice: Dict[str, Any]
    proposed_corrections: List[str]
    reasoning: List[str]
    confidence_score: float


@dataclass
class DecisionResult:
    requires_human_review: bool
    reasoning: str
    confidence_score: float
    normalized_invoice: Dict[str, Any]
    proposed_corrections: List[str]


@dataclass
class LearnResult:
    memory_updates: List[str] = field(default_factory=list)
