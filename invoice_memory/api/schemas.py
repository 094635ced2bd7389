"""
Request/response models for the invoice memory pipeline.

JSON uses the camelCase keys of the upstream extraction and review tools;
Python code uses the snake_case attribute names.
"""

from pydantic import BaseModel, Field, field_validator, ConfigDict
from typing import Optional, List, Dict, Any
from datetime import datetime


class Invoice(BaseModel):
    """Structured invoice as delivered by the extraction step."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    invoice_id: str = Field(alias="invoiceId")
    vendor: str = ""
    fields: Dict[str, Any] = Field(default_factory=dict)
    confidence: float = 0.0
    raw_text: str = Field(default="", alias="rawText")

    @field_validator('invoice_id')
    @classmethod
    def invoice_id_must_not_be_empty(cls, v):
        if not v.strip():
            raise ValueError('invoiceId cannot be empty')
        return v

    def issue_types(self) -> List[str]:
        """Issue-type tags from ``fields["issueTypes"]``; empty when absent or malformed."""
        value = self.fields.get("issueTypes")
        if not isinstance(value, list):
            return []
        return [tag for tag in value if isinstance(tag, str)]


class FieldCorrection(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    field: str
    from_value: Any = Field(default=None, alias="from")
    to: Any = None
    reason: str = ""


class HumanFeedback(BaseModel):
    """Reviewer corrections plus the final approve/reject decision."""
    model_config = ConfigDict(populate_by_name=True)

    corrections: List[FieldCorrection] = Field(default_factory=list)
    final_decision: str = Field(alias="finalDecision")

    @field_validator('final_decision')
    @classmethod
    def final_decision_must_be_valid(cls, v):
        valid_decisions = ['approved', 'rejected']
        if v not in valid_decisions:
            raise ValueError(f'finalDecision must be one of: {valid_decisions}')
        return v


class AuditTrailItem(BaseModel):
    step: str
    timestamp: str
    details: str


class AgentOutput(BaseModel):
    """Consumer-facing result for one invoice."""
    model_config = ConfigDict(populate_by_name=True)

    invoice_id: str = Field(alias="invoiceId")
    normalized_invoice: Dict[str, Any] = Field(alias="normalizedInvoice")
    proposed_corrections: List[str] = Field(alias="proposedCorrections")
    requires_human_review: bool = Field(alias="requiresHumanReview")
    reasoning: str
    confidence_score: float = Field(alias="confidenceScore")
    memory_updates: List[str] = Field(default_factory=list, alias="memoryUpdates")
    audit_trail: List[AuditTrailItem] = Field(default_factory=list, alias="auditTrail")


class VendorMemoryResponse(BaseModel):
    id: int
    vendor: str
    pattern: str
    meaning: str
    confidence: float
    usage_count: int
    created_at: str
    updated_at: str


class HealthResponse(BaseModel):
    status: str
    version: str
    db_health: bool


class ErrorResponse(BaseModel):
    error_type: str
    message: str
    timestamp: datetime = None
    details: Optional[Dict[str, Any]] = None

    def __init__(self, **data):
        super().__init__(timestamp=datetime.now(), **data)
