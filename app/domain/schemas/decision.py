from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import List, Literal, Optional, Union


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case in Python"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PrimaryCommandResponse(CamelModel):
    type: str
    text: str
    amount_cents: Optional[int] = None
    target: Optional[str] = None
    date: Optional[str] = None


class NextActionResponse(CamelModel):
    text: str
    url: str


class DecisionContextResponse(CamelModel):
    cash_available: int = 0
    days_until_pay: int = 0
    upcoming_bills_total: int = 0
    runway_days: int = 0
    next_bill_date: Optional[str] = None
    next_bill_amount: int = 0
    daily_budget: int = 0


class PaidDecisionResponse(CamelModel):
    id: str
    is_paid: Literal[True] = True
    risk_level: str
    primary_command: PrimaryCommandResponse
    warnings: List[str]
    next_action: NextActionResponse
    hours_remaining: int
    has_expired_decision: bool
    computed_at: int
    expires_at: int
    context: DecisionContextResponse
    suggestions: List[str]


class FreeDecisionResponse(CamelModel):
    id: str
    is_paid: Literal[False] = False
    risk_level: str
    warnings: List[str]
    teaser: str
    has_expired_decision: bool
    hours_remaining: Literal[0] = 0


class DecisionEnvelope(BaseModel):
    data: Union[PaidDecisionResponse, FreeDecisionResponse]


class AcknowledgeRequest(CamelModel):
    decision_id: str = Field(min_length=1)


class AcknowledgeResponse(BaseModel):
    success: bool
