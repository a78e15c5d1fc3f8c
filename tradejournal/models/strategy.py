"""Strategy, Rule and Account data models."""

from typing import Optional

from pydantic import BaseModel, Field


class Strategy(BaseModel):
    """A named trading approach owning a set of rules."""

    id: Optional[int] = Field(default=None, description="Database ID")
    name: str = Field(..., min_length=1, description="Strategy name")

    model_config = {"frozen": True, "str_strip_whitespace": True}


class Rule(BaseModel):
    """A behavioural guideline attached to a strategy."""

    id: Optional[int] = Field(default=None, description="Database ID")
    text: str = Field(..., min_length=1, description="Rule text")
    strategy_id: int = Field(..., description="Owning strategy ID")

    model_config = {"frozen": True, "str_strip_whitespace": True}


class Account(BaseModel):
    """A trading account whose capital tracks logged P&L."""

    id: Optional[int] = Field(default=None, description="Database ID")
    name: str = Field(..., min_length=1, description="Account name")
    initial_capital: float = Field(default=0.0, description="Starting capital")
    current_capital: float = Field(default=0.0, description="Capital after logged trades")

    model_config = {"frozen": True, "str_strip_whitespace": True}
