"""
Pydantic models shared across the WordSmith core.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class Severity(str, Enum):
    """Display tone of a notification. Forwarded to rendering untouched."""

    DEFAULT = "default"
    DESTRUCTIVE = "destructive"
    WARNING = "warning"


class Notification(BaseModel):
    """A transient message shown to the user (a "toast")."""

    model_config = ConfigDict(extra="allow", frozen=True)

    id: str
    title: Optional[str] = None
    description: Optional[str] = None
    severity: Severity = Severity.DEFAULT
    visible: bool = True


class Collocation(BaseModel):
    """A word that frequently co-occurs with the looked-up word."""

    model_config = ConfigDict(populate_by_name=True)

    collocate: str = Field(description="The collocate.")
    frequency: Union[int, float] = Field(
        description="The frequency of the collocate with the input word."
    )
    example_sentences: list[str] = Field(
        default_factory=list,
        alias="exampleSentences",
        description="Example sentences using the collocate with the input word.",
    )


class CollocationAnalysis(BaseModel):
    """Structured output requested from the collocation prompt."""

    collocations: list[Collocation] = Field(
        default_factory=list,
        description=(
            "The statistically significant and contextually relevant "
            "collocations for the input word."
        ),
    )
