"""
Query domain models for classified questions and their results.

This module contains the structured intent a free-text question is
classified into, the classification result (including the explicit
failure arm) and the report produced by executing an intent.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ontology.domain import EntityRef


class QueryKind(str, Enum):
    """Kinds of structured queries."""
    INSTANCES = "instances"                  # Direct instances of a class
    CLASSES = "classes"                      # Classes whose name contains a pattern
    PROPERTIES = "properties"                # Object properties whose name contains a pattern
    RELATIONSHIPS = "relationships"          # Object property assertions of an individual
    INDIVIDUAL_DETAIL = "individual"         # Types, relationships and data of an individual
    COMPLEX = "complex"                      # Instances of a class filtered by assertions
    AMBIGUOUS = "ambiguous"                  # Needs a clarification round-trip


# Type tokens accepted from the completion service, lower-cased
TYPE_TOKENS = {
    "instances": QueryKind.INSTANCES,
    "classes": QueryKind.CLASSES,
    "properties": QueryKind.PROPERTIES,
    "relationships": QueryKind.RELATIONSHIPS,
    "individual": QueryKind.INDIVIDUAL_DETAIL,
    "individualdetail": QueryKind.INDIVIDUAL_DETAIL,
    "individual_detail": QueryKind.INDIVIDUAL_DETAIL,
    "entity": QueryKind.INDIVIDUAL_DETAIL,
    "complex": QueryKind.COMPLEX,
    "ambiguous": QueryKind.AMBIGUOUS,
}

# Kinds that cannot run without a target name
TARGET_REQUIRED = {
    QueryKind.INSTANCES,
    QueryKind.RELATIONSHIPS,
    QueryKind.INDIVIDUAL_DETAIL,
    QueryKind.COMPLEX,
}


class QueryFilter(BaseModel):
    """One condition of a complex query: an asserted property value."""

    property: str = Field(..., description="Object property short name")
    value: str = Field(..., description="Short name of the asserted target")
    operator: str = Field(default="equals", description="Comparison operator as given by the classifier")


class QueryIntent(BaseModel):
    """Structured form of a free-text question."""

    kind: QueryKind = Field(..., description="Query kind")
    target: str = Field(default="", description="Entity name or search pattern")
    filters: List[QueryFilter] = Field(default_factory=list, description="Conditions for complex queries")
    clarification_question: Optional[str] = Field(None, description="Question to ask when ambiguous")

    @property
    def is_ambiguous(self) -> bool:
        return self.kind == QueryKind.AMBIGUOUS


class ClassificationResult(BaseModel):
    """Outcome of classifying one completion response.

    Exactly one of ``intent`` and ``failure`` is set.
    """

    intent: Optional[QueryIntent] = Field(None, description="Parsed intent on success")
    failure: Optional[str] = Field(None, description="Why the response could not be used")
    raw_response: str = Field(default="", description="Text returned by the completion service")

    @property
    def ok(self) -> bool:
        return self.intent is not None

    @classmethod
    def success(cls, intent: QueryIntent, raw_response: str = "") -> "ClassificationResult":
        return cls(intent=intent, raw_response=raw_response)

    @classmethod
    def unrecognized(cls, reason: str, raw_response: str = "") -> "ClassificationResult":
        return cls(failure=reason, raw_response=raw_response)


class QueryReport(BaseModel):
    """Human-readable result of executing an intent plus the entities it surfaced."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    intent: Optional[QueryIntent] = Field(None, description="Executed intent")
    text: str = Field(..., description="Report text shown to the user")
    matches: List[EntityRef] = Field(default_factory=list, description="Entities listed in the report")
    highlighted: Optional[EntityRef] = Field(None, description="Entity selected in the graph view")
    found: bool = Field(default=True, description="False when the target did not resolve")
    error: Optional[str] = Field(None, description="Execution error, if any")
