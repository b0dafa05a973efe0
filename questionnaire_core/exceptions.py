"""Exception hierarchy for the questionnaire flowchart engine."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class QuestionnaireError(Exception):
    """Base exception type for all flowchart engine errors."""

    message: str
    field: Optional[str] = None

    def __str__(self) -> str:
        if not self.field:
            return self.message
        return f"{self.field}: {self.message}"


class FlowchartIngestionError(QuestionnaireError, ValueError):
    """Raised when an external flowchart document cannot be converted.

    `field` names the offending location, e.g. ``nodes[2].type``.
    """


class NoFlowchartOpenError(QuestionnaireError):
    """Raised when an operation needs an open flowchart and there is none."""
