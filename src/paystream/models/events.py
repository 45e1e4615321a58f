"""Wire models for the analysis event stream.

Each transport frame carries one JSON object tagged by ``type``. Wire
fields are camelCase; the models expose snake_case attributes. Names
used by earlier releases of the analysis service (``agent_start``,
``txId``, ``repoName`` ...) are accepted as aliases.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter


class _WireModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        extra="ignore",
        allow_inf_nan=False,
    )


class SubjectMeta(_WireModel):
    """Descriptive metadata about the analysed subject (a repository)."""

    name: str = Field(validation_alias=AliasChoices("name", "repoName"))
    unit_count: int = Field(
        default=0, validation_alias=AliasChoices("unitCount", "fileCount", "unit_count")
    )
    tags: tuple[str, ...] = Field(
        default=(), validation_alias=AliasChoices("tags", "languages")
    )


class SubjectFetchBegun(_WireModel):
    type: Literal["subject-fetch-begun"] = "subject-fetch-begun"


class SubjectFetched(_WireModel):
    type: Literal["subject-fetched"] = "subject-fetched"
    meta: SubjectMeta


class WorkerStarted(_WireModel):
    type: Literal["worker-started"] = "worker-started"
    agent: str
    payment: float
    allocation: float


class WorkerCompleted(_WireModel):
    type: Literal["worker-completed"] = "worker-completed"
    agent: str
    receipt_id: str = Field(
        validation_alias=AliasChoices("receiptId", "txId", "receipt_id")
    )
    payment: float
    remaining_budget: float = Field(
        validation_alias=AliasChoices("remainingBudget", "remaining_budget")
    )
    key: str | None = None
    result: Any = None


class WorkerFailed(_WireModel):
    type: Literal["worker-failed"] = "worker-failed"
    agent: str


class ReportReady(_WireModel):
    type: Literal["report-ready"] = "report-ready"
    share_id: str = Field(validation_alias=AliasChoices("shareId", "share_id"))


class AnalysisComplete(_WireModel):
    type: Literal["analysis-complete"] = "analysis-complete"
    data: dict[str, Any] = Field(default_factory=dict)


class RefundIssued(_WireModel):
    type: Literal["refund-issued"] = "refund-issued"
    amount: float
    receipt_id: str = Field(
        validation_alias=AliasChoices("receiptId", "txId", "receipt_id")
    )


class FatalError(_WireModel):
    type: Literal["fatal-error"] = "fatal-error"
    message: str


Event = Annotated[
    Union[
        SubjectFetchBegun,
        SubjectFetched,
        WorkerStarted,
        WorkerCompleted,
        WorkerFailed,
        ReportReady,
        AnalysisComplete,
        RefundIssued,
        FatalError,
    ],
    Field(discriminator="type"),
]

EVENT_ADAPTER: TypeAdapter[Event] = TypeAdapter(Event)

EVENT_TYPES: frozenset[str] = frozenset({
    "subject-fetch-begun",
    "subject-fetched",
    "worker-started",
    "worker-completed",
    "worker-failed",
    "report-ready",
    "analysis-complete",
    "refund-issued",
    "fatal-error",
})

# Type names emitted by earlier releases of the analysis service.
LEGACY_EVENT_TYPES: dict[str, str] = {
    "fetching_repo": "subject-fetch-begun",
    "repo_fetched": "subject-fetched",
    "agent_start": "worker-started",
    "agent_complete": "worker-completed",
    "agent_error": "worker-failed",
    "report_saved": "report-ready",
    "analysis_complete": "analysis-complete",
    "refund": "refund-issued",
    "error": "fatal-error",
}
