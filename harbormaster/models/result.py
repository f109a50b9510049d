"""Result envelope for multi-backend aggregation."""

from typing import Generic, TypeVar

from pydantic import BaseModel, Field

from harbormaster.exceptions import PartialAggregation

T = TypeVar("T")


class AggregationWarning(BaseModel):
    """One backend or cluster that could not be fully queried."""

    scheduler: str
    cluster: str = ""  # empty when a whole backend failed
    kind: str  # stable error kind, e.g. "BackendFault"
    message: str

    @classmethod
    def from_error(cls, error, scheduler: str, cluster: str = "") -> "AggregationWarning":
        """Build a warning from a harbormaster exception."""
        return cls(
            scheduler=scheduler,
            cluster=cluster,
            kind=getattr(error, "kind", type(error).__name__),
            message=getattr(error, "message", str(error)),
        )


class AggregateResult(BaseModel, Generic[T]):
    """Merged entities plus any failures absorbed while collecting them."""

    items: list[T] = Field(default_factory=list)
    warnings: list[AggregationWarning] = Field(default_factory=list)

    @property
    def partial(self) -> bool:
        """True if at least one backend or cluster contributed no data."""
        return bool(self.warnings)

    def raise_for_partial(self) -> None:
        """Raise PartialAggregation if any warning was recorded."""
        if not self.warnings:
            return
        summary = "; ".join(
            f"{w.scheduler}{'/' + w.cluster if w.cluster else ''}: {w.message}"
            for w in self.warnings
        )
        raise PartialAggregation(
            f"Aggregation incomplete: {len(self.warnings)} source(s) failed", summary
        )

    def to_response(self) -> dict:
        """Serialize to the list response body."""
        return {
            "items": [
                item.model_dump(mode="json", by_alias=True) if isinstance(item, BaseModel) else item
                for item in self.items
            ],
            "partial": self.partial,
            "warnings": [w.model_dump(mode="json") for w in self.warnings],
        }
