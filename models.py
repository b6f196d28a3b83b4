"""Shared typed models for the pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping


@dataclass(frozen=True, slots=True)
class Contact:
    """One CRM contact, reduced to the attributes the aggregates need.

    Names, email addresses and phone numbers never reach this object: the
    fetcher keeps only the whitelisted attributes when parsing a page.
    """

    attributes: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    list_ids: tuple[Any, ...] = ()


@dataclass(frozen=True, slots=True)
class CountItem:
    """Size of one group inside an aggregated dataset."""

    label: str
    count: int

    def to_dict(self) -> dict[str, Any]:
        return {"label": self.label, "count": self.count}


@dataclass(frozen=True, slots=True)
class OutputDocument:
    """The public artifact produced by one pipeline run."""

    generated_at: str
    total_contacts: int
    datasets: dict[str, list[CountItem]]

    def to_dict(self) -> dict[str, Any]:
        return {
            "generatedAt": self.generated_at,
            "totals": {"contacts": self.total_contacts},
            "datasets": {
                name: [item.to_dict() for item in items]
                for name, items in self.datasets.items()
            },
        }
