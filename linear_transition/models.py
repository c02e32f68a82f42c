#!/usr/bin/env python3
"""
Data models for the Linear transition action.

This module contains the data classes, enums and error types shared by
the label resolver, the batch runner and the top-level orchestrator.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

if TYPE_CHECKING:
    import aiohttp

    from .linear_client import LinearClient


COUNT_MISMATCH_MESSAGE = (
    "Number of resources fetched from Linear does not match number of provided "
    "identifiers. See debug logs for more details."
)
MISSING_ISSUES_MESSAGE = "Neither issue numbers nor filter label provided."


class FatalGroupError(Exception):
    """Unrecoverable failure of a single request group.

    Raised wherever a validation fails and caught at the group boundary,
    where it becomes a FATAL GroupResult.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class GroupStatus(Enum):
    """Outcome of a request group run"""
    SUCCESS = "success"
    WARNING = "warning"
    FATAL = "fatal"


@dataclass(frozen=True)
class Team:
    id: str
    key: str

    @classmethod
    def from_node(cls, node: Dict[str, Any]) -> "Team":
        return cls(id=node["id"], key=node["key"])


@dataclass(frozen=True)
class WorkflowState:
    id: str
    name: str

    @classmethod
    def from_node(cls, node: Dict[str, Any]) -> "WorkflowState":
        return cls(id=node["id"], name=node["name"])


@dataclass(frozen=True)
class Label:
    """A Linear issue label. Nested labels point at their parent by id."""
    id: str
    name: str
    parent_id: Optional[str] = None

    @classmethod
    def from_node(cls, node: Dict[str, Any]) -> "Label":
        parent = node.get("parent") or {}
        return cls(id=node["id"], name=node["name"], parent_id=parent.get("id"))


@dataclass
class Issue:
    """An issue as returned by the issues query, state included"""
    id: str
    identifier: str
    number: Optional[int] = None
    state: Optional[WorkflowState] = None
    label_ids: List[str] = field(default_factory=list)

    @classmethod
    def from_node(cls, node: Dict[str, Any]) -> "Issue":
        state = node.get("state")
        return cls(
            id=node["id"],
            identifier=node["identifier"],
            number=node.get("number"),
            state=WorkflowState.from_node(state) if state else None,
            label_ids=list(node.get("labelIds") or []),
        )


@dataclass(frozen=True)
class RequestGroup:
    """One unit of work: everything to apply to the issues of a single team"""
    team_key: str
    transition_to: str = ""
    transition_from: Tuple[str, ...] = ()
    issue_numbers: Tuple[int, ...] = ()
    add_labels: Tuple[str, ...] = ()
    remove_labels: Tuple[str, ...] = ()
    filter_label: str = ""


@dataclass(frozen=True)
class RunContext:
    """Resources resolved once per group and passed to every pipeline stage"""
    client: "LinearClient"
    session: "aiohttp.ClientSession"
    team: Team


@dataclass
class GroupResult:
    """Result of running one request group"""
    team_key: str
    status: GroupStatus = GroupStatus.SUCCESS
    message: Optional[str] = None
    updated: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """True when the group neither failed nor hit per-issue errors"""
        return self.status != GroupStatus.FATAL and not self.errors

    def warn(self, message: str):
        self.warnings.append(message)
        if self.status == GroupStatus.SUCCESS:
            self.status = GroupStatus.WARNING

    @classmethod
    def fatal(cls, team_key: str, message: str) -> "GroupResult":
        return cls(team_key=team_key, status=GroupStatus.FATAL, message=message)

    def to_dict(self) -> Dict:
        return {
            "team_key": self.team_key,
            "status": self.status.value,
            "message": self.message,
            "updated": self.updated,
            "skipped": self.skipped,
            "warnings": self.warnings,
            "errors": self.errors,
        }


@dataclass
class RunReport:
    """Aggregated results of all request groups in one invocation."""
    results: List[GroupResult] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(result.ok for result in self.results)

    @property
    def failed_results(self) -> List[GroupResult]:
        return [result for result in self.results if not result.ok]

    def to_text(self) -> str:
        """Convert report to human-readable text format."""
        lines = [
            "Linear transition report",
            "=" * 40,
            f"Groups: {len(self.results)}",
            f"Failed: {len(self.failed_results)}",
            "",
        ]
        for result in self.results:
            lines.append(f"  Team {result.team_key}: {result.status.value}")
            if result.message:
                lines.append(f"    {result.message}")
            if result.updated:
                lines.append(f"    Updated: {', '.join(result.updated)}")
            if result.skipped:
                lines.append(f"    Skipped: {', '.join(result.skipped)}")
            for error in result.errors:
                lines.append(f"    Error: {error}")
        return "\n".join(lines)
