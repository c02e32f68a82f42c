#!/usr/bin/env python3
"""
Label resolution for the Linear transition action.

Linear supports nested labels ("version/v1.2.0" is a label "v1.2.0" whose
parent is "version"). The API only knows about parent ids though, so
nested names have to be translated into nested filters for lookups and
created one level at a time, root first.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Sequence

import aiohttp

from .linear_client import LinearClient
from .models import FatalGroupError, Issue, Label, RunContext

WILDCARD = "*"


def build_filter_by_name(name: str) -> Dict[str, Any]:
    """Build an exact IssueLabelFilter for a nested label name.

    'test/fest/v0.0.1' becomes
    {name: {eq: 'v0.0.1'}, parent: {name: {eq: 'fest'}, parent: {name: {eq: 'test'}, parent: {}}}}
    """
    return _build_nested_filter(name, lambda segment: {"eq": segment})


def build_filter_by_pattern(pattern: str) -> Dict[str, Any]:
    """Like build_filter_by_name, but 'prefix*' and '*suffix' segments
    become startsWith / endsWith matchers."""
    return _build_nested_filter(pattern, segment_matcher)


def segment_matcher(segment: str) -> Dict[str, str]:
    if len(segment) > 1 and segment.endswith(WILDCARD):
        return {"startsWith": segment[:-1]}
    if len(segment) > 1 and segment.startswith(WILDCARD):
        return {"endsWith": segment[1:]}
    return {"eq": segment}


def _build_nested_filter(name: str, matcher) -> Dict[str, Any]:
    # The innermost parent stays an empty filter: top level labels are not
    # required to have no parent.
    label_filter: Dict[str, Any] = {}
    node = label_filter
    for segment in reversed(name.split("/")):
        node["name"] = matcher(segment)
        node["parent"] = {}
        node = node["parent"]
    return label_filter


def leaf_name(name: str) -> str:
    return name.split("/")[-1]


class Labeler:
    """Finds, creates, attaches and removes team labels"""

    def __init__(self, context: RunContext):
        self.context = context

    @property
    def client(self) -> LinearClient:
        return self.context.client

    @property
    def session(self) -> aiohttp.ClientSession:
        return self.context.session

    @property
    def team_id(self) -> str:
        return self.context.team.id

    async def resolve_or_create(self, names: Sequence[str]) -> List[Label]:
        """Find every label that exists and create the rest.

        Repeated names are resolved once. Found labels come first (in
        request order), created ones after.
        """
        if not names:
            return []

        names = list(dict.fromkeys(names))
        found = await self.find_labels(names)
        missing = [name for name in names if name not in found]

        created = await asyncio.gather(*(self._create_logged(name) for name in missing))

        return [found[name] for name in names if name in found] + list(created)

    async def add_labels(self, issue: Issue, labels: Sequence[Label]):
        """Attach already resolved labels to an issue"""
        await asyncio.gather(*(
            self.client.add_label_to_issue(self.session, issue.id, label.id)
            for label in labels
        ))
        if labels:
            logging.info(f"Added labels {[label.name for label in labels]} to issue {issue.identifier}")

    async def remove_labels(self, issue: Issue, patterns: Sequence[str]) -> List[Label]:
        """Remove labels matching the patterns from an issue.

        Only the issue's own labels are searched; the labels themselves are
        not deleted from Linear. Returns the removed labels.
        """
        if not patterns:
            return []

        label_filter = {"or": [build_filter_by_pattern(pattern) for pattern in patterns]}
        labels = await self.client.find_issue_labels(self.session, issue.id, label_filter)
        logging.debug(f"Labels to remove from {issue.identifier} found: {[label.name for label in labels]}")

        if not labels:
            logging.warning(f"No labels matching {list(patterns)} found on issue {issue.identifier}")
            return []

        await asyncio.gather(*(
            self.client.remove_label_from_issue(self.session, issue.id, label.id)
            for label in labels
        ))
        logging.info(f"Removed labels {[label.name for label in labels]} from issue {issue.identifier}")
        return labels

    async def find_labels(self, names: Sequence[str]) -> Dict[str, Label]:
        """Fetch all requested labels in one query, keyed by requested name.

        Returned records are matched back by their last path segment only,
        so two requested paths sharing a leaf name get the same record.
        """
        label_filter = {"or": [build_filter_by_name(name) for name in names]}
        labels = await self.client.find_team_labels(self.session, self.team_id, label_filter)
        logging.debug(f"Labels found: {[label.name for label in labels]}")

        found: Dict[str, Label] = {}
        for name in names:
            label = next((label for label in labels if label.name == leaf_name(name)), None)
            if label:
                found[name] = label
        return found

    async def find_label(self, name: str, parent_id: Optional[str] = None) -> Optional[Label]:
        """Find a single (not nested) label by name and optional parent id"""
        label_filter: Dict[str, Any] = {"name": {"eq": name}}
        if parent_id:
            label_filter["parent"] = {"id": {"eq": parent_id}}

        labels = await self.client.find_team_labels(self.session, self.team_id, label_filter)
        return labels[0] if labels else None

    async def create_label(self, name: str) -> Label:
        """Create a nested label one segment at a time, root first.

        Segments that already exist are reused. Concurrent creations of the
        same missing ancestor can still race and produce a duplicate.
        """
        segments = name.split("/")
        label: Optional[Label] = None

        for index, segment in enumerate(segments):
            parent_id = label.id if label else None
            label = await self.find_label(segment, parent_id)
            if not label:
                label = await self.client.create_label(self.session, self.team_id, segment, parent_id)

            if not label:
                raise FatalGroupError(f"Label {'/'.join(segments[index:])} was not created! Failing")

        return label

    async def _create_logged(self, name: str) -> Label:
        label = await self.create_label(name)
        logging.info(f'Label "{name}" was created.')
        return label
