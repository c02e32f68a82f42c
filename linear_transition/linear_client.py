#!/usr/bin/env python3
"""
Linear API client for the transition action.

This module provides the Linear GraphQL interactions the runner needs:
team, workflow state, label and issue lookups, label creation and
issue mutations.
"""

import logging
from typing import Any, Dict, List, Optional

import aiohttp

from .models import Issue, Label, Team, WorkflowState

LINEAR_API_URL = "https://api.linear.app/graphql"
PAGE_SIZE = 250

LABEL_FIELDS = "id name parent { id }"

TEAMS_QUERY = """
query Teams($filter: TeamFilter, $first: Int) {
  teams(filter: $filter, first: $first) { nodes { id key } }
}
"""

WORKFLOW_STATES_QUERY = """
query WorkflowStates($filter: WorkflowStateFilter, $first: Int) {
  workflowStates(filter: $filter, first: $first) { nodes { id name } }
}
"""

TEAM_LABELS_QUERY = f"""
query TeamLabels($id: String!, $filter: IssueLabelFilter, $first: Int) {{
  team(id: $id) {{ labels(filter: $filter, first: $first) {{ nodes {{ {LABEL_FIELDS} }} }} }}
}}
"""

ISSUE_LABELS_QUERY = f"""
query IssueLabels($id: String!, $filter: IssueLabelFilter, $first: Int) {{
  issue(id: $id) {{ labels(filter: $filter, first: $first) {{ nodes {{ {LABEL_FIELDS} }} }} }}
}}
"""

ISSUES_QUERY = """
query Issues($filter: IssueFilter, $first: Int) {
  issues(filter: $filter, first: $first) {
    nodes { id identifier number labelIds state { id name } }
  }
}
"""

CREATE_LABEL_MUTATION = f"""
mutation CreateLabel($input: IssueLabelCreateInput!) {{
  issueLabelCreate(input: $input) {{ success issueLabel {{ {LABEL_FIELDS} }} }}
}}
"""

ADD_LABEL_MUTATION = """
mutation AddLabel($id: String!, $labelId: String!) {
  issueAddLabel(id: $id, labelId: $labelId) { success }
}
"""

REMOVE_LABEL_MUTATION = """
mutation RemoveLabel($id: String!, $labelId: String!) {
  issueRemoveLabel(id: $id, labelId: $labelId) { success }
}
"""

UPDATE_ISSUE_MUTATION = """
mutation UpdateIssue($id: String!, $input: IssueUpdateInput!) {
  issueUpdate(id: $id, input: $input) { success }
}
"""


class LinearAPIError(Exception):
    """Raised when Linear answers with a non-200 status or GraphQL errors"""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class LinearClient:
    """Linear GraphQL client for team scoped issue management"""

    def __init__(self, api_key: str, api_url: str = LINEAR_API_URL):
        self.api_key = api_key
        self.api_url = api_url
        self.headers = {
            "Authorization": api_key,
            "Content-Type": "application/json"
        }

    async def execute(
        self,
        session: aiohttp.ClientSession,
        query: str,
        variables: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Run a GraphQL document and return its data payload"""
        payload = {"query": query, "variables": variables or {}}
        async with session.post(self.api_url, headers=self.headers, json=payload) as resp:
            if resp.status != 200:
                raise LinearAPIError(f"Linear API error: {resp.status}", status=resp.status)
            body = await resp.json()

        errors = body.get("errors")
        if errors:
            messages = "; ".join(error.get("message", str(error)) for error in errors)
            raise LinearAPIError(f"Linear API error: {messages}", status=resp.status)
        return body.get("data") or {}

    async def find_teams(self, session: aiohttp.ClientSession, key: str) -> List[Team]:
        """Get teams whose key equals the given key"""
        data = await self.execute(session, TEAMS_QUERY, {
            "filter": {"key": {"eq": key}},
            "first": PAGE_SIZE
        })
        return [Team.from_node(node) for node in data["teams"]["nodes"]]

    async def find_workflow_states(
        self,
        session: aiohttp.ClientSession,
        names: List[str],
        team_id: str
    ) -> List[WorkflowState]:
        """Get the team's workflow states with any of the given names"""
        data = await self.execute(session, WORKFLOW_STATES_QUERY, {
            "filter": {
                "name": {"in": list(names)},
                "team": {"id": {"eq": team_id}}
            },
            "first": PAGE_SIZE
        })
        return [WorkflowState.from_node(node) for node in data["workflowStates"]["nodes"]]

    async def find_team_labels(
        self,
        session: aiohttp.ClientSession,
        team_id: str,
        label_filter: Dict[str, Any]
    ) -> List[Label]:
        """Get labels of a team matching an IssueLabelFilter"""
        data = await self.execute(session, TEAM_LABELS_QUERY, {
            "id": team_id,
            "filter": label_filter,
            "first": PAGE_SIZE
        })
        team = data.get("team") or {}
        return [Label.from_node(node) for node in team.get("labels", {}).get("nodes", [])]

    async def find_issue_labels(
        self,
        session: aiohttp.ClientSession,
        issue_id: str,
        label_filter: Dict[str, Any]
    ) -> List[Label]:
        """Get labels attached to an issue matching an IssueLabelFilter"""
        data = await self.execute(session, ISSUE_LABELS_QUERY, {
            "id": issue_id,
            "filter": label_filter,
            "first": PAGE_SIZE
        })
        issue = data.get("issue") or {}
        return [Label.from_node(node) for node in issue.get("labels", {}).get("nodes", [])]

    async def create_label(
        self,
        session: aiohttp.ClientSession,
        team_id: str,
        name: str,
        parent_id: Optional[str] = None
    ) -> Optional[Label]:
        """Create a team label, nested under parent_id when given.

        Returns None when Linear reports no created label.
        """
        params = {"teamId": team_id, "name": name}
        if parent_id:
            params["parentId"] = parent_id

        data = await self.execute(session, CREATE_LABEL_MUTATION, {"input": params})
        payload = data.get("issueLabelCreate") or {}
        node = payload.get("issueLabel")
        if not node or not node.get("id"):
            return None
        return Label.from_node(node)

    async def find_issues(
        self,
        session: aiohttp.ClientSession,
        team_id: str,
        numbers: Optional[List[int]] = None,
        label_contains: Optional[str] = None
    ) -> List[Issue]:
        """Get team issues by number and/or by a substring of a label name"""
        issue_filter: Dict[str, Any] = {"team": {"id": {"eq": team_id}}}
        if numbers:
            issue_filter["number"] = {"in": list(numbers)}
        if label_contains:
            issue_filter["labels"] = {"name": {"contains": label_contains}}

        data = await self.execute(session, ISSUES_QUERY, {
            "filter": issue_filter,
            "first": PAGE_SIZE
        })
        return [Issue.from_node(node) for node in data["issues"]["nodes"]]

    async def add_label_to_issue(self, session: aiohttp.ClientSession, issue_id: str, label_id: str) -> bool:
        data = await self.execute(session, ADD_LABEL_MUTATION, {"id": issue_id, "labelId": label_id})
        return bool((data.get("issueAddLabel") or {}).get("success"))

    async def remove_label_from_issue(self, session: aiohttp.ClientSession, issue_id: str, label_id: str) -> bool:
        data = await self.execute(session, REMOVE_LABEL_MUTATION, {"id": issue_id, "labelId": label_id})
        return bool((data.get("issueRemoveLabel") or {}).get("success"))

    async def update_issue(
        self,
        session: aiohttp.ClientSession,
        issue_id: str,
        state_id: Optional[str] = None,
        label_ids: Optional[List[str]] = None
    ) -> bool:
        """Update an issue's state and/or replace its label set"""
        update: Dict[str, Any] = {}
        if state_id:
            update["stateId"] = state_id
        if label_ids is not None:
            update["labelIds"] = list(label_ids)
        if not update:
            logging.debug(f"Nothing to update for issue {issue_id}")
            return True

        data = await self.execute(session, UPDATE_ISSUE_MUTATION, {"id": issue_id, "input": update})
        success = bool((data.get("issueUpdate") or {}).get("success"))
        if not success:
            raise LinearAPIError(f"Issue {issue_id} was not updated")
        return success
