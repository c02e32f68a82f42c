#!/usr/bin/env python3
"""
Batch runner for a single request group.

The runner resolves the team, issues and workflow states of a group,
validates them, then removes labels, adds labels and transitions issues.
Validation failures end the group with a FATAL result; failures updating
one issue are reported without stopping its siblings.
"""

import asyncio
import logging
from dataclasses import asdict
from typing import Awaitable, List, Optional, Sequence, Set, Sized, Tuple

import aiohttp

from .labeler import Labeler
from .linear_client import LinearClient
from .models import (
    COUNT_MISMATCH_MESSAGE,
    MISSING_ISSUES_MESSAGE,
    FatalGroupError,
    GroupResult,
    Issue,
    RequestGroup,
    RunContext,
    Team,
    WorkflowState,
)


def assert_length(found: Sized, expected: Sized):
    """Fail the group unless every provided identifier was found"""
    if len(found) != len(expected):
        raise FatalGroupError(COUNT_MISMATCH_MESSAGE)


def report_issue_error(issue: Issue, error: Exception, result: GroupResult):
    message = f"Unexpected error happened updating {issue.identifier}: {error}. Continuing with other issues"
    logging.error(message)
    result.errors.append(message)


class Runner:
    """Runs the pipeline steps of one request group in order"""

    def __init__(self, client: LinearClient, session: aiohttp.ClientSession):
        self.client = client
        self.session = session

    async def run(self, group: RequestGroup) -> GroupResult:
        """Run a request group, turning fatal validation errors into a result"""
        result = GroupResult(team_key=group.team_key)
        try:
            await self._run_steps(group, result)
        except FatalGroupError as e:
            logging.error(f"[{group.team_key}] {e.message}")
            return GroupResult.fatal(group.team_key, e.message)
        return result

    async def _run_steps(self, group: RequestGroup, result: GroupResult):
        team = await self.fetch_team(group.team_key)
        context = RunContext(client=self.client, session=self.session, team=team)

        issues = await self.fetch_issues(context, group.issue_numbers, group.filter_label)
        if not issues:
            logging.info(f"No issues found for team {team.key}. Nothing to do")
            result.message = "No issues found"
            return

        states: Optional[Tuple[WorkflowState, List[WorkflowState]]] = None
        if group.transition_to:
            states = await self.fetch_states(context, group.transition_to, group.transition_from)

        labeler = Labeler(context)
        failed: Set[str] = set()

        # Removal goes first so a wildcard like 'version/v*' cannot strip
        # a label added by this very run.
        if group.remove_labels:
            outcomes = await asyncio.gather(*(
                self.update_labels(issue, labeler.remove_labels(issue, group.remove_labels), result)
                for issue in issues
            ))
            failed.update(issue.id for issue, done in zip(issues, outcomes) if not done)

        if group.add_labels:
            labels = await labeler.resolve_or_create(group.add_labels)
            pending = [issue for issue in issues if issue.id not in failed]
            outcomes = await asyncio.gather(*(
                self.update_labels(issue, labeler.add_labels(issue, labels), result)
                for issue in pending
            ))
            failed.update(issue.id for issue, done in zip(pending, outcomes) if not done)

        # An issue whose labels could not be updated is left in its state
        issues = [issue for issue in issues if issue.id not in failed]

        if states is not None:
            transition_to, transition_from = states
            await self.update_issues(context, issues, transition_to, transition_from, result)
        else:
            result.updated.extend(issue.identifier for issue in issues)

    async def fetch_team(self, key: str) -> Team:
        """Fetch the team by key, failing unless exactly one matches"""
        teams = await self.client.find_teams(self.session, key)
        logging.debug(f"Team found: {[asdict(team) for team in teams]}")
        assert_length(teams, [key])
        return teams[0]

    async def fetch_issues(
        self,
        context: RunContext,
        issue_numbers: Sequence[int],
        filter_label: str
    ) -> List[Issue]:
        """Fetch issues by number and/or label filter.

        With a filter label the number of issues found may legitimately differ
        from the number of issue numbers provided.
        """
        if not issue_numbers and not filter_label:
            raise FatalGroupError(MISSING_ISSUES_MESSAGE)

        issues = await self.client.find_issues(
            self.session,
            context.team.id,
            numbers=list(issue_numbers) or None,
            label_contains=filter_label or None
        )
        logging.debug(f"Issues found: {[issue.identifier for issue in issues]}")

        if not filter_label:
            assert_length(issues, issue_numbers)

        return issues

    async def fetch_states(
        self,
        context: RunContext,
        transition_to: str,
        transition_from: Sequence[str]
    ) -> Tuple[WorkflowState, List[WorkflowState]]:
        """Fetch the target state and the allowed source states in one query"""
        names = list(dict.fromkeys([transition_to, *transition_from]))
        states = await self.client.find_workflow_states(self.session, names, context.team.id)

        to_states = [state for state in states if state.name == transition_to]
        logging.debug(f"Transition to state found: {[asdict(state) for state in to_states]}")
        assert_length(to_states, [transition_to])

        from_states = [state for state in states if state.name in transition_from]
        logging.debug(f"Transition from states found: {[asdict(state) for state in from_states]}")
        assert_length(from_states, transition_from)

        return to_states[0], from_states

    async def update_issues(
        self,
        context: RunContext,
        issues: Sequence[Issue],
        transition_to: WorkflowState,
        transition_from: Sequence[WorkflowState],
        result: GroupResult
    ):
        await asyncio.gather(*(
            self.update_issue(context, issue, transition_to, transition_from, result)
            for issue in issues
        ))

    async def update_issue(
        self,
        context: RunContext,
        issue: Issue,
        transition_to: WorkflowState,
        transition_from: Sequence[WorkflowState],
        result: GroupResult
    ):
        """Transition one issue. Never raises, so sibling updates carry on."""
        try:
            state = issue.state
            if not state:
                message = f"Can't get state for issue {issue.identifier}. Skipping"
                logging.warning(message)
                result.warn(message)
                result.skipped.append(issue.identifier)
                return

            allowed_ids = [allowed.id for allowed in transition_from]
            if allowed_ids and state.id not in allowed_ids:
                message = f"Issue {issue.identifier} is not in whitelisted state ({state.name}). Skipping"
                logging.warning(message)
                result.warn(message)
                result.skipped.append(issue.identifier)
                return

            await context.client.update_issue(context.session, issue.id, state_id=transition_to.id)
            logging.info(f"Issue {issue.identifier} updated!")
            result.updated.append(issue.identifier)
        except Exception as e:
            report_issue_error(issue, e, result)

    async def update_labels(self, issue: Issue, step: Awaitable, result: GroupResult) -> bool:
        """Await one issue's label step. Returns False if it failed."""
        try:
            await step
        except Exception as e:
            report_issue_error(issue, e, result)
            return False
        return True
