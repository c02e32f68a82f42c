#!/usr/bin/env python3
"""
Main orchestrator for the Linear transition action.

This module splits the action inputs into one request group per team,
runs the groups concurrently and reports their results.
"""

import asyncio
import logging
from typing import List, Optional

import aiohttp

from .actions_logging import setup_logging
from .config import Config
from .inputs import parse_inputs
from .linear_client import LinearClient
from .models import GroupResult, GroupStatus, RequestGroup, RunReport
from .runner import Runner
from .slack_notifier import SlackNotifier
from .telegram_notifier import TelegramNotifier


class TransitionOrchestrator:
    """Runs every request group of an invocation"""

    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config()
        self.client = LinearClient(self.config.api_key)
        self.notifiers = []

        if self.config.telegram_bot_token and self.config.telegram_chat_id:
            self.notifiers.append(TelegramNotifier(
                self.config.telegram_bot_token,
                self.config.telegram_chat_id
            ))

        if self.config.slack_bot_token and self.config.slack_channel_id:
            self.notifiers.append(SlackNotifier(
                self.config.slack_bot_token,
                self.config.slack_channel_id
            ))

    async def run(self) -> RunReport:
        """Run all request groups and collect their results"""
        groups = parse_inputs(self.config)
        logging.info(f"Processing {len(groups)} team group(s): {[group.team_key for group in groups]}")

        timeout = aiohttp.ClientTimeout(total=self.config.request_timeout)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            runner = Runner(self.client, session)
            # A failing group must not take its siblings down with it.
            outcomes = await asyncio.gather(
                *(runner.run(group) for group in groups),
                return_exceptions=True
            )

        report = RunReport(results=[
            self._to_result(group, outcome) for group, outcome in zip(groups, outcomes)
        ])

        for result in report.results:
            await self._notify(result)
        if len(report.results) > 1:
            await self._notify_summary(report)

        return report

    def _to_result(self, group: RequestGroup, outcome) -> GroupResult:
        if isinstance(outcome, GroupResult):
            return outcome
        if isinstance(outcome, Exception):
            message = f"Action failed: {outcome}"
            logging.error(f"[{group.team_key}] {message}")
            return GroupResult.fatal(group.team_key, message)
        raise outcome

    async def _notify(self, result: GroupResult):
        for notifier in self.notifiers:
            try:
                if result.status == GroupStatus.FATAL:
                    await notifier.notify_group_failed(result)
                else:
                    await notifier.notify_group_complete(result)
            except Exception as e:
                logging.error(f"Failed to send notification for team {result.team_key}: {e}")

    async def _notify_summary(self, report: RunReport):
        for notifier in self.notifiers:
            try:
                await notifier.notify_summary(report)
            except Exception as e:
                logging.error(f"Failed to send summary notification: {e}")


def log_report(report: RunReport):
    for result in report.failed_results:
        if result.status == GroupStatus.FATAL:
            logging.error(f"Team {result.team_key} failed: {result.message}")
        else:
            logging.error(f"Team {result.team_key} finished with {len(result.errors)} failed issue update(s)")
    if report.ok:
        logging.info(f"All {len(report.results)} team group(s) processed successfully")


async def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point. Returns the process exit code."""
    config_path = argv[0] if argv else None
    config = Config(config_path)
    setup_logging(debug=config.debug)

    orchestrator = TransitionOrchestrator(config)
    report = await orchestrator.run()
    log_report(report)
    return 0 if report.ok else 1


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))
