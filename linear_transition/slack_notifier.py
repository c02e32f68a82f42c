#!/usr/bin/env python3
"""
Slack notification manager for the Linear transition action.

This module handles sending notifications to Slack about the outcome
of each team's transition run.
"""

import logging
from slack_sdk.web.async_client import AsyncWebClient
from slack_sdk.errors import SlackApiError

from .models import GroupResult, RunReport


class SlackNotifier:
    """Slack notification manager"""

    def __init__(self, bot_token: str, channel_id: str):
        self.client = AsyncWebClient(token=bot_token)
        self.channel_id = channel_id

    async def send_message(self, text: str = None, blocks: list = None):
        """Send a message to Slack"""
        try:
            response = await self.client.chat_postMessage(
                channel=self.channel_id,
                text=text,
                blocks=blocks
            )
            return response
        except SlackApiError as e:
            logging.error(f"Failed to send Slack message: {e.response['error']}")

    async def notify_group_complete(self, result: GroupResult):
        """Notify that a team's issues were processed"""
        emoji = ":white_check_mark:" if result.ok else ":warning:"
        lines = [f"{emoji} *Linear transition for team {result.team_key} finished*"]
        if result.updated:
            lines.append(f"Updated: {', '.join(result.updated)}")
        if result.skipped:
            lines.append(f"Skipped: {', '.join(result.skipped)}")
        if result.message:
            lines.append(result.message)

        blocks = [
            {
                "type": "section",
                "text": {"type": "mrkdwn", "text": "\n".join(lines)}
            }
        ]
        for error in result.errors:
            blocks.append({
                "type": "section",
                "text": {"type": "mrkdwn", "text": f"```{error[-300:]}```"}
            })

        await self.send_message(
            text=f"Team {result.team_key}: {len(result.updated)} issues updated",
            blocks=blocks
        )

    async def notify_group_failed(self, result: GroupResult):
        """Notify that a team's run was aborted"""
        blocks = [
            {
                "type": "section",
                "text": {
                    "type": "mrkdwn",
                    "text": f":x: *Linear transition for team {result.team_key} failed*\n{result.message}"
                }
            }
        ]
        await self.send_message(
            text=f"Linear transition for team {result.team_key} failed: {result.message}",
            blocks=blocks
        )

    async def notify_summary(self, report: RunReport):
        """Send the whole run report as a code block"""
        emoji = ":white_check_mark:" if report.ok else ":x:"
        blocks = [
            {
                "type": "section",
                "text": {"type": "mrkdwn", "text": f"{emoji} *Linear transition finished*"}
            },
            {
                "type": "section",
                "text": {"type": "mrkdwn", "text": f"```{report.to_text()[-2500:]}```"}
            }
        ]
        await self.send_message(
            text=f"Linear transition finished: {len(report.failed_results)} of {len(report.results)} groups failed",
            blocks=blocks
        )
