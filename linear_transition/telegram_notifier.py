#!/usr/bin/env python3
"""
Telegram notification manager for the Linear transition action.

This module handles sending notifications to Telegram about the outcome
of each team's transition run.
"""

import logging
from telegram import Bot
from telegram.error import TelegramError

from .models import GroupResult, RunReport


class TelegramNotifier:
    """Telegram notification manager"""

    def __init__(self, bot_token: str, chat_id: str):
        self.bot = Bot(token=bot_token)
        self.chat_id = chat_id

    async def send_message(self, message: str, parse_mode: str = "Markdown"):
        """Send a message to Telegram"""
        try:
            # Truncate message if too long
            max_length = 4000
            if len(message) > max_length:
                message = message[:max_length] + "\n... (truncated)"

            await self.bot.send_message(
                chat_id=self.chat_id,
                text=message,
                parse_mode=parse_mode
            )
        except TelegramError as e:
            logging.error(f"Failed to send Telegram message: {e}")

    async def notify_group_complete(self, result: GroupResult):
        """Notify that a team's issues were processed"""
        emoji = "✅" if result.ok else "⚠️"
        message = f"{emoji} *Team {result.team_key}*: {len(result.updated)} issues updated"
        if result.skipped:
            message += f", {len(result.skipped)} skipped"
        for error in result.errors:
            message += f"\n```\n{error[-500:]}\n```"
        await self.send_message(message)

    async def notify_group_failed(self, result: GroupResult):
        """Notify that a team's run was aborted"""
        message = f"❌ *Team {result.team_key} failed*:\n{result.message}"
        await self.send_message(message)

    async def notify_summary(self, report: RunReport):
        """Send the whole run report"""
        message = f"```\n{report.to_text()}\n```"
        await self.send_message(message)
