#!/usr/bin/env python3
"""
Configuration management for the Linear transition action.

Inputs are read the way the GitHub Actions runner passes them, as
INPUT_<NAME> environment variables, or from a JSON file for local runs.
Actions only support string inputs, so lists arrive as comma or newline
separated strings and absent inputs as empty strings.
"""

import json
import os
from pathlib import Path
from typing import Dict, List, Mapping, Optional

REQUIRED_INPUTS = ["api_key", "team_key"]
COMMA_SEPARATED_INPUTS = ["team_key", "issue_identifiers"]


def split_lines(value: str) -> List[str]:
    return [line.strip() for line in value.split("\n") if line.strip()]


def split_commas(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Config:
    """Configuration management"""

    def __init__(self, config_path: Optional[str] = None, environ: Optional[Mapping[str, str]] = None):
        self.config_path = Path(config_path) if config_path else None
        self._environ = os.environ if environ is None else environ
        self._config = self._load_config()

    def _load_config(self) -> Dict[str, str]:
        """Load inputs from the JSON file if given, else from the environment"""
        if self.config_path is not None:
            if not self.config_path.exists():
                raise FileNotFoundError(
                    f"Configuration file not found: {self.config_path}\n"
                    "Please create it from config.example.json"
                )
            with open(self.config_path) as f:
                config = {key: self._as_input(key, value) for key, value in json.load(f).items()}
        else:
            config = {
                key[len("INPUT_"):].lower(): value
                for key, value in self._environ.items()
                if key.startswith("INPUT_")
            }

        for field in REQUIRED_INPUTS:
            if not config.get(field, "").strip():
                raise ValueError(f"Missing required config field: {field}")

        return config

    @staticmethod
    def _as_input(name: str, value) -> str:
        """Flatten JSON values into the string form Actions would pass"""
        if isinstance(value, list):
            separator = "," if name in COMMA_SEPARATED_INPUTS else "\n"
            return separator.join(str(item) for item in value)
        return "" if value is None else str(value)

    def get_input(self, name: str) -> str:
        return self._config.get(name, "").strip()

    @property
    def api_key(self) -> str:
        return self.get_input("api_key")

    @property
    def team_keys(self) -> List[str]:
        return list(dict.fromkeys(split_commas(self.get_input("team_key"))))

    @property
    def transition_to(self) -> str:
        return self.get_input("transition_to")

    @property
    def transition_from(self) -> List[str]:
        return split_lines(self.get_input("transition_from"))

    @property
    def issue_identifiers(self) -> List[str]:
        return split_commas(self.get_input("issue_identifiers"))

    @property
    def add_labels(self) -> List[str]:
        return list(dict.fromkeys(split_lines(self.get_input("add_labels"))))

    @property
    def remove_labels(self) -> List[str]:
        return list(dict.fromkeys(split_lines(self.get_input("remove_labels"))))

    @property
    def filter_label(self) -> str:
        return self.get_input("filter_label")

    @property
    def request_timeout(self) -> int:
        return int(self.get_input("request_timeout") or 30)

    @property
    def telegram_bot_token(self) -> str:
        return self.get_input("telegram_bot_token")

    @property
    def telegram_chat_id(self) -> str:
        return self.get_input("telegram_chat_id")

    @property
    def slack_bot_token(self) -> str:
        return self.get_input("slack_bot_token")

    @property
    def slack_channel_id(self) -> str:
        return self.get_input("slack_channel_id")

    @property
    def debug(self) -> bool:
        return self._environ.get("RUNNER_DEBUG") == "1" or self._environ.get("ACTIONS_STEP_DEBUG") == "true"
