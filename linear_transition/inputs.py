#!/usr/bin/env python3
"""
Splits action inputs into one request group per team.
"""

import logging
from typing import Dict, List

from .config import Config
from .models import RequestGroup


def partition_identifiers(identifiers: List[str], team_keys: List[str]) -> Dict[str, List[int]]:
    """Group 'KEY-123' identifiers into issue numbers per team key.

    Identifiers of teams that were not requested are ignored.
    """
    numbers: Dict[str, List[int]] = {key: [] for key in team_keys}
    for identifier in identifiers:
        key, _, number = identifier.rpartition("-")
        if key not in numbers:
            logging.debug(f"Ignoring issue {identifier}: team {key or '?'} was not requested")
            continue
        try:
            numbers[key].append(int(number))
        except ValueError:
            logging.warning(f"Ignoring issue {identifier}: {number!r} is not an issue number")
    return numbers


def parse_inputs(config: Config) -> List[RequestGroup]:
    """Build the request groups described by the configuration"""
    team_keys = config.team_keys
    identifiers = config.issue_identifiers
    numbers_by_team = partition_identifiers(identifiers, team_keys)

    groups = []
    for team_key in team_keys:
        issue_numbers = numbers_by_team[team_key]
        # Teams without any of the provided identifiers have nothing to do.
        if identifiers and not issue_numbers:
            logging.info(f"No issue identifiers provided for team {team_key}. Skipping")
            continue

        groups.append(RequestGroup(
            team_key=team_key,
            transition_to=config.transition_to,
            transition_from=tuple(config.transition_from),
            issue_numbers=tuple(issue_numbers),
            add_labels=tuple(config.add_labels),
            remove_labels=tuple(config.remove_labels),
            filter_label=config.filter_label
        ))

    return groups
