"""Unit tests for configuration loading and input grouping"""

import json
import os
import sys

import pytest

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from linear_transition.config import Config
from linear_transition.inputs import parse_inputs, partition_identifiers
from linear_transition.models import RequestGroup


def make_config(**inputs):
    environ = {f"INPUT_{key.upper()}": value for key, value in inputs.items()}
    return Config(environ=environ)


class TestConfig:
    """Test Config class"""

    def test_reads_action_inputs_from_environment(self):
        config = make_config(
            api_key="test_api_key",
            team_key="ENG, OPS",
            transition_to="Done",
            issue_identifiers="ENG-1,OPS-2",
            add_labels="label1\nlabel2\n",
            remove_labels="label3",
            transition_from="from1\n\nfrom2",
            filter_label="release"
        )

        assert config.api_key == "test_api_key"
        assert config.team_keys == ["ENG", "OPS"]
        assert config.transition_to == "Done"
        assert config.issue_identifiers == ["ENG-1", "OPS-2"]
        assert config.add_labels == ["label1", "label2"]
        assert config.remove_labels == ["label3"]
        assert config.transition_from == ["from1", "from2"]
        assert config.filter_label == "release"

    def test_omitted_inputs_are_empty(self):
        config = make_config(api_key="key", team_key="ENG")

        assert config.transition_to == ""
        assert config.issue_identifiers == []
        assert config.add_labels == []
        assert config.filter_label == ""
        assert config.request_timeout == 30
        assert config.slack_bot_token == ""

    def test_duplicate_team_keys_collapsed(self):
        assert make_config(api_key="key", team_key="ENG,ENG,OPS").team_keys == ["ENG", "OPS"]

    def test_duplicate_labels_collapsed(self):
        config = make_config(api_key="key", team_key="ENG", add_labels="new\nnew\nbug", remove_labels="v*\nv*")

        assert config.add_labels == ["new", "bug"]
        assert config.remove_labels == ["v*"]

    def test_missing_required_field(self):
        with pytest.raises(ValueError, match="Missing required config field: api_key"):
            make_config(team_key="ENG")

    def test_config_file(self, tmp_path):
        config_path = tmp_path / "config.json"
        config_path.write_text(json.dumps({
            "api_key": "file_key",
            "team_key": ["ENG", "OPS"],
            "add_labels": ["version/v1.0.0", "released"],
            "request_timeout": 10
        }))

        config = Config(str(config_path))

        assert config.api_key == "file_key"
        assert config.team_keys == ["ENG", "OPS"]
        assert config.add_labels == ["version/v1.0.0", "released"]
        assert config.request_timeout == 10

    def test_config_file_not_found(self):
        with pytest.raises(FileNotFoundError):
            Config("nonexistent.json")

    def test_debug_flag(self):
        config = Config(environ={"INPUT_API_KEY": "key", "INPUT_TEAM_KEY": "ENG", "RUNNER_DEBUG": "1"})
        assert config.debug


class TestPartitionIdentifiers:
    """Test splitting identifiers by team"""

    def test_partitions_and_ignores_unknown_teams(self):
        numbers = partition_identifiers(["ENG-1", "OPS-2", "ENG-3", "FAKE-1"], ["ENG", "OPS"])
        assert numbers == {"ENG": [1, 3], "OPS": [2]}

    def test_non_numeric_identifier_skipped(self, caplog):
        numbers = partition_identifiers(["ENG-abc", "ENG-4"], ["ENG"])

        assert numbers == {"ENG": [4]}
        assert "Ignoring issue ENG-abc" in caplog.text

    def test_team_key_with_dash(self):
        assert partition_identifiers(["MY-TEAM-12"], ["MY-TEAM"]) == {"MY-TEAM": [12]}


class TestParseInputs:
    """Test building request groups"""

    def test_single_team(self):
        config = make_config(
            api_key="test_api_key",
            team_key="team",
            transition_to="test_transition_to",
            issue_identifiers="team-1,team-2,team-3",
            add_labels="label1\nlabel2",
            remove_labels="label3\nlabel4",
            transition_from="from1\nfrom2",
            filter_label="label_substring"
        )

        assert parse_inputs(config) == [
            RequestGroup(
                team_key="team",
                transition_to="test_transition_to",
                transition_from=("from1", "from2"),
                issue_numbers=(1, 2, 3),
                add_labels=("label1", "label2"),
                remove_labels=("label3", "label4"),
                filter_label="label_substring"
            )
        ]

    def test_filter_label_without_identifiers_keeps_every_team(self):
        config = make_config(
            api_key="key",
            team_key="team1,team2,team3",
            transition_to="Done",
            filter_label="label_substring"
        )

        groups = parse_inputs(config)

        assert [group.team_key for group in groups] == ["team1", "team2", "team3"]
        assert all(group.issue_numbers == () for group in groups)
        assert all(group.filter_label == "label_substring" for group in groups)

    def test_drops_teams_without_identifiers(self):
        config = make_config(
            api_key="key",
            team_key="team1,team2,team3",
            transition_to="Done",
            issue_identifiers="team1-1,team2-2,team1-3"
        )

        groups = parse_inputs(config)

        assert [(group.team_key, group.issue_numbers) for group in groups] == [
            ("team1", (1, 3)),
            ("team2", (2,)),
        ]

    def test_splits_issues_between_teams(self):
        config = make_config(
            api_key="key",
            team_key="team,team2,team3",
            transition_to="Done",
            issue_identifiers="team-1,team-2,team-3,team2-1,team2-12,team2-13,team3-1,team3-12,team3-23,FAKE-1",
            add_labels="label1\nlabel2"
        )

        groups = parse_inputs(config)

        assert [(group.team_key, group.issue_numbers) for group in groups] == [
            ("team", (1, 2, 3)),
            ("team2", (1, 12, 13)),
            ("team3", (1, 12, 23)),
        ]
        assert all(group.add_labels == ("label1", "label2") for group in groups)

    def test_neither_identifiers_nor_filter_still_builds_group(self):
        # The runner rejects such a group before querying issues
        groups = parse_inputs(make_config(api_key="key", team_key="ENG", transition_to="Done"))

        assert groups == [RequestGroup(team_key="ENG", transition_to="Done")]
