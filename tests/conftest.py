"""
Pytest configuration and fixtures for RulesBot tests.
"""

import os
import sys
import tempfile
from pathlib import Path

import pytest
import yaml

# Keep test runs from writing session logs into the project tree
os.environ.setdefault("RULESBOT_LOGS_DIR", tempfile.mkdtemp(prefix="rulesbot-logs-"))

# Add src directory to path so imports work
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from rulesbot.configuration.config_store import ConfigStore  # noqa: E402
from rulesbot.rules.rule_document import RuleDocument  # noqa: E402


SAMPLE_RULES = """Workplace Rules
  1. Be respectful
  2. No spam
  Conduct
    a. Don't shout
    b. Don't interrupt
"""


def sample_config() -> dict:
    return {
        "token": "secret-token",
        "appName": "RulesBot",
        "rulePosts": {
            "channels": "all",
            "minMembers": 3,
            "checkEverySecs": 60,
            "postEveryMsgs": 20,
            "footers": ["Be nice"],
        },
        "listeningPort": 8080,
    }


@pytest.fixture()
def config_path(tmp_path: Path) -> Path:
    path = tmp_path / "config.yml"
    path.write_text(yaml.safe_dump(sample_config(), sort_keys=False), encoding="utf-8")
    return path


@pytest.fixture()
def config_store(config_path: Path) -> ConfigStore:
    return ConfigStore.load(config_path)


@pytest.fixture()
def rules_path(tmp_path: Path) -> Path:
    path = tmp_path / "rules.txt"
    path.write_text(SAMPLE_RULES, encoding="utf-8")
    return path


@pytest.fixture()
def rule_document(rules_path: Path) -> RuleDocument:
    return RuleDocument.load(rules_path)
