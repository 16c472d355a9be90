"""Test configuration and fixtures."""

import pytest

from autoclean_wizard.core.session import WizardSession
from autoclean_wizard.templates.config_templates import get_task_config


@pytest.fixture
def resting_tree():
    """Wizard configuration started from the RestingState template."""
    return {"tasks": {"RestingState": get_task_config("RestingState")}}


@pytest.fixture
def event_tree():
    """Wizard configuration started from the EventBased template."""
    return {"tasks": {"EventBased": get_task_config("EventBased")}}


@pytest.fixture
def wizard_config(tmp_path):
    """Wizard settings that write downloads under a temporary directory."""
    return {
        "log_level": "INFO",
        "output_dir": tmp_path / "tasks",
        "default_template": "RestingState",
        "fallback_class_name": "CustomTask",
    }


@pytest.fixture
def session(wizard_config):
    """A session started from the default template."""
    wizard_session = WizardSession(wizard_config)
    wizard_session.start_from_template()
    return wizard_session
