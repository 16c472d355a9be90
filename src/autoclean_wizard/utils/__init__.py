"""Utility functions and helpers.

Import specific modules directly:

    from autoclean_wizard.utils.config import load_wizard_config
    from autoclean_wizard.utils.logging import message
    from autoclean_wizard.utils.montage import VALID_MONTAGES
"""
