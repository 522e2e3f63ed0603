"""
Shared environment and credential helpers.

Authentication itself is delegated to the Azure CLI (`az login`); this module
only loads the optional .env file that carries toolkit settings and prints
guidance when the CLI session is missing.
"""

import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

ENV_FILE_VARIABLE = "FABRIC_AUDIT_ENV_FILE"


def resolve_env_path(env_path: Optional[str] = None) -> str:
    """
    Determine which .env file should be loaded.

    Priority order:
      1. Explicit parameter
      2. FABRIC_AUDIT_ENV_FILE environment variable
      3. ~/.env
    """
    if env_path:
        return env_path
    configured = os.environ.get(ENV_FILE_VARIABLE)
    if configured:
        return configured
    return str(Path.home() / ".env")


def load_environment(env_path: Optional[str] = None) -> str:
    """
    Load settings from the resolved .env file into the process environment.

    Variables already present in the environment win over the file.

    Returns:
        str: The path that was resolved (whether or not it existed)
    """
    resolved_path = resolve_env_path(env_path)
    if load_dotenv(resolved_path, override=False):
        logging.info("Loaded settings from %s", resolved_path)
    else:
        logging.debug("No settings loaded from %s", resolved_path)
    return resolved_path


def print_login_guidance():
    """Explain how to create an Azure CLI session."""
    print("Please sign in with the Azure CLI first:")
    print("  az login")
    print("  az login --tenant <tenant-id>   # for a specific directory")
    print("Then re-run this audit.")


def print_install_guidance():
    """Explain how to install the Azure CLI."""
    print("The Azure CLI ('az') was not found on PATH or in the usual install locations.")
    print("Install it from https://learn.microsoft.com/cli/azure/install-azure-cli")
    print("  macOS:   brew install azure-cli")
    print("  Linux:   curl -sL https://aka.ms/InstallAzureCLIDeb | sudo bash")
    print("  Windows: winget install -e --id Microsoft.AzureCLI")
