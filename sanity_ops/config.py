"""
Environment + path configuration shared by every script.

Credentials are read from environment variables, optionally loaded from a
.env file (first existing path in ENV_PATHS wins).

Required for anything that talks to Sanity:
    SANITY_PROJECT_ID, SANITY_DATASET, SANITY_TOKEN

Optional:
    SANITY_API_VERSION          (default: 2024-01-15)
    SANITY_OPS_DATA_DIR         (default: <project>/.data)
    SUPABASE_URL / VITE_SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY
                                (legacy KV export only)
"""

import os
import sys
from pathlib import Path

from dotenv import load_dotenv

# =============================================================================
# CONFIGURATION
# =============================================================================

PACKAGE_DIR = Path(__file__).parent
PROJECT_ROOT = PACKAGE_DIR.parent

DEFAULT_API_VERSION = "2024-01-15"

SANITY_ENV_VARS = ("SANITY_PROJECT_ID", "SANITY_DATASET", "SANITY_TOKEN")

ENV_PATHS = [
    PROJECT_ROOT / ".env",
    Path.home() / "sanity-ops" / ".env",
]


class ConfigError(Exception):
    """Raised when required configuration is missing."""
    pass


# =============================================================================
# CREDENTIAL LOADING
# =============================================================================


def load_env():
    """Load environment variables from the first .env file found. Returns its path or None."""
    for env_path in ENV_PATHS:
        if env_path.exists():
            load_dotenv(env_path)
            return env_path
    return None


def require_env(*names: str) -> dict:
    """Return {name: value} for every name, or raise ConfigError listing the missing ones."""
    values = {name: os.getenv(name) for name in names}
    missing = [name for name, value in values.items() if not value]
    if missing:
        raise ConfigError(f"Missing {', '.join(missing)}")
    return values


def get_api_version() -> str:
    return os.getenv("SANITY_API_VERSION", DEFAULT_API_VERSION)


def get_data_dir() -> Path:
    """Directory holding the KV export, the staging file and the image map."""
    return Path(os.getenv("SANITY_OPS_DATA_DIR", str(PROJECT_ROOT / ".data")))


def get_store_client(api_version: str = None):
    """Build a SanityClient from SANITY_* environment variables."""
    # Imported here so config stays importable without the store package
    from sanity_ops.store.client import SanityClient

    env = require_env(*SANITY_ENV_VARS)
    return SanityClient(
        project_id=env["SANITY_PROJECT_ID"],
        dataset=env["SANITY_DATASET"],
        token=env["SANITY_TOKEN"],
        api_version=api_version or get_api_version(),
    )


# =============================================================================
# SCRIPT ENTRY
# =============================================================================


def print_banner(title: str, width: int = 70):
    print("=" * width)
    print(title)
    print("=" * width)
    print()


def run_script(run, *args, **kwargs):
    """
    Run a script body with the standard operator contract.

    Loads .env, calls run(*args, **kwargs), and on any unhandled error prints
    it and exits non-zero. Returns whatever run returned.
    """
    env_path = load_env()
    if env_path:
        print(f"Loaded credentials from: {env_path}")
    else:
        print("WARNING: No .env file found")

    try:
        return run(*args, **kwargs)
    except Exception as e:
        print(f"\nERROR: {e}")
        sys.exit(1)
