from __future__ import annotations

import os
from typing import Dict, Optional

DEFAULT_ENV_PATH = os.path.join(".env", "env_data.txt")


def read_env_file(env_path: str = DEFAULT_ENV_PATH) -> Dict[str, str]:
    """Parse `key = value` lines, skipping blanks and comments."""
    values: Dict[str, str] = {}
    try:
        with open(env_path, "r", encoding="utf-8") as f:
            for raw in f:
                line = raw.strip()
                if not line or line.startswith("#"):
                    continue
                if "=" not in line:
                    continue
                key, value = (part.strip() for part in line.split("=", 1))
                values[key] = value.strip('"').strip("'")
    except FileNotFoundError:
        pass
    return values


def load_test_credentials(env_path: str = DEFAULT_ENV_PATH) -> Optional[tuple[str, str]]:
    """Credentials from OURGROCERIES_USERNAME/PASSWORD, else from the env file."""
    user = os.getenv("OURGROCERIES_USERNAME")
    pwd = os.getenv("OURGROCERIES_PASSWORD")
    if user and pwd:
        return user, pwd
    values = read_env_file(env_path)
    user = values.get("test.user")
    pwd = values.get("test.password")
    if user and pwd:
        return user, pwd
    return None


def mask_email(value: str) -> str:
    """Shorten an e-mail address for console output: `someone@x.com` -> `so***@x.com`."""
    if "@" not in value:
        return value[:2] + "***" if value else value
    local, domain = value.split("@", 1)
    return f"{local[:2]}***@{domain}"
