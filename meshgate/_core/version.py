"""
Version constants for meshgate.

The version string is also sent to the control plane as the client
user agent on both transports.
"""

from __future__ import annotations

# meshgate version (user-facing semver)
GATE_VERSION = "0.1.0"

# Product token used in User-Agent headers
USER_AGENT_PRODUCT = "meshgate"


def user_agent() -> str:
    """
    Build the User-Agent string sent with every control-plane request.

    Returns:
        String like "meshgate/0.1.0"
    """
    return f"{USER_AGENT_PRODUCT}/{GATE_VERSION}"
