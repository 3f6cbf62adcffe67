"""
Best-effort lookup of the developer's public IPv4 address.

Development aid only: never called unless developer mode is switched on in
context, and a failure never aborts synthesis.
"""

import ipaddress
import logging
import subprocess
from typing import Optional

logger = logging.getLogger(__name__)

DIG_COMMAND = ["dig", "-4", "TXT", "+short", "o-o.myaddr.l.google.com", "@ns1.google.com"]
LOOKUP_TIMEOUT_SECONDS = 10


def lookup_developer_ip(timeout: int = LOOKUP_TIMEOUT_SECONDS) -> Optional[str]:
    """
    Ask Google's resolver which address this machine reaches it from.

    Returns:
        The IPv4 address as a string, or None when the lookup fails
    """
    try:
        result = subprocess.run(
            DIG_COMMAND,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=True
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.warning("Developer IP lookup failed, skipping developer rule: %s", e)
        return None

    # Output looks like "203.0.113.7" with the TXT quotes
    lines = result.stdout.strip().splitlines()
    address = (lines[0] if lines else "").strip().replace('"', "").replace("'", "")
    try:
        return str(ipaddress.IPv4Address(address))
    except ValueError:
        logger.warning("Developer IP lookup returned %r, skipping developer rule", address)
        return None
