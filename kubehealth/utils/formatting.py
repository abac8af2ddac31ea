"""Normalizers for raw Kubernetes quantities, timestamps and labels."""

import re
from datetime import datetime, timedelta, timezone
from decimal import ROUND_CEILING, Decimal, InvalidOperation
from typing import Dict, List, Optional

ROLE_LABEL_PREFIX = "node-role.kubernetes.io/"
DEFAULT_ROLE = "worker"
UNKNOWN_IMAGE_VERSION = "latest"

BINARY_SUFFIXES = ["Ki", "Mi", "Gi", "Ti", "Pi", "Ei"]

# Multipliers for Kubernetes resource quantity suffixes
QUANTITY_MULTIPLIERS: Dict[str, Decimal] = {
    "n": Decimal("1e-9"),
    "u": Decimal("1e-6"),
    "m": Decimal("1e-3"),
    "": Decimal(1),
    "k": Decimal(10) ** 3,
    "M": Decimal(10) ** 6,
    "G": Decimal(10) ** 9,
    "T": Decimal(10) ** 12,
    "P": Decimal(10) ** 15,
    "E": Decimal(10) ** 18,
    "Ki": Decimal(2) ** 10,
    "Mi": Decimal(2) ** 20,
    "Gi": Decimal(2) ** 30,
    "Ti": Decimal(2) ** 40,
    "Pi": Decimal(2) ** 50,
    "Ei": Decimal(2) ** 60,
}

_QUANTITY_RE = re.compile(r"^([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)([a-zA-Z]*)$")


def format_age(delta: timedelta) -> str:
    """Render an elapsed duration using its coarsest non-zero unit."""
    seconds = delta.total_seconds()

    days = int(seconds // 86400)
    if days > 0:
        return f"{days}d"

    hours = int(seconds // 3600)
    if hours > 0:
        return f"{hours}h"

    minutes = int(seconds // 60)
    if minutes > 0:
        return f"{minutes}m"

    return f"{seconds:.0f}s"


def age_since(created: Optional[datetime], now: Optional[datetime] = None) -> str:
    """Age of a resource from its creation timestamp."""
    if created is None:
        return "unknown"
    now = now or datetime.now(timezone.utc)
    return format_age(now - created)


def format_bytes(num_bytes: int) -> str:
    """Format a byte count with 1024-based units."""
    unit = 1024
    if num_bytes < unit:
        return f"{num_bytes} B"

    div, exp = unit, 0
    n = num_bytes // unit
    while n >= unit and exp < len(BINARY_SUFFIXES) - 1:
        div *= unit
        exp += 1
        n //= unit

    return f"{num_bytes / div:.1f} {BINARY_SUFFIXES[exp]}B"


def format_cpu(milli_cores: int) -> str:
    """Format CPU milli-cores as either millis or whole cores."""
    if milli_cores == 0:
        return "0m"
    if milli_cores < 1000:
        return f"{milli_cores}m"
    return f"{milli_cores / 1000:.2f}"


def format_cores(milli_cores: int) -> str:
    """Whole cores with one decimal place."""
    return f"{milli_cores / 1000:.1f}"


def extract_roles(labels: Optional[Dict[str, str]]) -> List[str]:
    """Collect node roles from role labels, in label order."""
    roles = []
    for key in labels or {}:
        if ROLE_LABEL_PREFIX in key:
            role = key.split(ROLE_LABEL_PREFIX, 1)[1]
            if role:
                roles.append(role)

    return roles or [DEFAULT_ROLE]


def extract_version_from_image(image: str) -> str:
    """Return the tag of an image reference, or "latest" when unknown."""
    parts = image.split(":")
    if len(parts) > 1:
        version = parts[-1]
        if version and version != UNKNOWN_IMAGE_VERSION:
            return version
    return UNKNOWN_IMAGE_VERSION


def parse_quantity(quantity) -> Optional[Decimal]:
    """Parse a Kubernetes resource quantity into a Decimal."""
    if quantity is None:
        return None
    if isinstance(quantity, (int, float)):
        return Decimal(str(quantity))

    match = _QUANTITY_RE.match(str(quantity).strip())
    if not match:
        return None

    number, suffix = match.groups()
    multiplier = QUANTITY_MULTIPLIERS.get(suffix)
    if multiplier is None:
        return None

    try:
        return Decimal(number) * multiplier
    except InvalidOperation:
        return None


def parse_cpu_millis(quantity) -> int:
    """CPU quantity in milli-cores; unparsable values count as zero."""
    value = parse_quantity(quantity)
    if value is None:
        return 0
    return int((value * 1000).to_integral_value(rounding=ROUND_CEILING))


def parse_memory_bytes(quantity) -> int:
    """Memory quantity in bytes; unparsable values count as zero."""
    value = parse_quantity(quantity)
    if value is None:
        return 0
    return int(value.to_integral_value(rounding=ROUND_CEILING))


def parse_int(value, default: int = 0) -> int:
    """Leading integer of a value such as "27" or "27+"."""
    match = re.match(r"\s*(\d+)", str(value or ""))
    if match:
        return int(match.group(1))
    return default


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an RFC3339 timestamp into an aware datetime."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_rfc3339(value: Optional[datetime]) -> str:
    """Render a datetime as RFC3339 with second precision."""
    if value is None:
        return ""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    if value.utcoffset() == timedelta(0):
        return value.strftime("%Y-%m-%dT%H:%M:%SZ")
    return value.isoformat(timespec="seconds")
