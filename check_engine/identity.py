"""
Check Engine - Identity Generator.

============================================================
PURPOSE
============================================================
Produces the identity of a newly created check.

ALGORITHM:
    sha256("<name>-<address>-<timestamp_ns>")[:8 bytes]
    -> "<prefix>-<16 lowercase hex chars>"

The nanosecond timestamp makes collisions between two creates
with identical name/address negligible; with an injected clock
the output is fully deterministic.

============================================================
"""

import hashlib
import logging
import re
from typing import Optional, Sequence

from .clock import ClockProtocol, get_clock
from .errors import ValidationError
from .schema import CheckSchema


logger = logging.getLogger(__name__)


DIGEST_PREFIX_BYTES = 8

IDENTITY_PATTERN = re.compile(r"^(?P<prefix>[a-z]{2})-(?P<digest>[0-9a-f]{16})$")


def generate(kind_prefix: str, seed_fields: Sequence[Optional[str]], timestamp_ns: int) -> str:
    """
    Generate an identity from a kind prefix, seed fields and a timestamp.

    Args:
        kind_prefix: Two-letter kind tag ("hc", "ac")
        seed_fields: Name followed by the primary address field
        timestamp_ns: Creation time in nanoseconds

    Returns:
        Identity of the form "<prefix>-<16 hex chars>"

    Raises:
        ValidationError: If the name (first seed field) is unset or empty
    """
    if not seed_fields or not seed_fields[0]:
        raise ValidationError(
            "check name is required",
            fields=["name"],
            code="VAL_MISSING_NAME",
        )

    material = "-".join(value or "" for value in seed_fields)
    material = f"{material}-{timestamp_ns}"
    digest = hashlib.sha256(material.encode("utf-8")).digest()
    return f"{kind_prefix}-{digest[:DIGEST_PREFIX_BYTES].hex()}"


def is_identity(value: str, prefix: Optional[str] = None) -> bool:
    """Check whether a string has the shape of a generated identity."""
    match = IDENTITY_PATTERN.match(value or "")
    if not match:
        return False
    return prefix is None or match.group("prefix") == prefix


class IdentityGenerator:
    """
    Assigns identities for one resource kind.

    Reads the creation timestamp from the injected clock.
    """

    def __init__(self, schema: CheckSchema, clock: Optional[ClockProtocol] = None):
        self._schema = schema
        self._clock = clock or get_clock()

    @property
    def prefix(self) -> str:
        return self._schema.id_prefix

    def for_record(self, record) -> str:
        """Generate an identity from a draft record's name and address."""
        name = record.name.get()
        address = getattr(record, self._schema.address_field).get("")
        identity = generate(self.prefix, [name, address], self._clock.now_ns())
        logger.debug(f"Generated identity {identity} for {self._schema.type_name} '{name}'")
        return identity
