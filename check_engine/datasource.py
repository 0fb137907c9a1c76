"""
Check Engine - Check Results Data Source.

============================================================
PURPOSE
============================================================
Read-only view over a check's historical results.

RULES:
- limit defaults to 10 when unset
- a negative limit is rejected
- instance id is "results-<check_id>-<unix_seconds>"
- optional start_time/end_time (RFC 3339) bound the returned
  results, both ends inclusive

Results never touch the check they reference.

============================================================
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from .adapters.base import CheckAdapter
from .clock import ClockProtocol, get_clock, parse_rfc3339
from .config import ResultsConfig
from .errors import BackendError, CheckEngineError, ValidationError
from .types import CheckResult, TriState, UNSET
from .validation import require_identity


logger = logging.getLogger(__name__)


DATA_SOURCE_TYPE = "check_results"


@dataclass
class CheckResultsData:
    """State of one check_results data source read."""

    id: str
    """Instance id: results-<check_id>-<unix_seconds>."""

    check_id: str

    limit: int

    start_time: TriState[str] = UNSET
    end_time: TriState[str] = UNSET

    results: List[CheckResult] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "id": self.id,
            "check_id": self.check_id,
            "limit": self.limit,
            "results": [r.to_dict() for r in self.results],
        }
        if self.start_time.is_set:
            out["start_time"] = self.start_time.value
        if self.end_time.is_set:
            out["end_time"] = self.end_time.value
        return out


def _parse_bound(name: str, bound: TriState[str]) -> Optional[datetime]:
    if bound.is_unset:
        return None
    try:
        return parse_rfc3339(bound.value)
    except (TypeError, ValueError, AttributeError) as e:
        raise ValidationError(
            f"{name} is not an RFC 3339 timestamp: {bound.value!r}",
            fields=[name],
            code="VAL_INVALID_TIMESTAMP",
            cause=e,
        ) from e


class CheckResultsDataSource:
    """
    Lists results for a check through the backend adapter.
    """

    def __init__(
        self,
        adapter: CheckAdapter,
        clock: Optional[ClockProtocol] = None,
        config: Optional[ResultsConfig] = None,
    ):
        self._adapter = adapter
        self._clock = clock or get_clock()
        self._config = config or ResultsConfig()

    @property
    def type_name(self) -> str:
        return DATA_SOURCE_TYPE

    def read(
        self,
        check_id: str,
        limit: TriState[int] = UNSET,
        start_time: TriState[str] = UNSET,
        end_time: TriState[str] = UNSET,
    ) -> CheckResultsData:
        """
        Read up to `limit` results for a check, newest first.

        Raises:
            ValidationError: Empty check_id, negative limit, bad timestamp
            BackendError: If the backend fails
        """
        require_identity(check_id, "list_results")

        count = limit.get(self._config.default_limit)
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            raise ValidationError(
                f"limit must be a non-negative integer, got {count!r}",
                fields=["limit"],
                code="VAL_INVALID_LIMIT",
            )

        lower = _parse_bound("start_time", start_time)
        upper = _parse_bound("end_time", end_time)
        if lower and upper and lower > upper:
            raise ValidationError(
                "start_time is after end_time",
                fields=["start_time", "end_time"],
                code="VAL_INVALID_TIMESTAMP",
            )

        try:
            results = self._adapter.list_results(check_id, count)
        except CheckEngineError:
            raise
        except Exception as e:
            raise BackendError(
                f"Could not list results for check {check_id}: {e}",
                operation="list_results",
                identity=check_id,
                cause=e,
            ) from e

        if lower or upper:
            results = [
                r for r in results
                if (lower is None or parse_rfc3339(r.timestamp) >= lower)
                and (upper is None or parse_rfc3339(r.timestamp) <= upper)
            ]

        data = CheckResultsData(
            id=f"results-{check_id}-{self._clock.timestamp()}",
            check_id=check_id,
            limit=count,
            start_time=start_time,
            end_time=end_time,
            results=results,
        )
        logger.info(f"Read {len(results)} results for check {check_id}")
        return data
