"""
Check Engine - Result-Set Synthesizer.

============================================================
PURPOSE
============================================================
Deterministically derives a bounded sequence of historical
result records for a check.

PATTERN (fixed demo constants, kept for compatibility):
- index i is FAILURE when i % 3 == 0, otherwise SUCCESS
- SUCCESS: 100ms + 10ms * i, "Check completed successfully"
- FAILURE: 500ms + 20ms * i, "Timeout waiting for response"
- timestamp: now - i hours (index 0 is the most recent)
- id: "res-<check_id>-<i>"

Optional fields (region, response body/code, failure reason)
are always unset here.

============================================================
"""

import logging
from datetime import timedelta
from typing import List, Optional

from .clock import ClockProtocol, get_clock
from .errors import ValidationError
from .types import CheckResult, ResultStatus
from .validation import require_identity


logger = logging.getLogger(__name__)


SUCCESS_MESSAGE = "Check completed successfully"
FAILURE_MESSAGE = "Timeout waiting for response"

SUCCESS_BASE_MS = 100
SUCCESS_STEP_MS = 10
FAILURE_BASE_MS = 500
FAILURE_STEP_MS = 20
FAILURE_EVERY = 3


class ResultSynthesizer:
    """Generates reproducible result sequences from the injected clock."""

    def __init__(self, clock: Optional[ClockProtocol] = None):
        self._clock = clock or get_clock()

    def synthesize(self, check_identity: str, count: int) -> List[CheckResult]:
        """
        Produce exactly `count` results for a check.

        Raises:
            ValidationError: If check_identity is empty or count is negative
        """
        require_identity(check_identity, "list_results")
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            raise ValidationError(
                f"result count must be a non-negative integer, got {count!r}",
                fields=["limit"],
                code="VAL_INVALID_LIMIT",
            )

        now = self._clock.now()
        results: List[CheckResult] = []
        for i in range(count):
            if i % FAILURE_EVERY == 0:
                status = ResultStatus.FAILURE
                response_time = FAILURE_BASE_MS + i * FAILURE_STEP_MS
                message = FAILURE_MESSAGE
            else:
                status = ResultStatus.SUCCESS
                response_time = SUCCESS_BASE_MS + i * SUCCESS_STEP_MS
                message = SUCCESS_MESSAGE

            results.append(CheckResult(
                id=f"res-{check_identity}-{i}",
                check_id=check_identity,
                status=status,
                response_time=response_time,
                message=message,
                timestamp=self._clock.format_rfc3339(now - timedelta(hours=i)),
            ))

        logger.debug(f"Synthesized {len(results)} results for check {check_identity}")
        return results
