"""Evidence normalization: raw transaction record to ``ExecutionTrace``."""

import json
from typing import Any

from ..data.records import TransactionRecord
from ..utils.logger import get_logger
from .types import ExecutionTrace

logger = get_logger(__name__)

NO_METADATA_ERROR = "No metadata available"


def _format_error(err: Any) -> str:
    if isinstance(err, str):
        return err
    try:
        return json.dumps(err, sort_keys=True, separators=(",", ":"))
    except (TypeError, ValueError):
        return repr(err)


class EvidenceNormalizer:
    """Turns a fetched transaction into the trace every detection rule reads."""

    def normalize(self, record: TransactionRecord) -> ExecutionTrace:
        accounts = tuple(record.account_keys())
        meta = record.meta

        if meta is None:
            logger.debug("Transaction %s has no execution metadata", record.signature)
            return ExecutionTrace(
                success=False,
                error=NO_METADATA_ERROR,
                resource_units_consumed=0,
                logs=(),
                accessed_accounts=accounts,
            )

        err = meta.get("err")
        logs = meta.get("logMessages")
        try:
            units = max(int(meta.get("computeUnitsConsumed") or 0), 0)
        except (TypeError, ValueError):
            units = 0

        return ExecutionTrace(
            success=err is None,
            error=None if err is None else _format_error(err),
            resource_units_consumed=units,
            logs=tuple(str(line) for line in logs) if isinstance(logs, list) else (),
            accessed_accounts=accounts,
        )
