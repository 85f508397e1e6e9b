"""Structured audit trail for create/update/delete operations.

Every service mutation calls ``audit()`` once the write succeeds. Entries are
plain structlog lines under the ``audit`` logger, so shipping them somewhere
durable is a log-pipeline concern.
"""

import logging
from typing import Any

from core.auth import CurrentUser
from core.logger import get_logger

logger = get_logger("audit")


def audit(
    event: str,
    actor: CurrentUser | None,
    *,
    level: int = logging.INFO,
    **fields: Any,
) -> None:
    """Emit ``audit.<event>`` with the acting user and identifying fields.

    Never raises: an audit failure must not change the outcome of the
    operation being audited.
    """
    try:
        logger.log(
            level,
            f"audit.{event}",
            actor_id=actor.user_id if actor else None,
            actor_username=actor.username if actor else None,
            actor_role=actor.role if actor else None,
            **{k: _jsonable(v) for k, v in fields.items()},
        )
    except Exception:  # noqa: BLE001
        logging.getLogger(__name__).debug("audit.emit.failed", exc_info=True)


def _jsonable(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)
