"""Address hygiene — drops push tokens the gateway reported as invalid."""

from __future__ import annotations

from instrukt_ai_logging import get_logger

from bandsync_notifications.models import DeliveryReport, short_token
from bandsync_notifications.store.base import DocumentStore

logger = get_logger(__name__)


class AddressHygiene:
    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    async def reconcile(self, user_id: str, reports: list[DeliveryReport]) -> list[str]:
        """Remove every invalid token found in ``reports``; return the tokens removed.

        Each removal is a targeted update of the user's token fields, and
        removing a token that is already gone does nothing. A failed write
        is logged and does not stop the remaining removals.
        """
        invalid_tokens = list(dict.fromkeys(report.token for report in reports if report.is_invalid_address))
        removed: list[str] = []
        for token in invalid_tokens:
            try:
                await self._store.remove_address(user_id, token)
            except Exception:  # pylint: disable=broad-exception-caught
                logger.exception("failed to remove invalid token", user_id=user_id, token=short_token(token))
                continue
            logger.info("removed invalid token", user_id=user_id, token=short_token(token))
            removed.append(token)
        return removed
