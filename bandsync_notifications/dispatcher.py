"""Fan-out delivery of one payload to every address of a user."""

from __future__ import annotations

import asyncio

from instrukt_ai_logging import get_logger

from bandsync_notifications.gateway.base import DeliveryError, PushGateway
from bandsync_notifications.models import Address, DeliveryOutcome, DeliveryReport, NotificationPayload, short_token

logger = get_logger(__name__)


class Dispatcher:
    """Sends to all addresses concurrently and settles every attempt.

    One failing address never cancels or raises for its siblings; each
    attempt ends up as a ``DeliveryReport``. No retries happen here.
    """

    def __init__(self, gateway: PushGateway) -> None:
        self._gateway = gateway

    async def dispatch(
        self, addresses: list[Address], payload: NotificationPayload, user_id: str
    ) -> list[DeliveryReport]:
        if not addresses:
            return []
        tasks = [self._gateway.send(address.token, payload) for address in addresses]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        reports: list[DeliveryReport] = []
        for address, result in zip(addresses, results):
            outcome = self._settle(address, result, user_id)
            reports.append(DeliveryReport(token=address.token, outcome=outcome))
        return reports

    def _settle(self, address: Address, result: object, user_id: str) -> DeliveryOutcome:
        token = short_token(address.token)
        if isinstance(result, DeliveryError):
            if result.is_invalid_address:
                logger.info("push token rejected as invalid", user_id=user_id, token=token, code=result.code)
                return DeliveryOutcome.invalid_address(result.detail)
            logger.warning("push delivery failed", user_id=user_id, token=token, detail=result.detail)
            return DeliveryOutcome.transient_failure(result.detail)
        if isinstance(result, BaseException):
            if not isinstance(result, Exception):
                # Cancellation and interpreter exits are not delivery outcomes.
                raise result
            logger.error("push delivery raised", user_id=user_id, token=token, error=repr(result))
            return DeliveryOutcome.transient_failure(repr(result))
        logger.info("push delivered", user_id=user_id, token=token, message_id=result)
        return DeliveryOutcome.success(str(result))
