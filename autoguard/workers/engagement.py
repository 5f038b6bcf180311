"""Customer engagement worker with templated messages.

The owner's reply comes from a responder callable (a scripted reply by
default) and is classified with simple keyword rules.
"""

from __future__ import annotations

import logging
import re
import uuid
from typing import Awaitable, Callable, Optional

from ..contracts import DiagnosisReport, EngagementOutcome
from ..telemetry.models import VehicleProfile
from .base import EngagementWorker

logger = logging.getLogger(__name__)

Responder = Callable[[VehicleProfile, str], Awaitable[Optional[str]]]

ACCEPT_WORDS = {"yes", "sure", "book", "okay", "ok", "schedule"}
DECLINE_WORDS = {"no", "not", "later", "decline"}


def classify_intent(response: Optional[str]) -> str:
    """Return ``accept``, ``decline`` or ``question`` for a customer reply."""
    if not response:
        return "no_response"
    words = set(re.findall(r"[a-z]+", response.lower()))
    if words & DECLINE_WORDS:
        return "decline"
    if words & ACCEPT_WORDS:
        return "accept"
    return "question"


async def _always_accept(vehicle: VehicleProfile, message: str) -> Optional[str]:
    return "Yes, please book an appointment"


class KeywordEngagementWorker(EngagementWorker):
    """Opens a conversation with the owner and records their intent."""

    def __init__(self, responder: Optional[Responder] = None) -> None:
        self._responder = responder or _always_accept

    async def engage(
        self, vehicle: VehicleProfile, diagnosis: DiagnosisReport
    ) -> EngagementOutcome:
        conversation_id = f"CONV-{uuid.uuid4()}"
        message = opening_message(vehicle, diagnosis)
        logger.info(f"Initiating contact for vehicle {vehicle.id} ({conversation_id})")

        response = await self._responder(vehicle, message)
        intent = classify_intent(response)
        logger.info(f"Customer intent for {conversation_id}: {intent}")

        return EngagementOutcome(
            conversation_id=conversation_id,
            customer_name=vehicle.owner_name,
            customer_phone=vehicle.owner_phone,
            opening_message=message,
            customer_response=response,
            intent=intent,
            customer_accepted=intent == "accept",
        )


def opening_message(vehicle: VehicleProfile, diagnosis: DiagnosisReport) -> str:
    name = vehicle.owner_name or "there"
    car = " ".join(part for part in (vehicle.make, vehicle.model) if part) or "vehicle"
    components = ", ".join(diagnosis.diagnosis.components()) or "routine service"
    cost = diagnosis.estimated_cost
    return (
        f"Hello {name}, our monitoring of your {car} suggests attention is needed "
        f"for: {components}. Urgency: {diagnosis.urgency.level.lower()} "
        f"(within {diagnosis.urgency.schedule_within}). Estimated cost "
        f"{cost.currency} {cost.min:.0f}-{cost.max:.0f}. "
        f"Would you like us to book a service appointment?"
    )
