"""Post-service feedback requests."""

from __future__ import annotations

import logging
import uuid
from typing import List

from ..contracts import Appointment, FeedbackQuestion, FeedbackRequest
from .base import FeedbackWorker

logger = logging.getLogger(__name__)

QUESTIONNAIRE = [
    FeedbackQuestion(
        id="Q1",
        type="rating",
        scale=5,
        category="overall_satisfaction",
        question="How satisfied are you with the overall service experience?",
    ),
    FeedbackQuestion(
        id="Q2",
        type="rating",
        scale=5,
        category="service_quality",
        question="How would you rate the quality of work performed on your vehicle?",
    ),
    FeedbackQuestion(
        id="Q3",
        type="rating",
        scale=5,
        category="communication",
        question="How satisfied are you with the communication from our service team?",
    ),
    FeedbackQuestion(
        id="Q4",
        type="rating",
        scale=5,
        category="facility",
        question="How would you rate the cleanliness and professionalism of our service center?",
    ),
    FeedbackQuestion(
        id="Q5",
        type="boolean",
        category="timeliness",
        question="Was the service completed within the estimated time?",
    ),
    FeedbackQuestion(
        id="Q6",
        type="boolean",
        category="cost_accuracy",
        question="Did the final cost match the initial estimate?",
    ),
    FeedbackQuestion(
        id="Q7",
        type="text",
        category="positive_feedback",
        question="What did you like most about your service experience?",
    ),
    FeedbackQuestion(
        id="Q8",
        type="text",
        category="improvement_suggestions",
        question="What areas do you think we could improve?",
    ),
    FeedbackQuestion(
        id="Q9",
        type="rating",
        scale=10,
        category="nps",
        question="How likely are you to recommend our service center to others?",
    ),
]


class FeedbackCollector(FeedbackWorker):
    """Opens a pending feedback request for each booked appointment."""

    def __init__(self) -> None:
        self._requests: List[FeedbackRequest] = []

    async def collect_feedback(self, appointment: Appointment) -> FeedbackRequest:
        request = FeedbackRequest(
            id=f"FB-{uuid.uuid4()}",
            appointment_id=appointment.id,
            vehicle_id=appointment.vehicle_id,
            customer_name=appointment.customer_name,
            service_center_id=appointment.service_center_id,
            service_center_name=appointment.service_center_name,
            service_date=appointment.appointment_date,
            questions=[q.model_copy() for q in QUESTIONNAIRE],
        )
        self._requests.append(request)
        logger.info(f"Feedback request {request.id} created for appointment {appointment.id}")
        return request

    def pending(self) -> List[FeedbackRequest]:
        return [r for r in self._requests if r.status == "pending"]
