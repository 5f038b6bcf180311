"""Service center scheduling."""

from __future__ import annotations

import logging
import uuid
from datetime import date, timedelta
from typing import Callable, Dict, List, Optional

from pydantic import BaseModel

from ..contracts import Appointment, DiagnosisReport, SchedulingResult
from ..errors import NotFound
from ..telemetry.models import VehicleProfile
from .base import SchedulingWorker

logger = logging.getLogger(__name__)

BOOKING_HORIZON_DAYS = 7


class ServiceCenter(BaseModel):
    id: str
    name: str
    location: str
    opens: int = 9
    closes: int = 18
    max_capacity_per_hour: int = 4


class Slot(BaseModel):
    day: date
    time: str
    end_time: str
    available_capacity: int


DEFAULT_CENTERS = [
    ServiceCenter(
        id="SC001", name="Mumbai Service Center", location="Mumbai", max_capacity_per_hour=4
    ),
    ServiceCenter(
        id="SC002", name="Delhi Service Center", location="Delhi", max_capacity_per_hour=5
    ),
    ServiceCenter(
        id="SC003",
        name="Bangalore Service Center",
        location="Bangalore",
        closes=19,
        max_capacity_per_hour=6,
    ),
    ServiceCenter(
        id="SC004", name="Pune Service Center", location="Pune", max_capacity_per_hour=3
    ),
    ServiceCenter(
        id="SC005", name="Chennai Service Center", location="Chennai", max_capacity_per_hour=4
    ),
]


class ServiceCenterScheduler(SchedulingWorker):
    """Books the first free slot at the owner's nearest service center.

    Appointments are held in memory. A slot of ``n`` hours starting at hour
    ``h`` is free while fewer than ``max_capacity_per_hour`` confirmed
    appointments start inside ``[h, h + n)``.
    """

    def __init__(
        self,
        centers: Optional[List[ServiceCenter]] = None,
        today: Optional[Callable[[], date]] = None,
    ) -> None:
        self._centers = list(centers or DEFAULT_CENTERS)
        self._today = today or date.today
        self._appointments: List[Appointment] = []

    def nearest_center(self, city: Optional[str]) -> ServiceCenter:
        for center in self._centers:
            if center.location == city:
                return center
        return self._centers[0]

    def _center(self, center_id: str) -> ServiceCenter:
        for center in self._centers:
            if center.id == center_id:
                return center
        raise NotFound("Service center", center_id)

    def available_slots(self, center_id: str, day: date, duration_hours: int) -> List[Slot]:
        center = self._center(center_id)
        booked = [
            int(a.time.split(":")[0])
            for a in self._appointments
            if a.service_center_id == center_id
            and a.appointment_date == day
            and a.status != "cancelled"
        ]
        slots = []
        for hour in range(center.opens, center.closes - duration_hours):
            end = hour + duration_hours
            in_slot = sum(1 for start in booked if hour <= start < end)
            if in_slot < center.max_capacity_per_hour:
                slots.append(
                    Slot(
                        day=day,
                        time=f"{hour:02d}:00",
                        end_time=f"{end:02d}:00",
                        available_capacity=center.max_capacity_per_hour - in_slot,
                    )
                )
        return slots

    async def schedule(
        self, vehicle: VehicleProfile, diagnosis: DiagnosisReport
    ) -> SchedulingResult:
        center = self.nearest_center(vehicle.city)
        duration_hours = max(diagnosis.estimated_duration.hours, 1)
        logger.info(f"Finding slots for vehicle {vehicle.id} at {center.name}")

        offers: Dict[date, List[Slot]] = {}
        today = self._today()
        for offset in range(1, BOOKING_HORIZON_DAYS + 1):
            day = today + timedelta(days=offset)
            slots = self.available_slots(center.id, day, duration_hours)
            if slots:
                offers[day] = slots

        appointment = None
        if offers:
            first = offers[min(offers)][0]
            appointment = self.book(vehicle, diagnosis, center, first)
        else:
            logger.warning(f"No free slots at {center.name} for vehicle {vehicle.id}")

        return SchedulingResult(
            service_center_id=center.id,
            service_center_name=center.name,
            days_with_capacity=len(offers),
            appointment=appointment,
        )

    def book(
        self,
        vehicle: VehicleProfile,
        diagnosis: DiagnosisReport,
        center: ServiceCenter,
        slot: Slot,
    ) -> Appointment:
        appointment = Appointment(
            id=f"APT-{uuid.uuid4()}",
            vehicle_id=vehicle.id,
            customer_id=vehicle.owner_id,
            customer_name=vehicle.owner_name,
            service_center_id=center.id,
            service_center_name=center.name,
            appointment_date=slot.day,
            time=slot.time,
            end_time=slot.end_time,
            estimated_duration=diagnosis.estimated_duration,
            estimated_cost=diagnosis.estimated_cost,
            service_type=", ".join(diagnosis.diagnosis.components()) or "General",
            urgency=diagnosis.urgency.level,
        )
        self._appointments.append(appointment)
        logger.info(f"Appointment booked: {appointment.id}")
        return appointment

    def cancel(self, appointment_id: str) -> Appointment:
        for appointment in self._appointments:
            if appointment.id == appointment_id:
                appointment.status = "cancelled"
                logger.info(f"Appointment cancelled: {appointment_id}")
                return appointment
        raise NotFound("Appointment", appointment_id)

    def appointments(self, vehicle_id: Optional[str] = None) -> List[Appointment]:
        return [
            a for a in self._appointments if vehicle_id is None or a.vehicle_id == vehicle_id
        ]
