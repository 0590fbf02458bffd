"""
Appointment notification dispatcher.

Delivers appointment events after the mutation has committed. Delivery is
fire-and-forget: when the request's BackgroundTasks are supplied the webhook
POST runs after the response has been sent, and every failure is logged and
swallowed so that a broken webhook can never roll back or fail a booking.
"""

import logging
from typing import Any, Dict, Optional

import httpx
from fastapi import BackgroundTasks

from core.config import NOTIFICATION_WEBHOOK_URL, NOTIFICATION_TIMEOUT_SECONDS
from models import Appointment

logger = logging.getLogger(__name__)


class NotificationService:
    """Service for dispatching appointment events."""

    @staticmethod
    def build_payload(appointment: Appointment, event_type: str) -> Dict[str, Any]:
        """Build the JSON body posted to the webhook."""
        return {
            "event": event_type,
            "appointment": {
                "id": appointment.id,
                "centerId": appointment.center_id,
                "patientId": appointment.patient_id,
                "practitionerId": appointment.practitioner_id,
                "title": appointment.title,
                "status": appointment.status,
                "startTime": appointment.start_datetime.isoformat(),
                "endTime": appointment.end_datetime.isoformat(),
            },
        }

    @staticmethod
    def notify(
        appointment: Appointment,
        event_type: str,
        background_tasks: Optional[BackgroundTasks] = None
    ) -> bool:
        """
        Dispatch an appointment event.

        Every event is logged. When NOTIFICATION_WEBHOOK_URL is set the
        payload is also POSTed there: queued on `background_tasks` when
        given, otherwise sent inline.

        The payload is built here, while the appointment is still attached
        to its session, so the queued delivery never touches the ORM.

        Args:
            appointment: The appointment after the committed change
            event_type: Event name, e.g. 'created', 'updated', 'cancelled'
            background_tasks: Request's task queue, run after the response

        Returns:
            True if the event was delivered, queued or only logged; False on failure
        """
        try:
            logger.info(
                f"Appointment event '{event_type}' for appointment {appointment.id} "
                f"(practitioner {appointment.practitioner_id}, patient {appointment.patient_id})"
            )

            if not NOTIFICATION_WEBHOOK_URL:
                return True

            payload = NotificationService.build_payload(appointment, event_type)
        except Exception as e:
            logger.warning(f"Failed to prepare '{event_type}' notification for appointment {appointment.id}: {e}")
            return False

        if background_tasks is not None:
            background_tasks.add_task(NotificationService.deliver, payload)
            return True

        return NotificationService.deliver(payload)

    @staticmethod
    def deliver(payload: Dict[str, Any]) -> bool:
        """
        POST a prepared payload to the webhook.

        Returns:
            True on a 2xx response, False on any failure
        """
        event_type = payload.get("event")
        appointment_id = payload.get("appointment", {}).get("id")
        try:
            response = httpx.post(
                NOTIFICATION_WEBHOOK_URL,
                json=payload,
                timeout=NOTIFICATION_TIMEOUT_SECONDS,
            )
            response.raise_for_status()
            return True

        except Exception as e:
            # Log but don't fail - notification failure shouldn't block the mutation
            logger.warning(f"Failed to send '{event_type}' notification for appointment {appointment_id}: {e}")
            return False
