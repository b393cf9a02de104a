"""
Complaint lifecycle.

    PENDING ---assign---> IN_PROGRESS ---resolve---> RESOLVED
    REJECTED (initial, terminal)

Deletion is allowed from any state. Points are credited to the reporter on
the IN_PROGRESS -> RESOLVED transition only, so a second resolve is a no-op.
"""

import logging
import secrets
import string
import time

from .errors import ComplaintNotFound, InvalidTransition, NoTeamAvailable, ValidationError
from .models import CATEGORY_POINTS, Complaint, ComplaintCategory, ComplaintStatus, Location

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.ascii_lowercase + string.digits


def new_id(length=9):
    return ''.join(secrets.choice(_ID_ALPHABET) for _ in range(length))


def parse_category(value):
    try:
        return ComplaintCategory(value)
    except ValueError:
        raise ValidationError(f"Unknown category: {value}")


class Dispatcher:
    def __init__(self, users, complaints, teams, session=None):
        self.users = users
        self.complaints = complaints
        self.teams = teams
        self.session = session

    def _get(self, complaint_id):
        complaint = self.complaints.get(complaint_id)
        if complaint is None:
            raise ComplaintNotFound(complaint_id)
        return complaint

    def create_complaint(self, reporter, category, description, image, location, verification, now=None):
        if not image:
            raise ValidationError("A photo of the issue is required.")
        if location is None:
            raise ValidationError("Location is required. Detect your location before submitting.")
        category = parse_category(category)
        if not isinstance(location, Location):
            location = Location.from_dict(location)

        legitimate = verification is not None and verification.is_legitimate is True
        complaint = Complaint(
            id=new_id(),
            user_id=reporter.id,
            category=category,
            description=description or '',
            image=image,
            location=location.model_copy(update={'address': f"{reporter.city}, {reporter.state}"}),
            state=reporter.state,
            city=reporter.city,
            status=ComplaintStatus.PENDING if legitimate else ComplaintStatus.REJECTED,
            timestamp=now if now is not None else int(time.time() * 1000),
            verification_result=verification,
            points_awarded=CATEGORY_POINTS[category],
        )
        self.complaints.add(complaint)
        logger.info("Complaint %s filed by %s as %s (%s)",
                    complaint.id, reporter.id, complaint.category.value, complaint.status.value)
        return complaint

    def assign(self, complaint_id):
        complaint = self._get(complaint_id)
        if complaint.status != ComplaintStatus.PENDING:
            raise InvalidTransition(f"Cannot assign a team to a {complaint.status.value} complaint")

        team = self.teams.first_available(complaint.category)
        if team is None:
            logger.warning("No team available for %s (complaint %s)", complaint.category.value, complaint.id)
            raise NoTeamAvailable(complaint.category)

        self.teams.mark_busy(team.id)
        complaint.assigned_team_id = team.id
        complaint.status = ComplaintStatus.IN_PROGRESS
        self.complaints.replace(complaint)
        logger.info("Complaint %s assigned to %s", complaint.id, team.id)
        return complaint

    def resolve(self, complaint_id):
        complaint = self._get(complaint_id)
        if complaint.status == ComplaintStatus.RESOLVED:
            logger.info("Complaint %s already resolved, ignoring", complaint.id)
            return complaint
        if complaint.status != ComplaintStatus.IN_PROGRESS:
            raise InvalidTransition(f"Cannot resolve a {complaint.status.value} complaint")

        if complaint.assigned_team_id:
            self.teams.release(complaint.assigned_team_id)
        complaint.assigned_team_id = None
        complaint.status = ComplaintStatus.RESOLVED
        self.complaints.replace(complaint)
        self._credit_reporter(complaint)
        logger.info("Complaint %s resolved", complaint.id)
        return complaint

    def _credit_reporter(self, complaint):
        reporter = self.users.credit_points(complaint.user_id, complaint.points_awarded)
        if reporter is None:
            logger.warning("Reporter %s of complaint %s not found, no points credited",
                           complaint.user_id, complaint.id)
            return None
        if self.session is not None:
            self.session.refresh(reporter)
        logger.info("Credited %d points to %s (balance %d)",
                    complaint.points_awarded, reporter.id, reporter.points)
        return reporter

    def delete(self, complaint_id):
        # the assigned team is not released and credited points stay
        if not self.complaints.delete(complaint_id):
            raise ComplaintNotFound(complaint_id)
        logger.info("Complaint %s deleted", complaint_id)
