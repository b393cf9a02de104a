"""Errors raised by the complaint lifecycle, auth and external services."""


class SmartCityError(Exception):
    status_code = 400

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class ValidationError(SmartCityError):
    pass


class AuthenticationError(SmartCityError):
    status_code = 401


class InvalidTransition(SmartCityError):
    status_code = 409


class NoTeamAvailable(SmartCityError):
    status_code = 409

    def __init__(self, category):
        super().__init__(f"No teams available for {category.value.replace('_', ' ')} right now.")
        self.category = category


class ComplaintNotFound(SmartCityError):
    status_code = 404

    def __init__(self, complaint_id):
        super().__init__(f"Complaint {complaint_id} not found")
        self.complaint_id = complaint_id


class ReporterNotFound(SmartCityError):
    status_code = 404

    def __init__(self, user_id):
        super().__init__("Reporter record missing.")
        self.user_id = user_id


class ExternalServiceError(SmartCityError):
    status_code = 502
