from datetime import datetime, timezone
from typing import Dict, Any
import re
import uuid

TIME_PATTERN = re.compile(r'^([01]\d|2[0-3]):[0-5]\d$')


class Validators:
    """Input validation utilities"""

    @staticmethod
    def validate_time(value: str) -> bool:
        """Validate a wall-clock time string (HH:MM, 24h)"""
        return isinstance(value, str) and bool(TIME_PATTERN.match(value))

    @staticmethod
    def validate_weekday(day: Any) -> bool:
        """Validate weekday index (0=Sunday .. 6=Saturday)"""
        return isinstance(day, int) and not isinstance(day, bool) and 0 <= day <= 6

    @staticmethod
    def validate_status(status: str) -> bool:
        """Validate task instance status"""
        valid_statuses = ['pending', 'completed']
        return status in valid_statuses

    @staticmethod
    def validate_recurrence_type(recurrence_type: str) -> bool:
        """Validate recurrence type"""
        valid_types = ['daily', 'weekly', 'once']
        return recurrence_type in valid_types


class Helpers:
    """Utility helper functions"""

    @staticmethod
    def generate_id() -> str:
        """Generate a unique ID"""
        return uuid.uuid4().hex

    @staticmethod
    def get_current_timestamp() -> datetime:
        """Get current timestamp (aware, UTC)"""
        return datetime.now(timezone.utc)

    @staticmethod
    def format_timestamp(timestamp: datetime) -> str:
        """Format timestamp for API response"""
        if timestamp.tzinfo is None:
            return timestamp.isoformat() + 'Z'
        return timestamp.astimezone(timezone.utc).isoformat().replace('+00:00', 'Z')

    @staticmethod
    def build_error_response(message: str, code: str = "INTERNAL_ERROR", details: Any = None) -> Dict[str, Any]:
        """Build standardized error response"""
        response = {
            'error': message,
            'code': code,
            'timestamp': Helpers.format_timestamp(Helpers.get_current_timestamp())
        }
        if details is not None:
            response['details'] = details
        return response
