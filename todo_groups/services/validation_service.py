"""
Centralized Input Validation Service
Handles group and template input validation with proper error messages
"""
from typing import Dict, Any

from ..utils.dates import is_day_key
from ..utils.validators import Validators


class ValidationService:
    """Centralized validation service for all inputs"""

    MAX_GROUP_NAME_LENGTH = 100
    MAX_TASK_TITLE_LENGTH = 200

    VALID_RECURRENCE_TYPES = ['daily', 'weekly', 'once']

    @staticmethod
    def validate_group_name(name: Any) -> Dict[str, Any]:
        """Validate group name"""
        if not name or not isinstance(name, str) or not name.strip():
            return {'valid': False, 'error': 'Group name is required'}

        name = name.strip()
        if len(name) > ValidationService.MAX_GROUP_NAME_LENGTH:
            return {'valid': False, 'error': f'Group name must be less than {ValidationService.MAX_GROUP_NAME_LENGTH} characters'}

        return {'valid': True, 'value': name}

    @staticmethod
    def validate_task_title(title: Any) -> Dict[str, Any]:
        """Validate task title"""
        if not title or not isinstance(title, str) or not title.strip():
            return {'valid': False, 'error': 'Task title is required'}

        title = title.strip()
        if len(title) > ValidationService.MAX_TASK_TITLE_LENGTH:
            return {'valid': False, 'error': f'Task title must be less than {ValidationService.MAX_TASK_TITLE_LENGTH} characters'}

        return {'valid': True, 'value': title}

    @staticmethod
    def validate_time(value: Any, label: str) -> Dict[str, Any]:
        if not Validators.validate_time(value):
            return {'valid': False, 'error': f'{label} must be a HH:MM time'}
        return {'valid': True, 'value': value}

    @staticmethod
    def validate_recurrence(recurrence: Any) -> Dict[str, Any]:
        """Validate a recurrence rule and return it normalized"""
        if not isinstance(recurrence, dict):
            return {'valid': False, 'error': 'Recurrence is required'}

        recurrence_type = recurrence.get('type')
        if not Validators.validate_recurrence_type(recurrence_type):
            return {'valid': False, 'error': f'Recurrence type must be one of: {", ".join(ValidationService.VALID_RECURRENCE_TYPES)}'}

        if recurrence_type == 'daily':
            return {'valid': True, 'value': {'type': 'daily'}}

        if recurrence_type == 'once':
            start_date = recurrence.get('start_date')
            if not is_day_key(start_date):
                return {'valid': False, 'error': 'Once recurrence needs a start_date (YYYY-MM-DD)'}
            return {'valid': True, 'value': {'type': 'once', 'start_date': start_date}}

        days = recurrence.get('days_of_week')
        if not isinstance(days, list) or not days:
            return {'valid': False, 'error': 'Select at least one day of the week'}
        if not all(Validators.validate_weekday(d) for d in days):
            return {'valid': False, 'error': 'Days of week must be integers from 0 (Sunday) to 6 (Saturday)'}

        return {'valid': True, 'value': {'type': 'weekly', 'days_of_week': sorted(set(days))}}

    @staticmethod
    def validate_template_data(template_data: Dict[str, Any]) -> Dict[str, Any]:
        """Validate complete task template data"""
        errors = []
        validated_data = {}

        title_result = ValidationService.validate_task_title(template_data.get('title'))
        if not title_result['valid']:
            errors.append(title_result['error'])
        else:
            validated_data['title'] = title_result['value']

        start_result = ValidationService.validate_time(template_data.get('start_time'), 'Start time')
        if not start_result['valid']:
            errors.append(start_result['error'])
        else:
            validated_data['start_time'] = start_result['value']

        end_result = ValidationService.validate_time(template_data.get('end_time'), 'End time')
        if not end_result['valid']:
            errors.append(end_result['error'])
        else:
            validated_data['end_time'] = end_result['value']

        # HH:MM strings order the same way the times do
        if start_result['valid'] and end_result['valid'] and end_result['value'] < start_result['value']:
            errors.append('End time must not be before start time')

        recurrence_result = ValidationService.validate_recurrence(template_data.get('recurrence'))
        if not recurrence_result['valid']:
            errors.append(f"Recurrence: {recurrence_result['error']}")
        else:
            validated_data['recurrence'] = recurrence_result['value']

        if errors:
            return {'valid': False, 'errors': errors}

        return {'valid': True, 'data': validated_data}
