# services/lms-service/src/apps/core/api/serializers/learning_serializers.py
"""
Enrollment and Progress Serializers
"""

from rest_framework import serializers

from shared.common.utils import parse_datetime_value
from shared.common.validators import validate_json_list, validate_percentage

from ...models import Enrollment, Progress


def _check_timestamp(value, field_name: str) -> None:
    try:
        parse_datetime_value(value)
    except (TypeError, ValueError, OverflowError):
        raise serializers.ValidationError(f"{field_name} must be an ISO 8601 timestamp")


class EnrollmentSerializer(serializers.ModelSerializer):
    """Serializer for enrollments."""

    course_title = serializers.CharField(source='course.title', read_only=True)
    student_name = serializers.CharField(source='student.name', read_only=True)

    class Meta:
        model = Enrollment
        fields = [
            'id', 'student', 'student_name', 'course', 'course_title', 'status',
            'enrolled_at', 'started_at', 'completed_at', 'dropped_at', 'expires_at',
            'created_at', 'updated_at',
        ]
        read_only_fields = [
            'id', 'enrolled_at', 'started_at', 'completed_at', 'dropped_at',
            'created_at', 'updated_at',
        ]
        extra_kwargs = {'student': {'required': False}}
        validators = []


class EnrollmentUpdateSerializer(serializers.Serializer):
    """Status change for an enrollment."""

    status = serializers.ChoiceField(choices=Enrollment.Status.choices)
    expires_at = serializers.DateTimeField(required=False, allow_null=True)


class ProgressSerializer(serializers.ModelSerializer):
    """Serializer for progress records."""

    class Meta:
        model = Progress
        fields = [
            'id', 'student', 'course', 'status', 'overall_progress',
            'points_earned', 'total_points', 'is_global',
            'started_at', 'completed_at', 'last_accessed',
            'module_progress', 'quiz_attempts', 'discussions',
            'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'last_accessed', 'created_at', 'updated_at']

    def validate_overall_progress(self, value):
        if value < 0 or value > 100:
            raise serializers.ValidationError("Must be between 0 and 100")
        return value

    def validate_module_progress(self, value):
        entries = validate_json_list(value, ['module', 'status'], 'module_progress')
        for index, entry in enumerate(entries):
            if entry.get('progress') is not None:
                validate_percentage(entry['progress'], f"module_progress[{index}].progress")
        return entries

    def validate_quiz_attempts(self, value):
        entries = validate_json_list(value, ['lesson', 'completed_at'], 'quiz_attempts')
        for index, entry in enumerate(entries):
            if entry.get('score') is not None:
                validate_percentage(entry['score'], f"quiz_attempts[{index}].score")
            _check_timestamp(entry['completed_at'], f"quiz_attempts[{index}].completed_at")
        return entries

    def validate_discussions(self, value):
        entries = validate_json_list(value, ['lesson', 'participated_at'], 'discussions')
        for index, entry in enumerate(entries):
            _check_timestamp(entry['participated_at'], f"discussions[{index}].participated_at")
        return entries


class QuizAttemptSerializer(serializers.Serializer):
    """Quiz attempt input."""

    score = serializers.FloatField(min_value=0, max_value=100)

