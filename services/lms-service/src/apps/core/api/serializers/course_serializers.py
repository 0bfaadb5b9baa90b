# services/lms-service/src/apps/core/api/serializers/course_serializers.py
"""
Course, Module and Lesson Serializers
"""

from rest_framework import serializers

from shared.common.validators import validate_date_range

from ...models import Course, Lesson, Module
from ...services import CourseService
from .mixins import TenantDefaultMixin


class CourseSerializer(TenantDefaultMixin, serializers.ModelSerializer):
    """Serializer for courses."""

    active_enrollments = serializers.IntegerField(
        source='active_enrollment_count', read_only=True
    )
    prerequisites = serializers.PrimaryKeyRelatedField(
        many=True, queryset=Course.objects.all(), required=False
    )

    class Meta:
        model = Course
        fields = [
            'id', 'title', 'slug', 'tenant', 'is_global', 'instructor',
            'description', 'thumbnail', 'prerequisites',
            'duration_hours', 'duration_minutes',
            'start_date', 'end_date', 'enrollment_deadline',
            'status', 'published_at', 'archived_at', 'version',
            'allow_late_submissions', 'require_prerequisites', 'show_progress',
            'capacity', 'allow_self_enrollment', 'require_prerequisite_completion',
            'enrollment_start', 'enrollment_end', 'active_enrollments',
            'created_at', 'updated_at',
        ]
        read_only_fields = [
            'id', 'published_at', 'archived_at', 'version', 'created_at', 'updated_at',
        ]
        extra_kwargs = {
            'slug': {'required': False},
            'tenant': {'required': False},
        }

    def validate(self, attrs):
        attrs = super().validate(attrs)
        start = attrs.get('start_date', getattr(self.instance, 'start_date', None))
        end = attrs.get('end_date', getattr(self.instance, 'end_date', None))
        if start and end and start > end:
            raise serializers.ValidationError({'end_date': ['End date must be after start date']})
        validate_date_range(
            attrs.get('enrollment_start', getattr(self.instance, 'enrollment_start', None)),
            attrs.get('enrollment_end', getattr(self.instance, 'enrollment_end', None)),
            'enrollment window',
        )
        return attrs

    def create(self, validated_data):
        request = self.context.get('request')
        return CourseService.create_course(
            validated_data,
            getattr(request, 'user', None),
            self.context.get('tenant_id'),
        )

    def update(self, instance, validated_data):
        return CourseService.update_course(instance, validated_data)


class LessonSummarySerializer(serializers.ModelSerializer):
    """Compact lesson listing nested in modules."""

    class Meta:
        model = Lesson
        fields = ['id', 'title', 'type', 'order', 'status']


class ModuleSerializer(serializers.ModelSerializer):
    """Serializer for modules."""

    lessons = LessonSummarySerializer(many=True, read_only=True)

    class Meta:
        model = Module
        fields = [
            'id', 'title', 'description', 'course', 'order',
            'duration_hours', 'duration_minutes', 'status',
            'completion_type', 'minimum_score', 'custom_rule',
            'lessons', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']

    def validate(self, attrs):
        completion_type = attrs.get(
            'completion_type', getattr(self.instance, 'completion_type', None)
        )
        minimum_score = attrs.get('minimum_score', getattr(self.instance, 'minimum_score', None))
        if completion_type == Module.CompletionType.MIN_SCORE and minimum_score is None:
            raise serializers.ValidationError(
                {'minimum_score': ['Minimum score is required for min_score completion']}
            )
        return attrs


class LessonSerializer(serializers.ModelSerializer):
    """Serializer for lessons of every type."""

    class Meta:
        model = Lesson
        fields = [
            'id', 'title', 'module', 'order', 'type', 'description', 'status',
            'video_url', 'video_duration', 'transcript',
            'content',
            'questions', 'time_limit', 'attempts', 'passing_score',
            'randomize_questions', 'show_correct_answers',
            'instructions', 'due_date', 'points', 'rubric', 'allowed_file_types',
            'prompt', 'guidelines', 'require_replies', 'minimum_words',
            'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']

    def validate_questions(self, value):
        for index, question in enumerate(value or []):
            if not isinstance(question, dict) or not question.get('question'):
                raise serializers.ValidationError(f"Question {index + 1} must have text")
        return value

    def validate(self, attrs):
        candidate = Lesson(**{
            field.name: attrs.get(field.name, getattr(self.instance, field.name, None))
            for field in Lesson._meta.concrete_fields
            if field.name in attrs or self.instance is not None
        })
        errors = candidate.content_errors()
        if errors:
            raise serializers.ValidationError(errors)
        return attrs
