import logging
from decimal import Decimal
from rest_framework import serializers
from apps.users.models import Worker
from core.constants import JOB_STATUS_CHOICES, PAYMENT_METHOD_CHOICES
from .models import Job, JobApplication, Review
from . import progress

logger = logging.getLogger(__name__)


class WorkerProfileSerializer(serializers.ModelSerializer):
    user = serializers.SerializerMethodField()
    rating_stats = serializers.SerializerMethodField()

    class Meta:
        model = Worker
        fields = ['id', 'user', 'skills', 'location', 'has_experience', 'rating_stats']
        ref_name = 'JobsWorkerProfile'

    def get_user(self, obj):
        user = obj.user
        return {
            'id': user.id,
            'first_name': user.first_name,
            'last_name': user.last_name
        }

    def get_rating_stats(self, obj):
        stats = obj.user.get_rating_stats()
        return {
            'average_rating': stats['average_rating'],
            'rating_count': stats['total_ratings']
        }


class JobApplicationSerializer(serializers.ModelSerializer):
    worker = WorkerProfileSerializer(read_only=True)
    stage = serializers.IntegerField(read_only=True)

    class Meta:
        model = JobApplication
        fields = [
            'id', 'job', 'worker', 'cover_letter', 'proposed_amount', 'estimated_duration',
            'status', 'stage', 'payment_processing', 'payment_method', 'payment_amount',
            'payment_notes', 'payment_error', 'review_rating', 'review_comment',
            'applied_at', 'responded_at', 'payment_released_at', 'payment_confirmed_at',
            'reviewed_at', 'closed_at'
        ]
        read_only_fields = [
            'job', 'status', 'payment_processing', 'payment_method', 'payment_amount',
            'payment_notes', 'payment_error', 'review_rating', 'review_comment',
            'applied_at', 'responded_at', 'payment_released_at', 'payment_confirmed_at',
            'reviewed_at', 'closed_at'
        ]

    def validate_proposed_amount(self, value):
        if value is not None and value < 0:
            raise serializers.ValidationError("Proposed price must be positive.")
        return value

    def validate(self, data):
        job = self.context.get('job')
        worker = self.context.get('worker')
        if job is None or worker is None:
            return data
        if job.status != 'open':
            raise serializers.ValidationError("Cannot apply to a non-open job.")
        if JobApplication.objects.filter(job=job, worker=worker).exists():
            raise serializers.ValidationError("You have already applied to this job.")
        return data

    def create(self, validated_data):
        validated_data['job'] = self.context['job']
        validated_data['worker'] = self.context['worker']
        return super().create(validated_data)


class JobSerializer(serializers.ModelSerializer):
    client = serializers.ReadOnlyField(source='client.username')
    status = serializers.ChoiceField(choices=JOB_STATUS_CHOICES, read_only=True)
    assigned_worker = WorkerProfileSerializer(read_only=True)
    skill_list = serializers.ListField(child=serializers.CharField(), read_only=True)
    applications_count = serializers.SerializerMethodField()

    class Meta:
        model = Job
        fields = [
            'id', 'title', 'description', 'category', 'skills', 'skill_list', 'location',
            'city', 'budget_amount', 'currency', 'budget_type', 'urgency', 'client',
            'status', 'assigned_worker', 'applications_count', 'created_at', 'updated_at',
            'completed_at'
        ]
        read_only_fields = [
            'id', 'client', 'status', 'assigned_worker', 'created_at', 'updated_at',
            'completed_at'
        ]

    def get_applications_count(self, obj):
        return obj.applications.exclude(status='withdrawn').count()

    def validate_budget_amount(self, value):
        if value < 0:
            raise serializers.ValidationError("Budget amount must be positive.")
        return value


class ReviewSerializer(serializers.ModelSerializer):
    reviewer = serializers.ReadOnlyField(source='reviewer.username')
    reviewee = serializers.ReadOnlyField(source='reviewee.username')

    class Meta:
        model = Review
        fields = ['id', 'job', 'reviewer', 'reviewee', 'rating', 'comment', 'review_type', 'created_at']
        read_only_fields = fields


class ProgressActionSerializer(serializers.Serializer):
    action = serializers.ChoiceField(choices=[action.value for action in progress.Action])
    review = serializers.CharField(required=False, allow_blank=True, max_length=500)
    rating = serializers.IntegerField(required=False, min_value=0, max_value=5)
    payment_method = serializers.ChoiceField(choices=PAYMENT_METHOD_CHOICES, required=False)
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, min_value=Decimal('0'))
    notes = serializers.CharField(required=False, allow_blank=True, max_length=500)


def progress_payload(application, role):
    """Canonical progress view of an application for one participant."""
    stage = application.stage
    action = progress.action_for(role, stage) if stage else None
    return {
        'application_id': application.pk,
        'job_id': application.job_id,
        'status': application.status,
        'role': role,
        'current_stage': stage,
        'stage_name': progress.Stage(stage).label if stage else None,
        'stages': [{'id': stage_id, 'name': name} for stage_id, name in progress.stages()],
        'available_action': action.value if action else None,
        'review': application.review_comment,
        'rating': application.review_rating,
        'payment_processing': application.payment_processing,
        'payment_error': application.payment_error,
        'payment': {
            'method': application.payment_method,
            'amount': str(application.payment_amount) if application.payment_amount is not None else None,
            'notes': application.payment_notes,
        },
    }
