from django.db import models
from django.conf import settings
from django.utils import timezone
from core.constants import (
    JOB_STATUS_CHOICES, JOB_APPLICATION_STATUS_CHOICES, JOB_CATEGORY_CHOICES,
    BUDGET_TYPE_CHOICES, URGENCY_CHOICES, PAYMENT_METHOD_CHOICES,
    APPLICATION_PROGRESS_STATUSES,
)
from apps.users.models import Worker
from .progress import JobProgressState


def stage_for_status(status):
    """Progress stage (1-8) for an application status, None when off the track."""
    try:
        return APPLICATION_PROGRESS_STATUSES.index(status) + 1
    except ValueError:
        return None


def status_for_stage(stage):
    return APPLICATION_PROGRESS_STATUSES[int(stage) - 1]


class Job(models.Model):
    client = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='jobs')
    title = models.CharField(max_length=100)
    description = models.TextField(max_length=2000)
    category = models.CharField(max_length=30, choices=JOB_CATEGORY_CHOICES, default='other')
    skills = models.CharField(max_length=500, blank=True, default='')
    location = models.CharField(max_length=200)
    city = models.CharField(max_length=100)
    budget_amount = models.DecimalField(max_digits=10, decimal_places=2)
    currency = models.CharField(max_length=3, default='LKR')
    budget_type = models.CharField(max_length=20, choices=BUDGET_TYPE_CHOICES, default='fixed')
    urgency = models.CharField(max_length=20, choices=URGENCY_CHOICES, default='medium')
    status = models.CharField(max_length=20, choices=JOB_STATUS_CHOICES, default='open')
    assigned_worker = models.ForeignKey(
        Worker, on_delete=models.SET_NULL, null=True, blank=True, related_name='assigned_jobs'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.title} - {self.client.username}"

    @property
    def skill_list(self):
        return [skill.strip() for skill in self.skills.split(',') if skill.strip()]


class JobApplication(models.Model):
    job = models.ForeignKey(Job, on_delete=models.CASCADE, related_name='applications')
    worker = models.ForeignKey(Worker, on_delete=models.CASCADE, related_name='applications')
    cover_letter = models.TextField(max_length=1000, blank=True, default='')
    proposed_amount = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    estimated_duration = models.CharField(max_length=50, blank=True, default='')
    status = models.CharField(max_length=20, choices=JOB_APPLICATION_STATUS_CHOICES, default='pending')

    payment_processing = models.BooleanField(default=False)
    payment_method = models.CharField(max_length=20, choices=PAYMENT_METHOD_CHOICES, blank=True, null=True)
    payment_amount = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    payment_notes = models.TextField(blank=True, default='')
    payment_error = models.CharField(max_length=255, blank=True, default='')

    review_rating = models.PositiveSmallIntegerField(default=0)
    review_comment = models.TextField(max_length=500, blank=True, default='')

    applied_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    responded_at = models.DateTimeField(null=True, blank=True)
    payment_released_at = models.DateTimeField(null=True, blank=True)
    payment_confirmed_at = models.DateTimeField(null=True, blank=True)
    reviewed_at = models.DateTimeField(null=True, blank=True)
    closed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        unique_together = ('job', 'worker')
        ordering = ['-applied_at']

    def __str__(self):
        return f"{self.worker.user.username} applied to {self.job.title}"

    @property
    def stage(self):
        return stage_for_status(self.status)

    def role_of(self, user):
        """'client' for the job's owner, 'worker' for the applicant, else None."""
        if user.pk == self.job.client_id:
            return 'client'
        if hasattr(user, 'worker') and user.worker.pk == self.worker_id:
            return 'worker'
        return None

    def progress_state(self):
        return JobProgressState(
            current_stage=self.stage,
            review=self.review_comment,
            rating=self.review_rating,
            payment_processing=self.payment_processing,
            payment_error=self.payment_error,
        )

    def apply_progress_state(self, state):
        """Copy a progress state onto the record and stamp the stage it reached."""
        previous = self.stage
        self.status = status_for_stage(state.current_stage)
        self.payment_processing = state.payment_processing
        self.payment_error = state.payment_error
        self.review_comment = state.review
        self.review_rating = state.rating

        now = timezone.now()
        if previous == 1 and state.current_stage == 2:
            self.responded_at = now
        elif state.current_stage == 5 and previous == 4:
            self.payment_released_at = now
        elif state.current_stage == 7 and previous == 6:
            if state.rating:
                self.reviewed_at = now
            else:
                self.payment_confirmed_at = now
        elif state.current_stage == 8 and previous == 7:
            self.closed_at = now


class Review(models.Model):
    REVIEW_TYPE_CHOICES = [
        ('client_to_worker', 'Client to Worker'),
        ('worker_to_client', 'Worker to Client'),
    ]

    job = models.ForeignKey(Job, on_delete=models.CASCADE, related_name='reviews')
    application = models.OneToOneField(JobApplication, on_delete=models.CASCADE, related_name='review')
    reviewer = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='given_reviews')
    reviewee = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='received_reviews')
    rating = models.PositiveSmallIntegerField(choices=[(i, i) for i in range(1, 6)])  # 1 to 5 stars
    comment = models.TextField(max_length=500, blank=True, default='')
    review_type = models.CharField(max_length=20, choices=REVIEW_TYPE_CHOICES, default='client_to_worker')
    is_visible = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"Review for {self.reviewee.username} on {self.job.title} ({self.rating}/5)"
