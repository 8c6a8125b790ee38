from django.db import models
from django.utils import timezone
from core.constants import PAYMENT_METHOD_CHOICES, TRANSACTION_STATUS_CHOICES
from apps.jobs.models import JobApplication


class Transaction(models.Model):
    application = models.ForeignKey(JobApplication, on_delete=models.CASCADE, related_name='transactions')
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    currency = models.CharField(max_length=3, default='LKR')
    payment_method = models.CharField(max_length=20, choices=PAYMENT_METHOD_CHOICES, default='online')
    processor = models.CharField(max_length=50)
    reference = models.CharField(max_length=100, unique=True, null=True, blank=True)
    status = models.CharField(max_length=20, choices=TRANSACTION_STATUS_CHOICES, default='pending')
    failure_reason = models.CharField(max_length=255, blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    processed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"Transaction {self.reference or self.pk} for application {self.application_id}"

    def mark_completed(self, receipt):
        self.status = 'completed'
        self.reference = receipt.reference
        self.processor = receipt.processor
        self.processed_at = receipt.processed_at or timezone.now()
        self.save()

    def mark_failed(self, reason):
        self.status = 'failed'
        self.failure_reason = reason[:255]
        self.processed_at = timezone.now()
        self.save()
