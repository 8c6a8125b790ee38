from rest_framework import serializers
from .models import Transaction


class TransactionSerializer(serializers.ModelSerializer):
    job = serializers.ReadOnlyField(source='application.job_id')
    job_title = serializers.ReadOnlyField(source='application.job.title')

    class Meta:
        model = Transaction
        fields = [
            'id', 'application', 'job', 'job_title', 'amount', 'currency', 'payment_method',
            'processor', 'reference', 'status', 'failure_reason', 'created_at', 'processed_at'
        ]
        read_only_fields = fields
