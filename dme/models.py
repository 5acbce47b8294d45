import uuid
from django.db import models


class OrderSubmission(models.Model):
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('processing', 'Processing'),
        ('submitted', 'Submitted'),
        ('failed', 'Failed'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    device_type = models.CharField(max_length=50)
    patient_id = models.CharField(max_length=50)
    patient_name = models.CharField(max_length=100)
    ordering_provider = models.CharField(max_length=100)
    payload = models.JSONField(default=dict)
    strategy = models.CharField(max_length=10, default='rules')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')
    attempts = models.PositiveIntegerField(default=0)
    response_status_code = models.PositiveIntegerField(blank=True, null=True)
    external_order_id = models.CharField(max_length=100, blank=True, null=True)
    error_message = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    submitted_at = models.DateTimeField(blank=True, null=True)

    class Meta:
        db_table = 'order_submissions'
        ordering = ['-created_at']

    def __str__(self):
        return f'{self.device_type} for {self.patient_id} ({self.status})'
