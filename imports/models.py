"""
Import tracking models for CenterScope CSV processing.

Every upload or CLI import is recorded as an ImportBatch with its result
payload, for audit and troubleshooting.
"""

import uuid

from django.db import models
from django.utils import timezone


class ImportBatch(models.Model):
    """
    Track import operations for an audit trail.

    Business Rules:
    - Each import operation gets a unique batch ID
    - stats holds the import result payload once the import finishes
    - A batch only fails when the file itself could not be parsed
    """

    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('processing', 'Processing'),
        ('completed', 'Completed'),
        ('failed', 'Failed'),
    ]

    SOURCE_CHOICES = [
        ('api', 'API Upload'),
        ('cli', 'Management Command'),
    ]

    batch_id = models.UUIDField(default=uuid.uuid4, unique=True, editable=False)
    file_name = models.CharField(max_length=255)
    source = models.CharField(max_length=10, choices=SOURCE_CHOICES, default='api')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')

    stats = models.JSONField(default=dict, blank=True)
    error_message = models.TextField(blank=True, default='')

    started_at = models.DateTimeField(blank=True, null=True)
    completed_at = models.DateTimeField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'import_batches'
        ordering = ['-created_at', '-id']
        verbose_name = 'Import Batch'
        verbose_name_plural = 'Import Batches'

    def __str__(self):
        return f"{self.file_name} ({self.status})"

    @property
    def processing_duration(self):
        """Duration in seconds, or None while unfinished."""
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    def mark_as_processing(self):
        """Mark batch as currently processing."""
        self.status = 'processing'
        self.started_at = timezone.now()
        self.save(update_fields=['status', 'started_at'])

    def mark_as_completed(self, stats):
        """Mark batch as completed and store the import result."""
        self.status = 'completed'
        self.stats = stats
        self.completed_at = timezone.now()
        self.save(update_fields=['status', 'stats', 'completed_at'])

    def mark_as_failed(self, error_message):
        """Mark batch as failed with the top-level error."""
        self.status = 'failed'
        self.error_message = str(error_message)[:2000]
        self.completed_at = timezone.now()
        self.save(update_fields=['status', 'error_message', 'completed_at'])
