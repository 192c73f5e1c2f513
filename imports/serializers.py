# ===== IMPORTS SERIALIZERS =====
"""
Serializers for the import batch endpoints.
"""

from rest_framework import serializers

from .models import ImportBatch


class ImportBatchSerializer(serializers.ModelSerializer):
    """Import batch with its stored result payload."""

    status_display = serializers.CharField(source='get_status_display', read_only=True)
    processing_duration = serializers.FloatField(read_only=True)

    class Meta:
        model = ImportBatch
        fields = [
            'batch_id',
            'file_name',
            'source',
            'status',
            'status_display',
            'stats',
            'error_message',
            'created_at',
            'started_at',
            'completed_at',
            'processing_duration',
        ]
        read_only_fields = fields
