# ===== IMPORTS APP ADMIN CONFIGURATION =====
"""
Django Admin interface for import batches.
"""

from django.contrib import admin

from .models import ImportBatch


@admin.register(ImportBatch)
class ImportBatchAdmin(admin.ModelAdmin):
    """Read-only view of import batches and their result payloads."""

    list_display = [
        'file_name',
        'status',
        'source',
        'rows_processed',
        'error_count',
        'created_at',
        'duration_display',
    ]
    list_filter = ['status', 'source', ('created_at', admin.DateFieldListFilter)]
    search_fields = ['file_name', 'batch_id']
    readonly_fields = [
        'batch_id', 'file_name', 'source', 'status', 'stats', 'error_message',
        'started_at', 'completed_at', 'created_at',
    ]
    ordering = ['-created_at']

    fieldsets = (
        ('Batch', {
            'fields': ('batch_id', 'file_name', 'source', 'status')
        }),
        ('Result', {
            'fields': ('stats', 'error_message')
        }),
        ('Timing', {
            'fields': ('created_at', 'started_at', 'completed_at'),
            'classes': ('collapse',)
        }),
    )

    def has_add_permission(self, request):
        return False

    def rows_processed(self, obj):
        return (obj.stats or {}).get('rows_processed', '-')
    rows_processed.short_description = 'Rows'

    def error_count(self, obj):
        return (obj.stats or {}).get('errors', '-')
    error_count.short_description = 'Errors'

    def duration_display(self, obj):
        duration = obj.processing_duration
        if duration is None:
            return '-'
        return f"{duration:.1f}s"
    duration_display.short_description = 'Duration'
