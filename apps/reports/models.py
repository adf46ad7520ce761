import uuid
from django.db import models


class ReportType(models.TextChoices):
    HARASSMENT = 'HARASSMENT', 'Harassment'
    SPAM = 'SPAM', 'Spam'
    INAPPROPRIATE_CONTENT = 'INAPPROPRIATE_CONTENT', 'Inappropriate Content'
    FAKE_PROFILE = 'FAKE_PROFILE', 'Fake Profile'
    OTHER = 'OTHER', 'Other'


class ReportStatus(models.TextChoices):
    PENDING = 'PENDING', 'Pending'
    UNDER_REVIEW = 'UNDER_REVIEW', 'Under Review'
    RESOLVED = 'RESOLVED', 'Resolved'
    DISMISSED = 'DISMISSED', 'Dismissed'


OPEN_STATUSES = (ReportStatus.PENDING, ReportStatus.UNDER_REVIEW)
CLOSED_STATUSES = (ReportStatus.RESOLVED, ReportStatus.DISMISSED)


class Report(models.Model):
    """A user's complaint about another user, worked by admins."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    reporter_id = models.UUIDField(db_index=True)
    reported_user_id = models.UUIDField(db_index=True)
    type = models.CharField(max_length=30, choices=ReportType.choices)
    reason = models.TextField()
    evidence = models.JSONField(default=list, blank=True, help_text="URLs of screenshots or posts")

    status = models.CharField(max_length=20, choices=ReportStatus.choices, default=ReportStatus.PENDING)
    admin_notes = models.TextField(blank=True)
    action_taken = models.CharField(max_length=255, blank=True)
    resolved_by_id = models.UUIDField(null=True, blank=True)
    resolved_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['reporter_id', 'reported_user_id', 'type']),
            models.Index(fields=['status']),
        ]

    def __str__(self):
        return f"{self.type} report on {self.reported_user_id} ({self.status})"
