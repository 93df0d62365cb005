"""
Models for PDF templates, generated attachments and scheduled jobs.
"""

import uuid

from django.core.exceptions import ValidationError
from django.db import models


class PageOrientation(models.TextChoices):
    PORTRAIT = "Portrait", "Portrait"
    LANDSCAPE = "Landscape", "Landscape"


class PageFormat(models.TextChoices):
    A3 = "A3", "A3"
    A4 = "A4", "A4"
    A5 = "A5", "A5"
    A6 = "A6", "A6"
    A7 = "A7", "A7"
    LETTER = "Letter", "Letter"
    LEGAL = "Legal", "Legal"
    CUSTOM = "Custom", "Custom"


class AttachmentRole(models.TextChoices):
    MAIL_MERGE = "Mail Merge", "Mail Merge"
    MASS_PDF = "Mass Pdf", "Mass Pdf"


class JobStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    RUNNING = "RUNNING", "Running"
    SUCCESS = "SUCCESS", "Success"
    FAILED = "FAILED", "Failed"


class PdfTemplate(models.Model):
    """Layout and markup used to print records of one entity type."""

    name = models.CharField(max_length=255)
    entity_type = models.CharField(
        max_length=100, help_text="Model label of printable records, e.g. crm.Contact."
    )
    body = models.TextField(blank=True, default="")
    header = models.TextField(blank=True, default="")
    footer = models.TextField(blank=True, default="")
    print_header = models.BooleanField(default=False)
    print_footer = models.BooleanField(default=False)
    header_position = models.FloatField(default=0)
    footer_position = models.FloatField(default=15)
    page_orientation = models.CharField(
        max_length=20, choices=PageOrientation.choices, default=PageOrientation.PORTRAIT
    )
    page_format = models.CharField(
        max_length=20, choices=PageFormat.choices, default=PageFormat.A4
    )
    page_width = models.FloatField(null=True, blank=True)
    page_height = models.FloatField(null=True, blank=True)
    left_margin = models.FloatField(default=10)
    top_margin = models.FloatField(default=10)
    right_margin = models.FloatField(default=10)
    bottom_margin = models.FloatField(default=20)
    font_face = models.CharField(max_length=100, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        app_label = "record_pdf"
        verbose_name = "PDF Template"
        verbose_name_plural = "PDF Templates"
        ordering = ["name"]

    def __str__(self) -> str:
        return f"{self.name} ({self.entity_type})"

    def clean(self):
        super().clean()
        if self.page_format != PageFormat.CUSTOM:
            return
        errors = {}
        for field_name in ("page_width", "page_height"):
            value = getattr(self, field_name)
            if value is None or value <= 0:
                errors[field_name] = "Custom page format requires a positive size in millimetres."
        if errors:
            raise ValidationError(errors)


class Attachment(models.Model):
    """Generated PDF file stored in the database."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    mime_type = models.CharField(max_length=100, default="application/pdf")
    related_type = models.CharField(max_length=100, null=True, blank=True)
    related_id = models.CharField(max_length=64, null=True, blank=True)
    role = models.CharField(
        max_length=30, choices=AttachmentRole.choices, null=True, blank=True
    )
    contents = models.BinaryField()
    size = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        app_label = "record_pdf"
        verbose_name = "Attachment"
        verbose_name_plural = "Attachments"
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return self.name

    def save(self, *args, **kwargs):
        self.size = len(self.contents or b"")
        super().save(*args, **kwargs)


class ScheduledJob(models.Model):
    """Handler invocation deferred until ``execute_time``."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    handler = models.CharField(max_length=200)
    data = models.JSONField(default=dict, blank=True)
    execute_time = models.DateTimeField(db_index=True)
    queue = models.CharField(max_length=100, default="default")
    status = models.CharField(
        max_length=20, choices=JobStatus.choices, default=JobStatus.PENDING
    )
    attempts = models.PositiveSmallIntegerField(default=0)
    error = models.TextField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    started_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        app_label = "record_pdf"
        verbose_name = "Scheduled Job"
        verbose_name_plural = "Scheduled Jobs"
        ordering = ["execute_time"]

    def __str__(self) -> str:
        return f"{self.handler} ({self.status})"
