"""
Core Models - Base classes for all workforce models
"""

import uuid
from django.db import models
from django.conf import settings


class TimeStampedModel(models.Model):
    """Abstract base model with timestamps"""

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class AuditModel(models.Model):
    """Abstract model with audit fields"""

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='%(app_label)s_%(class)s_created'
    )

    class Meta:
        abstract = True


class WorkforceEntity(TimeStampedModel, AuditModel):
    """
    Base for domain records.

    Provides UUID PK, timestamps and the ``created_by`` audit field.
    Records built on this base are deactivated or moved to a terminal
    status, never removed.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    class Meta:
        abstract = True
