"""
Authentication Models - Workforce accounts (Identity Store)
"""

import uuid
from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin, BaseUserManager
from django.db import models
from django.db.models import Q
from django.utils import timezone
from django.core.validators import RegexValidator

from apps.core.exceptions import InvalidStateError


class UserManager(BaseUserManager):
    """Custom user manager"""

    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError('Email is required')
        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('role', User.ROLE_DIRECTOR)
        extra_fields.setdefault('status', User.STATUS_ACTIVE)

        return self.create_user(email, password, **extra_fields)


class User(AbstractBaseUser, PermissionsMixin):
    """
    Workforce account.

    Accounts are created PENDING by a registration, activated by an approval
    decision, and suspended by administrative action. They are never deleted.
    ``is_active`` is derived from ``status`` so PENDING and SUSPENDED accounts
    cannot authenticate.
    """

    ROLE_DIRECTOR = 'director'
    ROLE_MANAGER = 'manager'
    ROLE_GENERAL_SUPERVISOR = 'general_supervisor'
    ROLE_SUPERVISOR = 'supervisor'
    ROLE_OPERATOR = 'operator'
    ROLE_SECRETARY = 'secretary'

    ROLE_CHOICES = [
        (ROLE_DIRECTOR, 'Director'),
        (ROLE_MANAGER, 'Manager'),
        (ROLE_GENERAL_SUPERVISOR, 'General Supervisor'),
        (ROLE_SUPERVISOR, 'Supervisor'),
        (ROLE_OPERATOR, 'Operator'),
        (ROLE_SECRETARY, 'Secretary'),
    ]

    STATUS_PENDING = 'pending'
    STATUS_ACTIVE = 'active'
    STATUS_SUSPENDED = 'suspended'

    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_ACTIVE, 'Active'),
        (STATUS_SUSPENDED, 'Suspended'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # Basic Info
    email = models.EmailField(unique=True, db_index=True)
    employee_id = models.CharField(max_length=20, blank=True, db_index=True)

    first_name = models.CharField(max_length=50)
    last_name = models.CharField(max_length=50)

    # Contact
    phone = models.CharField(
        max_length=15,
        blank=True,
        validators=[
            RegexValidator(
                regex=r'^\+?[0-9]\d{6,14}$',
                message='Enter a valid phone number'
            )
        ]
    )
    address = models.CharField(max_length=255, blank=True)

    # Workforce
    role = models.CharField(max_length=30, choices=ROLE_CHOICES, db_index=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    registered_by = models.ForeignKey(
        'self',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='registered_accounts'
    )

    is_staff = models.BooleanField(default=False)

    # Security
    password_changed_at = models.DateTimeField(null=True, blank=True)
    must_change_password = models.BooleanField(default=False)

    # Timestamps
    date_joined = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['first_name', 'last_name']

    class Meta:
        ordering = ['first_name', 'last_name']
        indexes = [
            models.Index(fields=['role', 'status'], name='user_role_status_idx'),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=['employee_id'],
                condition=~Q(employee_id=''),
                name='unique_employee_id_when_set',
            ),
            models.UniqueConstraint(
                fields=['phone'],
                condition=~Q(phone=''),
                name='unique_phone_when_set',
            ),
        ]

    def __str__(self):
        return f"{self.full_name} ({self.email})"

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_active(self):
        return self.status == self.STATUS_ACTIVE

    def has_role(self, *roles):
        return self.role in roles

    def delete(self, *args, **kwargs):
        raise InvalidStateError('Accounts cannot be deleted; suspend them instead.')
