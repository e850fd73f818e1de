"""
Credential Issuer - employee ids and one-time passwords for approved accounts.

The plaintext password exists only in the returned ``Credentials``; the
account stores its salted hash.
"""
from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass, field

from django.conf import settings
from django.db import IntegrityError, transaction

from apps.authentication.models import User
from apps.core.exceptions import ConflictError, InvalidStateError, NotFoundError

logger = logging.getLogger(__name__)

EMPLOYEE_ID_PREFIXES = {
    User.ROLE_DIRECTOR: 'DIR',
    User.ROLE_MANAGER: 'MGR',
    User.ROLE_GENERAL_SUPERVISOR: 'GS',
    User.ROLE_SUPERVISOR: 'SPV',
    User.ROLE_OPERATOR: 'OPR',
    User.ROLE_SECRETARY: 'SEC',
}
EMPLOYEE_ID_DIGITS = 5


@dataclass(frozen=True)
class Credentials:
    employee_id: str
    email: str
    temporary_password: str = field(repr=False)


class CredentialIssuer:

    @classmethod
    def issue(cls, account_id) -> Credentials:
        """
        Assign an employee id and a temporary password to ``account_id``.

        Must run inside the caller's transaction so a failure here also
        undoes whatever transition triggered it.
        """
        account = User.objects.select_for_update().filter(pk=account_id).first()
        if account is None:
            raise NotFoundError('Account', account_id)
        if account.employee_id:
            raise InvalidStateError('Credentials have already been issued for this account')

        employee_id = cls._assign_employee_id(account)

        temporary_password = secrets.token_urlsafe(settings.CREDENTIAL_PASSWORD_BYTES)
        account.set_password(temporary_password)
        account.must_change_password = True
        account.save(update_fields=['password', 'must_change_password', 'updated_at'])

        logger.info("credentials_issued account_id=%s employee_id=%s", account.pk, employee_id)
        return Credentials(
            employee_id=employee_id,
            email=account.email,
            temporary_password=temporary_password,
        )

    @classmethod
    def next_employee_id(cls, prefix: str) -> str:
        highest = 0
        for existing in User.objects.filter(employee_id__startswith=prefix).values_list('employee_id', flat=True):
            suffix = existing[len(prefix):]
            if suffix.isdigit():
                highest = max(highest, int(suffix))
        return f"{prefix}{highest + 1:0{EMPLOYEE_ID_DIGITS}d}"

    @classmethod
    def _assign_employee_id(cls, account) -> str:
        prefix = EMPLOYEE_ID_PREFIXES[account.role]
        max_attempts = settings.CREDENTIAL_MAX_ATTEMPTS

        for attempt in range(1, max_attempts + 1):
            employee_id = cls.next_employee_id(prefix)
            try:
                with transaction.atomic():
                    User.objects.filter(pk=account.pk).update(employee_id=employee_id)
            except IntegrityError:
                logger.warning(
                    "employee_id collision account_id=%s employee_id=%s attempt=%s",
                    account.pk, employee_id, attempt,
                )
                continue
            account.employee_id = employee_id
            return employee_id

        raise ConflictError(f"Could not allocate a unique employee id after {max_attempts} attempts")
