"""
Account administration for the Identity Store.

Status changes use a conditional UPDATE on the current status so that two
concurrent administrators cannot both apply a transition.
"""

import logging

from django.db import transaction
from django.utils import timezone

from apps.authentication.models import User
from apps.core.exceptions import AuthorizationError, InvalidStateError, NotFoundError

logger = logging.getLogger(__name__)
security_logger = logging.getLogger('security.audit')


class AccountService:
    ADMIN_ROLES = (User.ROLE_DIRECTOR, User.ROLE_MANAGER)

    @classmethod
    def resolve_actor(cls, actor):
        """Return the acting account, which must exist and be ACTIVE."""
        if isinstance(actor, User):
            account = actor
        else:
            account = User.objects.filter(pk=actor).first()
            if account is None:
                raise NotFoundError('Account', actor)
        if not account.is_active:
            raise AuthorizationError('Only active accounts can perform this action')
        return account

    @classmethod
    def get_account(cls, account_id, for_update=False):
        queryset = User.objects.all()
        if for_update:
            queryset = queryset.select_for_update()
        account = queryset.filter(pk=account_id).first()
        if account is None:
            raise NotFoundError('Account', account_id)
        return account

    @classmethod
    def suspend(cls, actor, account_id):
        actor = cls.resolve_actor(actor)
        cls._ensure_admin(actor)
        with transaction.atomic():
            account = cls.get_account(account_id)
            if account.pk == actor.pk:
                raise AuthorizationError('You cannot suspend your own account')
            if account.role == User.ROLE_DIRECTOR:
                raise AuthorizationError('Director accounts cannot be suspended')
            cls._transition(account, User.STATUS_ACTIVE, User.STATUS_SUSPENDED)
        security_logger.warning(
            "account_suspended account_id=%s actor_id=%s", account.pk, actor.pk
        )
        return account

    @classmethod
    def reactivate(cls, actor, account_id):
        actor = cls.resolve_actor(actor)
        cls._ensure_admin(actor)
        with transaction.atomic():
            account = cls.get_account(account_id)
            cls._transition(account, User.STATUS_SUSPENDED, User.STATUS_ACTIVE)
        logger.info("account_reactivated account_id=%s actor_id=%s", account.pk, actor.pk)
        return account

    @classmethod
    def _ensure_admin(cls, actor):
        if actor.role not in cls.ADMIN_ROLES and not actor.is_superuser:
            raise AuthorizationError('Only directors and managers can change account status')

    @staticmethod
    def _transition(account, from_status, to_status):
        updated = User.objects.filter(pk=account.pk, status=from_status).update(
            status=to_status, updated_at=timezone.now()
        )
        if not updated:
            raise InvalidStateError(
                f"Account must be {from_status} to become {to_status}"
            )
        account.status = to_status
