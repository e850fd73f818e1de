"""
Management command to bootstrap a Director or Manager account.

Supervisory accounts go through the registration workflow; the top of the
hierarchy has to be created out-of-band.
"""

import secrets

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError
from apps.authentication.models import User


class Command(BaseCommand):
    help = 'Create an active Director or Manager account'

    def add_arguments(self, parser):
        parser.add_argument('--email', type=str, required=True, help='Account email')
        parser.add_argument('--first-name', type=str, required=True, help='First name')
        parser.add_argument('--last-name', type=str, required=True, help='Last name')
        parser.add_argument(
            '--role',
            type=str,
            default=User.ROLE_DIRECTOR,
            choices=[User.ROLE_DIRECTOR, User.ROLE_MANAGER],
        )
        parser.add_argument('--password', type=str, default=None, help='Password (generated when omitted)')
        parser.add_argument('--staff', action='store_true', help='Grant Django admin access')

    def handle(self, *args, **options):
        email = options['email']

        if User.objects.filter(email__iexact=email).exists():
            raise CommandError(f'User with email {email} already exists.')

        password = options['password']
        generated = password is None
        if generated:
            password = secrets.token_urlsafe(settings.CREDENTIAL_PASSWORD_BYTES)

        user = User.objects.create_user(
            email=email,
            password=password,
            first_name=options['first_name'],
            last_name=options['last_name'],
            role=options['role'],
            status=User.STATUS_ACTIVE,
            is_staff=options['staff'],
            must_change_password=generated,
        )

        self.stdout.write(self.style.SUCCESS(f'Created {user.get_role_display()}: {email}'))
        if generated:
            self.stdout.write(self.style.SUCCESS(f'Temporary password: {password}'))
            self.stdout.write(self.style.WARNING('Please change the password after first login!'))
