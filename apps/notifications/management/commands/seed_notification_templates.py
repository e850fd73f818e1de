"""
Seed Notification Templates - Create or refresh the standard event templates
Run with: python manage.py seed_notification_templates
"""

from django.core.management.base import BaseCommand
from apps.notifications.defaults import DEFAULT_TEMPLATES
from apps.notifications.models import NotificationTemplate


class Command(BaseCommand):
    help = 'Seed standard notification templates for workforce events'

    def add_arguments(self, parser):
        parser.add_argument(
            '--keep-existing',
            action='store_true',
            help='Only create missing templates; leave edited ones untouched',
        )

    def handle(self, *args, **options):
        created_count = 0
        updated_count = 0

        for tmpl in DEFAULT_TEMPLATES:
            defaults = {
                'name': tmpl['name'],
                'subject': tmpl['subject'],
                'body': tmpl['body'],
                'channel': tmpl['channel'],
                'variables': tmpl['variables'],
            }
            if options['keep_existing']:
                _, created = NotificationTemplate.objects.get_or_create(code=tmpl['code'], defaults=defaults)
            else:
                _, created = NotificationTemplate.objects.update_or_create(code=tmpl['code'], defaults=defaults)

            if created:
                created_count += 1
            else:
                updated_count += 1

        self.stdout.write(self.style.SUCCESS(f'Done! Created {created_count}, Updated {updated_count} templates.'))
