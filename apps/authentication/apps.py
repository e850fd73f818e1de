"""Authentication app configuration"""
from django.apps import AppConfig


class AuthenticationConfig(AppConfig):
    name = 'apps.authentication'
    verbose_name = 'Accounts'
