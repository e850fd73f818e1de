"""Hierarchy app configuration"""
from django.apps import AppConfig


class HierarchyConfig(AppConfig):
    name = 'apps.hierarchy'
    verbose_name = 'Hierarchy'
