"""Notifications URLs"""
from django.urls import path, include
from rest_framework.routers import SimpleRouter

from .views import NotificationViewSet

# Mounted at the app root, so no API root view.
router = SimpleRouter()
router.register(r'', NotificationViewSet, basename='notification')

urlpatterns = [path('', include(router.urls))]
