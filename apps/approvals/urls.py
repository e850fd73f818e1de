"""
Approvals URLs
"""

from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import RegistrationViewSet

router = DefaultRouter()
router.register('registrations', RegistrationViewSet, basename='approvals-registrations')

urlpatterns = [
    path('', include(router.urls)),
]
