"""
Hierarchy URLs
"""

from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import BeatViewSet, LocationViewSet, SupervisorViewSet

router = DefaultRouter()
router.register('locations', LocationViewSet, basename='hierarchy-locations')
router.register('beats', BeatViewSet, basename='hierarchy-beats')
router.register('supervisors', SupervisorViewSet, basename='hierarchy-supervisors')

urlpatterns = [
    path('', include(router.urls)),
]
