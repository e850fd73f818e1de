"""
Assignments URLs
"""

from django.urls import path, include
from rest_framework.routers import SimpleRouter

from .views import AssignmentViewSet

router = SimpleRouter()
router.register(r'', AssignmentViewSet, basename='assignments')

urlpatterns = [
    path('', include(router.urls)),
]
