"""
Authentication URLs
"""

from django.urls import path, include
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenRefreshView

from .views import AccountViewSet, ProfileView, WorkforceTokenObtainPairView

router = DefaultRouter()
router.register('accounts', AccountViewSet, basename='auth-accounts')

urlpatterns = [
    path('', include(router.urls)),
    path('token/', WorkforceTokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),
    path('me/', ProfileView.as_view(), name='profile'),
]
