"""
Authentication Views
"""

import logging

from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema
from rest_framework import viewsets, filters
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.views import TokenObtainPairView

from apps.core.permissions import IsActiveAccount, IsDirectorOrManager

from .filters import AccountFilter
from .models import User
from .serializers import UserSerializer, WorkforceTokenObtainPairSerializer
from .services import AccountService

logger = logging.getLogger(__name__)


class WorkforceTokenObtainPairView(TokenObtainPairView):
    permission_classes = [AllowAny]
    serializer_class = WorkforceTokenObtainPairSerializer


class ProfileView(APIView):
    """The caller's own account"""

    permission_classes = [IsActiveAccount]

    @extend_schema(responses=UserSerializer)
    def get(self, request):
        return Response(UserSerializer(request.user).data)


class AccountViewSet(viewsets.ReadOnlyModelViewSet):
    """Account directory with administrative status changes"""

    serializer_class = UserSerializer
    permission_classes = [IsDirectorOrManager]
    filter_backends = [DjangoFilterBackend, filters.OrderingFilter]
    filterset_class = AccountFilter
    ordering_fields = ['first_name', 'last_name', 'date_joined', 'employee_id']
    ordering = ['first_name', 'last_name']
    queryset = User.objects.select_related('registered_by')

    @extend_schema(request=None, responses=UserSerializer)
    @action(detail=True, methods=['post'])
    def suspend(self, request, pk=None):
        account = AccountService.suspend(request.user, pk)
        return Response(UserSerializer(account).data)

    @extend_schema(request=None, responses=UserSerializer)
    @action(detail=True, methods=['post'])
    def reactivate(self, request, pk=None):
        account = AccountService.reactivate(request.user, pk)
        return Response(UserSerializer(account).data)
