"""
Approval ViewSets - supervisory registrations and their decisions
"""

from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema
from rest_framework import filters, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.authentication.models import User
from apps.core.permissions import IsActiveAccount, IsDirectorOrManager
from apps.hierarchy.models import SupervisorRecord
from .filters import RegistrationFilter
from .serializers import (
    ApprovalStatsSerializer,
    DecisionResultSerializer,
    DecisionSerializer,
    RegistrationSerializer,
    RegistrationSubmitSerializer,
)
from .services import ApprovalEngine


class RegistrationViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Registrations are submitted by managers (general supervisors) and general
    supervisors (supervisors), and decided by directors and managers respectively.
    """

    queryset = SupervisorRecord.objects.none()
    serializer_class = RegistrationSerializer
    permission_classes = [IsActiveAccount]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_class = RegistrationFilter
    search_fields = ['account__first_name', 'account__last_name', 'account__email']
    ordering_fields = ['created_at', 'decided_at']
    ordering = ['-created_at']

    def get_queryset(self):
        queryset = SupervisorRecord.objects.select_related(
            'account', 'registered_by', 'decided_by', 'location', 'general_supervisor__account'
        ).prefetch_related('actions__actor')
        user = self.request.user
        if user.is_superuser or user.has_role(User.ROLE_DIRECTOR, User.ROLE_MANAGER):
            return queryset
        return queryset.filter(registered_by=user)

    @extend_schema(request=RegistrationSubmitSerializer, responses={201: RegistrationSerializer})
    def create(self, request, *args, **kwargs):
        serializer = RegistrationSubmitSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        record = ApprovalEngine.submit_registration(request.user, serializer.to_payload())
        instance = self.get_queryset().get(pk=record.pk)
        return Response(self.get_serializer(instance).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=DecisionSerializer, responses=DecisionResultSerializer)
    @action(detail=True, methods=['post'])
    def decide(self, request, pk=None):
        """Approve or reject a pending registration"""
        serializer = DecisionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = ApprovalEngine.decide(
            request.user,
            pk,
            serializer.validated_data['decision'],
            serializer.validated_data['reason'],
        )
        credentials = None
        if result.credentials is not None:
            credentials = {
                'employee_id': result.credentials.employee_id,
                'email': result.credentials.email,
                'temporary_password': result.credentials.temporary_password,
            }
        return Response({
            'registration': self.get_serializer(result.record).data,
            'credentials': credentials,
        })

    @action(detail=False, methods=['get'])
    def pending(self, request):
        """Pending registrations the caller may decide"""
        queryset = ApprovalEngine.list_pending(request.user.role).prefetch_related('actions__actor')
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(self.get_serializer(page, many=True).data)
        return Response(self.get_serializer(queryset, many=True).data)

    @extend_schema(responses=ApprovalStatsSerializer)
    @action(detail=False, methods=['get'], permission_classes=[IsDirectorOrManager])
    def stats(self, request):
        return Response(ApprovalEngine.get_approval_stats())
