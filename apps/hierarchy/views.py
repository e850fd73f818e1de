"""
Hierarchy ViewSets - locations, beats and supervisory records
"""

from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema
from rest_framework import filters, mixins, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.core.permissions import IsActiveAccount, IsDirectorOrManagerOrReadOnly
from .filters import BeatFilter, LocationFilter, SupervisorRecordFilter
from .models import Beat, Location, SupervisorRecord
from .serializers import (
    BeatSerializer,
    GeneralSupervisorLinkSerializer,
    LocationSerializer,
    SupervisorLocationSerializer,
    SupervisorRecordSerializer,
)
from .services import HierarchyRegistry


class CatalogueViewSet(
    mixins.CreateModelMixin,
    mixins.RetrieveModelMixin,
    mixins.UpdateModelMixin,
    mixins.ListModelMixin,
    viewsets.GenericViewSet,
):
    """Create/read/update only; catalogue entries are deactivated, never deleted"""

    permission_classes = [IsDirectorOrManagerOrReadOnly]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]


class LocationViewSet(CatalogueViewSet):
    queryset = Location.objects.with_total_beats()
    serializer_class = LocationSerializer
    filterset_class = LocationFilter
    search_fields = ['name', 'address']
    ordering_fields = ['name', 'created_at']
    ordering = ['name']

    @extend_schema(responses=BeatSerializer(many=True))
    @action(detail=True, methods=['get'])
    def beats(self, request, pk=None):
        """Active beats at this location"""
        queryset = HierarchyRegistry.get_beats_by_location(pk)
        serializer = BeatSerializer(queryset, many=True)
        return Response(serializer.data)


class BeatViewSet(CatalogueViewSet):
    queryset = Beat.objects.select_related('location')
    serializer_class = BeatSerializer
    filterset_class = BeatFilter
    search_fields = ['beat_code', 'name']
    ordering_fields = ['beat_code', 'number_of_operators', 'created_at']
    ordering = ['beat_code']


class SupervisorViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Supervisory records and their reporting edges.
    Registration and decisions go through the approvals endpoints.
    """

    queryset = SupervisorRecord.objects.select_related(
        'account', 'registered_by', 'decided_by', 'location', 'general_supervisor__account'
    )
    serializer_class = SupervisorRecordSerializer
    permission_classes = [IsActiveAccount]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_class = SupervisorRecordFilter
    search_fields = ['account__first_name', 'account__last_name', 'account__employee_id']
    ordering_fields = ['created_at', 'decided_at']
    ordering = ['-created_at']

    @action(detail=False, methods=['get'])
    def general(self, request):
        """Approved general supervisors"""
        queryset = HierarchyRegistry.get_approved_general_supervisors()
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(self.get_serializer(page, many=True).data)
        return Response(self.get_serializer(queryset, many=True).data)

    @action(detail=True, methods=['get'])
    def team(self, request, pk=None):
        """Approved supervisors reporting to this general supervisor"""
        queryset = HierarchyRegistry.get_supervisors_under(pk)
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(self.get_serializer(page, many=True).data)
        return Response(self.get_serializer(queryset, many=True).data)

    @extend_schema(request=SupervisorLocationSerializer, responses=SupervisorRecordSerializer)
    @action(detail=True, methods=['post'])
    def location(self, request, pk=None):
        """Rebind a supervisor to a location (null unbinds it)"""
        serializer = SupervisorLocationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        record = HierarchyRegistry.reassign_supervisor_location(
            request.user, pk, serializer.validated_data['location']
        )
        return Response(self.get_serializer(HierarchyRegistry.get_supervisor(record.pk)).data)

    @extend_schema(request=GeneralSupervisorLinkSerializer, responses=SupervisorRecordSerializer)
    @action(detail=True, methods=['post'], url_path='general-supervisor')
    def general_supervisor(self, request, pk=None):
        """Change which general supervisor a supervisor reports to"""
        serializer = GeneralSupervisorLinkSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        record = HierarchyRegistry.link_general_supervisor(
            request.user, pk, serializer.validated_data['general_supervisor']
        )
        return Response(self.get_serializer(HierarchyRegistry.get_supervisor(record.pk)).data)
