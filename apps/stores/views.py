from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from .models import Store
from .serializers import (
    StoreSerializer,
    StoreCreateSerializer,
    StoreUpdateSerializer,
    StoreStatusSerializer,
    StoreStatusQuerySerializer,
)
from apps.stores.services import (
    create_store,
    update_store,
    get_store_status,
    # Exceptions
    StoresServiceError,
    InvalidScheduleError,
    InvalidStoreOwnerError,
    InsufficientPermissionsError,
    StoreNotFoundError,
)


def _error_response(exc, http_status):
    body = {'error': str(exc), 'code': exc.code}
    if isinstance(exc, InvalidScheduleError) and exc.errors:
        body['errors'] = exc.errors
    return Response(body, status=http_status)


class StorePagination(PageNumberPagination):
    """Custom pagination for stores."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class StoreViewSet(viewsets.ModelViewSet):
    """
    ViewSet for stores.

    Reads are public. Business logic lives in services;
    views only translate HTTP.

    list: Active stores (admins also see inactive ones)
    create: Create a store for a coffee shop account (admin only)
    retrieve: Get a specific store
    update/partial_update: Update store details or hours (owner or admin)
    status: Open/closed state and next opening
    """

    queryset = Store.objects.select_related('owner')
    serializer_class = StoreSerializer
    pagination_class = StorePagination
    http_method_names = ['get', 'post', 'put', 'patch', 'head', 'options']

    def get_queryset(self):
        queryset = super().get_queryset()
        user = self.request.user
        if self.action == 'list' and not (user.is_authenticated and user.is_admin):
            queryset = queryset.filter(is_active=True)
        return queryset

    def get_serializer_class(self):
        """Use different serializers for different actions."""
        if self.action == 'create':
            return StoreCreateSerializer
        elif self.action in ['update', 'partial_update']:
            return StoreUpdateSerializer
        return StoreSerializer

    def get_permissions(self):
        """Set permissions based on action."""
        if self.action in ['list', 'retrieve', 'store_status']:
            return [AllowAny()]
        return [IsAuthenticated()]

    def create(self, request, *args, **kwargs):
        """Create a new store."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            store = create_store(
                created_by=request.user,
                owner_id=data['owner'],
                name=data['name'],
                address=data['address'],
                hours=data['hours'],
                phone=data.get('phone', ''),
                timezone=data.get('timezone'),
                is_active=data.get('is_active', True),
            )
        except InsufficientPermissionsError as e:
            return _error_response(e, status.HTTP_403_FORBIDDEN)
        except (InvalidStoreOwnerError, InvalidScheduleError) as e:
            return _error_response(e, status.HTTP_400_BAD_REQUEST)

        return Response(StoreSerializer(store).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        """Update store details; PUT and PATCH both apply only given fields."""
        serializer = StoreUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            store = update_store(
                store_id=self.kwargs['pk'],
                user=request.user,
                **serializer.validated_data
            )
        except StoreNotFoundError as e:
            return _error_response(e, status.HTTP_404_NOT_FOUND)
        except InsufficientPermissionsError as e:
            return _error_response(e, status.HTTP_403_FORBIDDEN)
        except StoresServiceError as e:
            return _error_response(e, status.HTTP_400_BAD_REQUEST)

        return Response(StoreSerializer(store).data)

    def partial_update(self, request, *args, **kwargs):
        return self.update(request, *args, **kwargs)

    @extend_schema(
        parameters=[
            OpenApiParameter('at', OpenApiTypes.DATETIME, description='Evaluation instant (default: now)'),
        ],
        responses={200: StoreStatusSerializer},
        tags=['stores'],
    )
    @action(detail=True, methods=['get'], url_path='status', url_name='status')
    def store_status(self, request, pk=None):
        """
        Get whether the store is open and when it next opens.

        GET /api/stores/{id}/status/?at=2025-01-06T19:59:00Z
        """
        store = self.get_object()

        query = StoreStatusQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        store_status = get_store_status(store, at=query.validated_data.get('at'))
        return Response(StoreStatusSerializer(store_status).data)
