import logging

from django.db import DatabaseError
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from .serializers import (
    OrderSerializer,
    OrderCreateSerializer,
    OrderStatusUpdateSerializer,
    StoreClosedResponseSerializer,
)
from apps.stores.serializers import OpeningInstantSerializer
from apps.orders.services import (
    create_order,
    transition_order,
    cancel_order,
    get_active_order,
    get_order_for,
    list_orders_for,
    # Exceptions
    OrderServiceError,
    ActiveOrderExistsError,
    StoreClosedError,
    OrderNotFoundError,
    InvalidTransitionError,
    NotCancellableError,
    InsufficientPermissionsError,
    InfrastructureError,
)


logger = logging.getLogger(__name__)

IDEMPOTENCY_KEY_MAX_LENGTH = 64


def _error_response(exc):
    """Translate a service exception into an error response."""
    if isinstance(exc, InfrastructureError):
        http_status = status.HTTP_503_SERVICE_UNAVAILABLE
    elif isinstance(exc, OrderNotFoundError):
        http_status = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, InsufficientPermissionsError):
        http_status = status.HTTP_403_FORBIDDEN
    elif isinstance(exc, (ActiveOrderExistsError, InvalidTransitionError, NotCancellableError)):
        http_status = status.HTTP_409_CONFLICT
    else:
        http_status = status.HTTP_400_BAD_REQUEST

    body = {'error': str(exc), 'code': exc.code}
    if isinstance(exc, StoreClosedError):
        body['next_opening'] = (
            OpeningInstantSerializer(exc.next_opening).data if exc.next_opening else None
        )
    return Response(body, status=http_status)


class OrderPagination(PageNumberPagination):
    """Custom pagination for orders."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class OrderViewSet(viewsets.GenericViewSet):
    """
    ViewSet for orders.

    Orders are never deleted: DELETE cancels. Business logic lives in
    services; views only translate HTTP.

    list: Orders visible to the user (own, own stores', or all for admins)
    create: Place an order
    retrieve: Get a specific order
    destroy: Cancel an order
    active: The user's current active order, or null
    status: Move an order to a new status
    """

    serializer_class = OrderSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = OrderPagination

    def get_queryset(self):
        return list_orders_for(self.request.user)

    def list(self, request):
        """List orders, newest first."""
        try:
            page = self.paginate_queryset(self.get_queryset())
            data = OrderSerializer(page, many=True).data
        except DatabaseError:
            logger.exception("Database failure listing orders")
            return _error_response(InfrastructureError())
        return self.get_paginated_response(data)

    def retrieve(self, request, pk=None):
        """Get a specific order."""
        try:
            order = get_order_for(order_id=pk, user=request.user)
        except (OrderServiceError, InfrastructureError) as e:
            return _error_response(e)
        return Response(OrderSerializer(order).data)

    @extend_schema(
        request=OrderCreateSerializer,
        parameters=[
            OpenApiParameter(
                'Idempotency-Key',
                OpenApiTypes.STR,
                location=OpenApiParameter.HEADER,
                required=False,
                description='Repeat a submission safely; the same key returns the same order',
            ),
        ],
        responses={201: OrderSerializer, 400: StoreClosedResponseSerializer},
        tags=['orders'],
    )
    def create(self, request):
        """
        Place an order.

        POST /api/orders/
        Body: {"store": "<uuid>", "items": [...], "total_amount": "8.50"}
        """
        serializer = OrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        idempotency_key = request.headers.get('Idempotency-Key') or None
        if idempotency_key and len(idempotency_key) > IDEMPOTENCY_KEY_MAX_LENGTH:
            return Response(
                {'error': 'Idempotency-Key is too long', 'code': 'invalid_idempotency_key'},
                status=status.HTTP_400_BAD_REQUEST
            )

        try:
            order = create_order(
                customer=request.user,
                store_id=data.get('store'),
                items=data.get('items') or [],
                total_amount=data['total_amount'],
                idempotency_key=idempotency_key,
            )
        except (OrderServiceError, InfrastructureError) as e:
            return _error_response(e)

        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)

    @extend_schema(responses={200: OrderSerializer}, tags=['orders'])
    def destroy(self, request, pk=None):
        """
        Cancel an order. The order is kept with status ``cancelled``.

        DELETE /api/orders/{id}/
        """
        try:
            order = cancel_order(order_id=pk, actor=request.user)
        except (OrderServiceError, InfrastructureError) as e:
            return _error_response(e)
        return Response(OrderSerializer(order).data)

    @extend_schema(responses={200: OrderSerializer}, tags=['orders'])
    @action(detail=False, methods=['get'])
    def active(self, request):
        """
        Get the user's active order (pending, preparing or ready).

        GET /api/orders/active/
        Returns null when there is none.
        """
        try:
            order = get_active_order(request.user)
        except InfrastructureError as e:
            return _error_response(e)
        return Response(OrderSerializer(order).data if order else None)

    @extend_schema(
        request=OrderStatusUpdateSerializer,
        responses={200: OrderSerializer},
        tags=['orders'],
    )
    @action(detail=True, methods=['patch'], url_path='status', url_name='status')
    def update_status(self, request, pk=None):
        """
        Move an order to a new status.

        PATCH /api/orders/{id}/status/
        Body: {"status": "preparing"}
        """
        serializer = OrderStatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            order = transition_order(
                order_id=pk,
                new_status=serializer.validated_data['status'],
                actor=request.user,
            )
        except (OrderServiceError, InfrastructureError) as e:
            return _error_response(e)
        return Response(OrderSerializer(order).data)
