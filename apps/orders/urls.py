from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'orders'

# Router for ViewSets
router = DefaultRouter()
router.register(r'', views.OrderViewSet, basename='order')

urlpatterns = [
    # Order ViewSet routes
    # GET    /api/orders/               - List visible orders
    # POST   /api/orders/               - Place an order
    # GET    /api/orders/{id}/          - Get order details
    # DELETE /api/orders/{id}/          - Cancel order

    # Custom order actions
    # GET    /api/orders/active/        - Current active order or null
    # PATCH  /api/orders/{id}/status/   - Change order status

    path('', include(router.urls)),
]
