from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'stores'

# Router for ViewSets
router = DefaultRouter()
router.register(r'', views.StoreViewSet, basename='store')

urlpatterns = [
    # Store ViewSet routes
    # GET    /api/stores/              - List active stores
    # POST   /api/stores/              - Create store (admin)
    # GET    /api/stores/{id}/         - Get store details
    # PUT    /api/stores/{id}/         - Update store (owner/admin)
    # PATCH  /api/stores/{id}/         - Partial update (owner/admin)

    # Custom store actions
    # GET    /api/stores/{id}/status/  - Open/closed state and next opening

    path('', include(router.urls)),
]
