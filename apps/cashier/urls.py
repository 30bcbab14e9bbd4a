from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'cashier'

router = DefaultRouter()
router.register(r'sessions', views.CashierSessionViewSet, basename='session')

urlpatterns = [
    # GET    /api/cashier/sessions/                      - Shift history
    # GET    /api/cashier/sessions/{id}/                 - Session detail
    # GET    /api/cashier/sessions/status/?date=         - Current operator's state
    # POST   /api/cashier/sessions/open/                 - Open today's session
    # POST   /api/cashier/sessions/{id}/preview_close/   - Close summary preview
    # POST   /api/cashier/sessions/{id}/close/           - Close with counted amounts
    path('', include(router.urls)),
]
