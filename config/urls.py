"""
URL configuration for the Café POS project.

All business endpoints live under /api/ and are grouped per app:
    /api/auth/      - JWT tokens and current operator
    /api/discounts/ - discount administration and live evaluation
    /api/sales/     - checkout, transactions, saved carts
    /api/cashier/   - cashier session open/close and history
"""
from django.contrib import admin
from django.urls import path, include
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView

from config.views import health_check

urlpatterns = [
    # Health check (for Render)
    path('api/health/', health_check, name='health-check'),

    # Admin
    path('admin/', admin.site.urls),

    # API Documentation
    path('api/schema/', SpectacularAPIView.as_view(), name='api-schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='api-schema'), name='api-docs'),

    # Authentication
    path('api/auth/', include('apps.accounts.urls')),

    # API endpoints
    path('api/discounts/', include('apps.discounts.urls')),
    path('api/sales/', include('apps.sales.urls')),
    path('api/cashier/', include('apps.cashier.urls')),
]


# Custom error handlers
handler404 = 'config.views.error_404'
handler500 = 'config.views.error_500'
