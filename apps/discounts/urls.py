from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'discounts'

router = DefaultRouter()
router.register(r'', views.DiscountViewSet, basename='discount')

urlpatterns = [
    # GET    /api/discounts/                 - List discounts
    # POST   /api/discounts/                 - Create discount (admin)
    # GET    /api/discounts/{id}/            - Get discount
    # PUT    /api/discounts/{id}/            - Update discount (admin)
    # PATCH  /api/discounts/{id}/            - Partial update (admin)
    # DELETE /api/discounts/{id}/            - Delete discount (admin)
    # POST   /api/discounts/{id}/evaluate/   - Evaluate against a cart
    path('', include(router.urls)),
]
