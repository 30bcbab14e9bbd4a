from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'sales'

router = DefaultRouter()
router.register(r'transactions', views.TransactionViewSet, basename='transaction')
router.register(r'saved-carts', views.SavedCartViewSet, basename='saved-cart')

urlpatterns = [
    # GET    /api/sales/transactions/               - Transaction history
    # POST   /api/sales/transactions/               - Complete a sale
    # GET    /api/sales/transactions/{id}/          - Transaction detail
    # POST   /api/sales/transactions/{id}/void/     - Void (admin)
    # GET    /api/sales/saved-carts/                - Saved carts
    # POST   /api/sales/saved-carts/                - Save a cart
    # DELETE /api/sales/saved-carts/{id}/           - Discard a saved cart
    # POST   /api/sales/saved-carts/{id}/restore/   - Restore a saved cart
    path('cart/price/', views.price_cart, name='price-cart'),

    path('', include(router.urls)),
]
