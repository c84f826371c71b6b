# cart/urls.py

from django.urls import path

from cart.views import CartItemView, CartView

app_name = "cart"

urlpatterns = [
    path("", CartView.as_view(), name="cart"),
    path("items/<uuid:item_id>/", CartItemView.as_view(), name="cart-item"),
]
