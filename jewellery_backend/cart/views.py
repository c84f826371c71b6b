# cart/views.py

"""
CART API

Hard rules:
- Money is server-owned: the summary is priced by the pricing engine at
  live catalog prices; the order snapshots them at creation.
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import serializers, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from cart.services.cart_service import (
    add_item,
    cart_summary,
    get_or_create_cart,
    remove_item,
    update_item,
)


class AddCartItemInputSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)
    size = serializers.CharField(required=False, allow_blank=True, default="")


class UpdateCartItemInputSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=1)


class CartView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: dict}, description="Cart contents with price breakdown")
    def get(self, request):
        cart = get_or_create_cart(request.user)
        return Response(cart_summary(cart))

    @extend_schema(
        request=AddCartItemInputSerializer,
        responses={201: dict},
        description="Add a product to the cart (quantities merge per product+size)",
    )
    def post(self, request):
        serializer = AddCartItemInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        add_item(
            user=request.user,
            product_id=serializer.validated_data["product_id"],
            quantity=serializer.validated_data["quantity"],
            size=serializer.validated_data.get("size", ""),
        )
        cart = get_or_create_cart(request.user)
        return Response(cart_summary(cart), status=status.HTTP_201_CREATED)


class CartItemView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(request=UpdateCartItemInputSerializer, responses={200: dict})
    def patch(self, request, item_id):
        serializer = UpdateCartItemInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        update_item(user=request.user, item_id=item_id, quantity=serializer.validated_data["quantity"])
        return Response(cart_summary(get_or_create_cart(request.user)))

    @extend_schema(responses={200: dict})
    def delete(self, request, item_id):
        remove_item(user=request.user, item_id=item_id)
        return Response(cart_summary(get_or_create_cart(request.user)))
