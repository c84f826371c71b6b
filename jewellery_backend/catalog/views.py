# catalog/views.py

"""
CATALOG (READ-ONLY)

Product/category management happens in Django admin; the API only exposes
the storefront read side used by cart and checkout clients.
"""

from drf_spectacular.utils import extend_schema
from rest_framework import viewsets
from rest_framework.permissions import AllowAny

from catalog.models import Category, Product
from catalog.serializers import CategorySerializer, ProductSerializer


@extend_schema(tags=["catalog"])
class CategoryViewSet(viewsets.ReadOnlyModelViewSet):
    permission_classes = [AllowAny]
    serializer_class = CategorySerializer
    queryset = Category.objects.all()


@extend_schema(tags=["catalog"])
class ProductViewSet(viewsets.ReadOnlyModelViewSet):
    permission_classes = [AllowAny]
    serializer_class = ProductSerializer
    filterset_fields = ["category", "material"]

    def get_queryset(self):
        return Product.objects.filter(is_active=True).select_related("category")
