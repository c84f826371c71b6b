# catalog/serializers.py

from rest_framework import serializers

from catalog.models import Category, Product
from catalog.services.making_charges import resolve_making_charge_percent


class CategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = [
            "id",
            "name",
            "description",
            "making_charges_percent_default",
            "making_charges_percent_by_material",
        ]
        read_only_fields = fields


class ProductSerializer(serializers.ModelSerializer):
    """
    Storefront product representation.

    effective_making_charges_percent shows which rule of the resolution
    chain applied (override / material / category default / zero).
    """

    category_name = serializers.CharField(source="category.name", read_only=True, default=None)
    effective_making_charges_percent = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = [
            "id",
            "sku",
            "name",
            "description",
            "category",
            "category_name",
            "material",
            "weight_grams",
            "price",
            "making_charges_percent",
            "effective_making_charges_percent",
            "making_charges",
            "hsn_code",
            "stock",
            "is_active",
        ]
        read_only_fields = fields

    def get_effective_making_charges_percent(self, obj) -> str:
        return str(resolve_making_charge_percent(obj))
