# catalog/admin.py

from django.contrib import admin

from catalog.models import Category, Product


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "making_charges_percent_default")
    search_fields = ("name",)


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("name", "sku", "category", "material", "price", "making_charges", "stock", "is_active")
    list_filter = ("category", "material", "is_active")
    search_fields = ("name", "sku")
    readonly_fields = ("making_charges",)
