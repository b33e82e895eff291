from django.contrib import admin

from .models import Customer


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = [
        "customer_number",
        "full_name",
        "power_capacity",
        "status",
        "user",
        "created_at",
    ]
    list_filter = ["status", "power_capacity"]
    search_fields = ["customer_number", "full_name", "user__email"]
    readonly_fields = ["customer_number", "created_at", "updated_at"]
