from django.contrib import admin

from .models import MeterReading


@admin.register(MeterReading)
class MeterReadingAdmin(admin.ModelAdmin):
    list_display = [
        "customer",
        "reading_month",
        "previous_meter",
        "current_meter",
        "usage",
        "reading_date",
        "recorded_by",
    ]
    list_filter = ["reading_month"]
    search_fields = ["customer__full_name", "customer__customer_number"]
    readonly_fields = ["previous_meter", "recorded_by", "created_at", "updated_at"]
    list_select_related = ["customer", "recorded_by"]
    list_per_page = 50

    def usage(self, obj):
        return obj.usage_kwh

    usage.short_description = "Usage (kWh)"

    def has_add_permission(self, request):
        # previous_meter is derived from history by readings.services.record_reading
        return False

    def has_delete_permission(self, request, obj=None):
        # A billed reading keeps its bill and payments
        if obj is not None and hasattr(obj, "bill"):
            return False
        return super().has_delete_permission(request, obj)
