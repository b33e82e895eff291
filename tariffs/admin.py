from django.contrib import admin, messages
from django.http import HttpResponse
from django.urls import path

from .models import Tariff
from .yaml_service import TariffYAMLExporter


@admin.register(Tariff)
class TariffAdmin(admin.ModelAdmin):
    list_display = [
        "power_capacity",
        "rate_per_kwh",
        "admin_fee",
        "tax_percentage",
        "effective_date",
        "is_active",
    ]
    list_filter = ["power_capacity", "is_active"]
    date_hierarchy = "effective_date"
    readonly_fields = ["created_at", "updated_at"]
    actions = ["deactivate_selected_tariffs", "export_selected_tariffs_to_yaml"]

    def has_delete_permission(self, request, obj=None):
        # Bills reference tariffs; retire them with the deactivate action
        return False

    def get_urls(self):
        """Add custom URL for the full YAML export."""
        urls = super().get_urls()
        custom_urls = [
            path(
                "export/",
                self.admin_site.admin_view(self.export_tariffs_view),
                name="tariffs_tariff_export",
            ),
        ]
        return custom_urls + urls

    def export_tariffs_view(self, request):
        """Export all tariffs as YAML download."""
        exporter = TariffYAMLExporter(Tariff.objects.all())
        response = HttpResponse(exporter.export_to_yaml(), content_type="application/x-yaml")
        response["Content-Disposition"] = 'attachment; filename="tariffs.yaml"'
        return response

    @admin.action(description="Deactivate selected tariffs")
    def deactivate_selected_tariffs(self, request, queryset):
        count = 0
        for tariff in queryset.filter(is_active=True):
            tariff.deactivate()
            count += 1
        self.message_user(request, f"Deactivated {count} tariff(s).", messages.SUCCESS)

    @admin.action(description="Export selected tariffs to YAML")
    def export_selected_tariffs_to_yaml(self, request, queryset):
        """Export selected tariffs as YAML download."""
        exporter = TariffYAMLExporter(queryset)
        response = HttpResponse(exporter.export_to_yaml(), content_type="application/x-yaml")
        response["Content-Disposition"] = 'attachment; filename="tariffs_selected.yaml"'
        return response
