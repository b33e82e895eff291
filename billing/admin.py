from django.contrib import admin, messages
from django.utils import timezone

from .adapters import actor_for_user
from .exceptions import BillingServiceError
from .models import Bill, Payment
from .payments import decide_payment

SNAPSHOT_FIELDS = [
    "customer",
    "meter_reading",
    "tariff",
    "bill_number",
    "bill_month",
    "usage_kwh",
    "rate_per_kwh",
    "tax_percentage",
    "electricity_charge",
    "admin_fee",
    "tax_amount",
    "total_amount",
    "due_date",
    "status",
    "created_at",
    "updated_at",
]


class PaymentInline(admin.TabularInline):
    model = Payment
    extra = 0
    can_delete = False
    fields = ["payment_number", "payment_method", "amount", "status", "payment_date", "verified_by"]
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Bill)
class BillAdmin(admin.ModelAdmin):
    list_display = [
        "bill_number",
        "customer",
        "bill_month",
        "usage_kwh",
        "total_amount",
        "due_date",
        "current_status",
    ]
    list_filter = ["status", "bill_month"]
    search_fields = ["bill_number", "customer__full_name", "customer__customer_number"]
    readonly_fields = SNAPSHOT_FIELDS
    list_select_related = ["customer"]
    inlines = [PaymentInline]

    def has_add_permission(self, request):
        # Bills come from billing.services.generate_bill only
        return False

    def has_delete_permission(self, request, obj=None):
        # Same rule as billing.services.delete_bill
        if obj is not None and obj.payments.exists():
            return False
        return super().has_delete_permission(request, obj)

    def current_status(self, obj):
        return obj.display_status(timezone.localdate()).value

    current_status.short_description = "Status"


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = [
        "payment_number",
        "bill",
        "payment_method",
        "amount",
        "payment_date",
        "status",
        "verified_by",
    ]
    list_filter = ["status", "payment_method"]
    search_fields = ["payment_number", "bill__bill_number"]
    readonly_fields = [
        "bill",
        "payment_number",
        "payment_method",
        "amount",
        "payment_date",
        "status",
        "submitted_by",
        "verified_by",
        "verification_date",
        "created_at",
    ]
    list_select_related = ["bill"]
    actions = ["verify_selected_payments", "reject_selected_payments"]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    def _decide(self, request, queryset, decision):
        actor = actor_for_user(request.user)
        decided = 0
        for payment in queryset:
            try:
                decide_payment(payment.pk, decision, actor)
            except BillingServiceError as e:
                self.message_user(request, f"{payment.payment_number}: {e.message}", messages.WARNING)
                continue
            decided += 1
        self.message_user(request, f"{decided} payment(s) {decision}.", messages.SUCCESS)

    @admin.action(description="Verify selected payments")
    def verify_selected_payments(self, request, queryset):
        self._decide(request, queryset, Payment.Status.VERIFIED)

    @admin.action(description="Reject selected payments")
    def reject_selected_payments(self, request, queryset):
        self._decide(request, queryset, Payment.Status.REJECTED)
