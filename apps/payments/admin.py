from django.contrib import admin
from .models import Transaction

@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    list_display = ('reference', 'application', 'amount', 'currency', 'payment_method', 'processor', 'status', 'created_at')
    list_filter = ('status', 'processor', 'payment_method')
    search_fields = ('reference', 'application__job__title')
