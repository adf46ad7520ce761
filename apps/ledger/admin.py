from django.contrib import admin
from .models import (
    Wallet,
    WalletTransaction,
    WithdrawalRequest,
    PaymentTransaction,
    DepositRequest,
    PaymentInfo,
)


@admin.register(Wallet)
class WalletAdmin(admin.ModelAdmin):
    list_display = ['user_id', 'balance', 'tokens', 'total_deposited', 'total_withdrawn', 'updated_at']
    search_fields = ['user_id', 'bank_account_number', 'paypal_email']
    readonly_fields = ['balance', 'tokens', 'total_deposited', 'total_withdrawn', 'created_at', 'updated_at']


@admin.register(WalletTransaction)
class WalletTransactionAdmin(admin.ModelAdmin):
    list_display = ['id', 'user_id', 'transaction_type', 'amount', 'tokens', 'balance_after', 'status', 'created_at']
    list_filter = ['transaction_type', 'status']
    search_fields = ['user_id', 'description']
    readonly_fields = ['created_at']


@admin.register(WithdrawalRequest)
class WithdrawalRequestAdmin(admin.ModelAdmin):
    list_display = ['id', 'user_id', 'amount', 'status', 'processed_at', 'created_at']
    list_filter = ['status']
    readonly_fields = ['created_at', 'updated_at', 'processed_at']


@admin.register(PaymentTransaction)
class PaymentTransactionAdmin(admin.ModelAdmin):
    list_display = ['id', 'transaction_type', 'status', 'amount', 'currency', 'payment_method', 'created_at']
    list_filter = ['transaction_type', 'status', 'payment_method']
    search_fields = ['reference_id', 'description']
    date_hierarchy = 'created_at'
    readonly_fields = ['created_at', 'updated_at', 'processed_at']


@admin.register(DepositRequest)
class DepositRequestAdmin(admin.ModelAdmin):
    list_display = ['id', 'user_id', 'amount', 'code_pay', 'status', 'created_at']
    list_filter = ['status']
    search_fields = ['code_pay']


@admin.register(PaymentInfo)
class PaymentInfoAdmin(admin.ModelAdmin):
    list_display = ['bank_name', 'account_number', 'account_name', 'is_active']
    list_filter = ['is_active']
    search_fields = ['bank_name', 'account_number', 'account_name']
