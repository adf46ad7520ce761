from django.contrib import admin
from .models import Gift, GiftTransaction


@admin.register(Gift)
class GiftAdmin(admin.ModelAdmin):
    list_display = ['name', 'price', 'category', 'rarity', 'is_active', 'created_at']
    list_filter = ['rarity', 'category', 'is_active']
    search_fields = ['name', 'description']


@admin.register(GiftTransaction)
class GiftTransactionAdmin(admin.ModelAdmin):
    list_display = ['gift_id', 'sender_id', 'recipient_id', 'quantity', 'total_tokens', 'is_anonymous', 'created_at']
    readonly_fields = ['id', 'created_at']
