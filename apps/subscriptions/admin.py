from django.contrib import admin
from .models import StreamPackage, CreatorPackageSubscription


@admin.register(StreamPackage)
class StreamPackageAdmin(admin.ModelAdmin):
    list_display = ['name', 'duration', 'price', 'max_concurrent_streams', 'priority_support', 'is_active']
    list_filter = ['is_active', 'priority_support']
    search_fields = ['name']


@admin.register(CreatorPackageSubscription)
class CreatorPackageSubscriptionAdmin(admin.ModelAdmin):
    list_display = ['creator_id', 'package_id', 'status', 'price', 'start_date', 'end_date']
    list_filter = ['status']
    readonly_fields = ['id', 'created_at', 'updated_at']
