from django.contrib import admin
from .models import Creator


@admin.register(Creator)
class CreatorAdmin(admin.ModelAdmin):
    list_display = ['stage_name', 'user_id', 'rating', 'total_ratings', 'is_verified', 'is_live']
    list_filter = ['is_verified', 'is_live']
    search_fields = ['stage_name', 'title_bio', 'service']
    readonly_fields = ['id', 'created_at', 'updated_at']
