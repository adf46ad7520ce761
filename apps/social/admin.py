from django.contrib import admin
from .models import Post, Comment, Reaction, Story, StoryView, Follow


@admin.register(Post)
class PostAdmin(admin.ModelAdmin):
    list_display = ['id', 'user_id', 'media_type', 'status', 'is_public', 'like_count', 'comment_count', 'created_at']
    list_filter = ['status', 'media_type', 'is_public']
    search_fields = ['content', 'location']
    readonly_fields = ['id', 'created_at', 'updated_at']


@admin.register(Comment)
class CommentAdmin(admin.ModelAdmin):
    list_display = ['id', 'post_id', 'user_id', 'parent_id', 'reply_count', 'like_count', 'is_edited', 'created_at']
    search_fields = ['content']


@admin.register(Reaction)
class ReactionAdmin(admin.ModelAdmin):
    list_display = ['user_id', 'target_type', 'target_id', 'reaction_type', 'created_at']
    list_filter = ['target_type', 'reaction_type']


@admin.register(Story)
class StoryAdmin(admin.ModelAdmin):
    list_display = ['id', 'user_id', 'media_type', 'view_count', 'is_active', 'expires_at']
    list_filter = ['is_active', 'media_type']


admin.site.register(StoryView)
admin.site.register(Follow)
