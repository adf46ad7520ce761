import uuid
from django.db import models


# =============================================================================
# Enums
# =============================================================================

class PostMediaType(models.TextChoices):
    TEXT = 'TEXT', 'Text'
    IMAGE = 'IMAGE', 'Image'
    VIDEO = 'VIDEO', 'Video'
    MIXED = 'MIXED', 'Mixed'


class PostStatus(models.TextChoices):
    DRAFT = 'DRAFT', 'Draft'
    PUBLISHED = 'PUBLISHED', 'Published'
    ARCHIVED = 'ARCHIVED', 'Archived'
    DELETED = 'DELETED', 'Deleted'


class ReactionTarget(models.TextChoices):
    POST = 'POST', 'Post'
    COMMENT = 'COMMENT', 'Comment'


class ReactionType(models.TextChoices):
    LIKE = 'LIKE', 'Like'
    LOVE = 'LOVE', 'Love'
    WOW = 'WOW', 'Wow'
    LAUGH = 'LAUGH', 'Laugh'
    ANGRY = 'ANGRY', 'Angry'
    SAD = 'SAD', 'Sad'


class StoryMediaType(models.TextChoices):
    IMAGE = 'IMAGE', 'Image'
    VIDEO = 'VIDEO', 'Video'


# =============================================================================
# Posts and comments
# =============================================================================

class Post(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user_id = models.UUIDField(db_index=True)
    creator_id = models.UUIDField(null=True, blank=True, db_index=True)

    content = models.TextField(blank=True)
    media_type = models.CharField(max_length=10, choices=PostMediaType.choices, default=PostMediaType.TEXT)
    media_urls = models.JSONField(default=list, blank=True)
    thumbnail_url = models.URLField(max_length=500, blank=True)
    is_public = models.BooleanField(default=True)
    status = models.CharField(max_length=10, choices=PostStatus.choices, default=PostStatus.PUBLISHED)
    tags = models.JSONField(default=list, blank=True)
    location = models.CharField(max_length=255, blank=True)

    view_count = models.PositiveIntegerField(default=0)
    like_count = models.PositiveIntegerField(default=0)
    comment_count = models.PositiveIntegerField(default=0)
    share_count = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"Post {self.id} by {self.user_id}"


class Comment(models.Model):
    """Comment on a post. Replies point at their parent through parent_id."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    post_id = models.UUIDField(db_index=True)
    user_id = models.UUIDField(db_index=True)
    parent_id = models.UUIDField(null=True, blank=True, db_index=True)

    content = models.TextField()
    like_count = models.PositiveIntegerField(default=0)
    reply_count = models.PositiveIntegerField(default=0)
    is_edited = models.BooleanField(default=False)
    edited_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"Comment {self.id} on {self.post_id}"


class Reaction(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user_id = models.UUIDField(db_index=True)
    target_type = models.CharField(max_length=10, choices=ReactionTarget.choices)
    target_id = models.UUIDField(db_index=True)
    reaction_type = models.CharField(max_length=10, choices=ReactionType.choices, default=ReactionType.LIKE)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['user_id', 'target_type', 'target_id'],
                name='unique_reaction_per_target',
            ),
        ]


# =============================================================================
# Stories
# =============================================================================

class Story(models.Model):
    """Short-lived media post, visible for 24 hours."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user_id = models.UUIDField(db_index=True)
    content = models.TextField(blank=True)
    media_type = models.CharField(max_length=10, choices=StoryMediaType.choices, default=StoryMediaType.IMAGE)
    media_path = models.CharField(max_length=500)
    media_url = models.URLField(max_length=500)
    view_count = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)
    expires_at = models.DateTimeField(db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['user_id', 'created_at']
        verbose_name_plural = "Stories"


class StoryView(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    story_id = models.UUIDField(db_index=True)
    viewer_id = models.UUIDField(db_index=True)
    viewed_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-viewed_at']
        constraints = [
            models.UniqueConstraint(fields=['story_id', 'viewer_id'], name='unique_story_view'),
        ]


# =============================================================================
# Follows
# =============================================================================

class Follow(models.Model):
    """follower_id follows followed_id. Creators are followed through their user id."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    follower_id = models.UUIDField(db_index=True)
    followed_id = models.UUIDField(db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(fields=['follower_id', 'followed_id'], name='unique_follow'),
        ]
