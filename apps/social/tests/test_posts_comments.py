"""
Tests for posts, comments and reactions.
"""
import json
from django.test import TestCase, Client
from django.contrib.auth import get_user_model

from apps.core.exceptions import ForbiddenError, NotFoundError
from apps.identity.models import UserRole
from apps.social.models import Post, Comment, Reaction, ReactionType
from apps.social import comment_service, reaction_service


User = get_user_model()


class SocialTestCase(TestCase):
    def setUp(self):
        self.client = Client()
        self.author = User.objects.create_user(username='author', password='pw')
        self.reader = User.objects.create_user(username='reader', password='pw')
        self.admin = User.objects.create_user(username='admin', password='pw', role=UserRole.ADMIN)
        self.post = Post.objects.create(user_id=self.author.id, content='Hello stream')
        self.private_post = Post.objects.create(user_id=self.author.id, content='Secret', is_public=False)

    def post_json(self, url, payload):
        return self.client.post(url, data=json.dumps(payload), content_type='application/json')


class CommentServiceTest(SocialTestCase):
    def test_comment_increments_post_counter(self):
        comment_service.create_comment(self.post.id, self.reader.id, 'Nice!')
        self.post.refresh_from_db()
        self.assertEqual(self.post.comment_count, 1)

    def test_private_post_only_accepts_owner_comments(self):
        with self.assertRaises(ForbiddenError):
            comment_service.create_comment(self.private_post.id, self.reader.id, 'Let me in')
        comment_service.create_comment(self.private_post.id, self.author.id, 'Note to self')

    def test_missing_post(self):
        with self.assertRaises(NotFoundError):
            comment_service.create_comment(self.reader.id, self.reader.id, 'Where?')

    def test_empty_content_rejected(self):
        with self.assertRaises(ValueError):
            comment_service.create_comment(self.post.id, self.reader.id, '   ')

    def test_reply_updates_counters(self):
        root = comment_service.create_comment(self.post.id, self.reader.id, 'Root')
        comment_service.create_reply(root.id, self.author.id, 'Thanks')

        self.post.refresh_from_db()
        self.assertEqual(self.post.comment_count, 2)
        self.assertEqual(Comment.objects.get(id=root.id).reply_count, 1)

    def test_delete_removes_replies_and_adjusts_count(self):
        root = comment_service.create_comment(self.post.id, self.reader.id, 'Root')
        comment_service.create_reply(root.id, self.author.id, 'Reply 1')
        comment_service.create_reply(root.id, self.reader.id, 'Reply 2')
        comment_service.create_comment(self.post.id, self.reader.id, 'Another root')

        removed = comment_service.delete_comment(root.id, self.reader.id)

        self.assertEqual(removed, 3)
        self.assertEqual(Comment.objects.filter(post_id=self.post.id).count(), 1)
        self.post.refresh_from_db()
        self.assertEqual(self.post.comment_count, 1)

    def test_comment_count_never_negative(self):
        root = comment_service.create_comment(self.post.id, self.reader.id, 'Root')
        Post.objects.filter(id=self.post.id).update(comment_count=0)
        comment_service.delete_comment(root.id, self.reader.id)
        self.post.refresh_from_db()
        self.assertEqual(self.post.comment_count, 0)

    def test_only_owner_or_admin_can_edit(self):
        root = comment_service.create_comment(self.post.id, self.reader.id, 'Root')
        with self.assertRaises(ForbiddenError):
            comment_service.update_comment(root.id, self.author.id, 'Hijack')
        edited = comment_service.update_comment(root.id, self.admin.id, 'Moderated', as_admin=True)
        self.assertTrue(edited.is_edited)
        self.assertIsNotNone(edited.edited_at)


class CommentAPITest(SocialTestCase):
    def test_list_root_comments_with_reply_preview(self):
        root = comment_service.create_comment(self.post.id, self.reader.id, 'Root')
        for i in range(4):
            comment_service.create_reply(root.id, self.author.id, f'Reply {i}')

        response = self.client.get(f'/api/v1/posts/{self.post.id}/comments')
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body['pagination']['total'], 1)
        replies = body['items'][0]['replies']
        self.assertEqual([r['content'] for r in replies], ['Reply 0', 'Reply 1', 'Reply 2'])

    def test_detail_shows_five_replies(self):
        root = comment_service.create_comment(self.post.id, self.reader.id, 'Root')
        for i in range(6):
            comment_service.create_reply(root.id, self.author.id, f'Reply {i}')
        response = self.client.get(f'/api/v1/comments/{root.id}')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.json()['replies']), 5)
        self.assertEqual(response.json()['reply_count'], 6)

    def test_private_post_comments_forbidden(self):
        self.client.force_login(self.reader)
        response = self.client.get(f'/api/v1/posts/{self.private_post.id}/comments')
        self.assertEqual(response.status_code, 403)

    def test_invalid_sort_field(self):
        response = self.client.get(f'/api/v1/posts/{self.post.id}/comments?sort_by=content')
        self.assertEqual(response.status_code, 400)

    def test_create_and_delete_via_api(self):
        self.client.force_login(self.reader)
        response = self.post_json(f'/api/v1/posts/{self.post.id}/comments', {'content': 'First!'})
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['author']['username'], 'reader')
        comment_id = response.json()['id']

        self.client.force_login(self.author)
        response = self.client.delete(f'/api/v1/comments/{comment_id}')
        self.assertEqual(response.status_code, 403)

        self.client.force_login(self.admin)
        response = self.client.delete(f'/api/v1/comments/{comment_id}')
        self.assertEqual(response.status_code, 204)

    def test_create_requires_auth(self):
        response = self.post_json(f'/api/v1/posts/{self.post.id}/comments', {'content': 'anon'})
        self.assertEqual(response.status_code, 401)


class PostAPITest(SocialTestCase):
    def test_private_post_hidden_from_others(self):
        self.client.force_login(self.reader)
        response = self.client.get(f'/api/v1/posts/{self.private_post.id}')
        self.assertEqual(response.status_code, 403)

    def test_view_increments_counter(self):
        response = self.client.get(f'/api/v1/posts/{self.post.id}')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['view_count'], 1)

    def test_listing_excludes_private_and_drafts(self):
        Post.objects.create(user_id=self.author.id, content='Draft', status='DRAFT')
        response = self.client.get('/api/v1/posts')
        self.assertEqual([p['content'] for p in response.json()['items']], ['Hello stream'])

    def test_create_and_update(self):
        self.client.force_login(self.author)
        response = self.post_json('/api/v1/posts', {'content': 'New song', 'tags': ['music']})
        self.assertEqual(response.status_code, 201)
        post_id = response.json()['id']

        self.client.force_login(self.reader)
        response = self.client.put(
            f'/api/v1/posts/{post_id}', data=json.dumps({'content': 'x'}), content_type='application/json',
        )
        self.assertEqual(response.status_code, 403)

    def test_empty_post_rejected(self):
        self.client.force_login(self.author)
        response = self.post_json('/api/v1/posts', {'content': ''})
        self.assertEqual(response.status_code, 400)


class ReactionTest(SocialTestCase):
    def test_toggle_cycle(self):
        first = reaction_service.toggle_reaction(self.reader.id, 'like', post_id=self.post.id)
        self.assertEqual(first.action, reaction_service.ADDED)
        self.assertEqual(first.like_count, 1)

        switched = reaction_service.toggle_reaction(self.reader.id, 'love', post_id=self.post.id)
        self.assertEqual(switched.action, reaction_service.UPDATED)
        self.assertEqual(switched.like_count, 1)
        self.assertEqual(Reaction.objects.get().reaction_type, ReactionType.LOVE)

        removed = reaction_service.toggle_reaction(self.reader.id, 'love', post_id=self.post.id)
        self.assertEqual(removed.action, reaction_service.REMOVED)
        self.assertIsNone(removed.reaction)
        self.assertEqual(removed.like_count, 0)
        self.assertFalse(Reaction.objects.exists())

    def test_comment_reaction_counts(self):
        comment = comment_service.create_comment(self.post.id, self.author.id, 'React to me')
        reaction_service.toggle_reaction(self.reader.id, 'like', comment_id=comment.id)
        reaction_service.toggle_reaction(self.admin.id, 'wow', comment_id=comment.id)

        summary = reaction_service.summarize('COMMENT', comment.id)
        self.assertEqual(summary.total, 2)
        self.assertEqual(summary.counts['LIKE'], 1)
        self.assertEqual(summary.counts['WOW'], 1)
        self.assertEqual(Comment.objects.get(id=comment.id).like_count, 2)

    def test_api_status_codes(self):
        self.client.force_login(self.reader)
        response = self.post_json('/api/v1/reactions', {'post_id': str(self.post.id)})
        self.assertEqual(response.status_code, 201)
        response = self.post_json('/api/v1/reactions', {'post_id': str(self.post.id)})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['action'], 'removed')

    def test_api_requires_a_target(self):
        self.client.force_login(self.reader)
        response = self.post_json('/api/v1/reactions', {'reaction_type': 'LIKE'})
        self.assertEqual(response.status_code, 400)

    def test_api_unknown_comment(self):
        self.client.force_login(self.reader)
        response = self.post_json('/api/v1/reactions', {'comment_id': str(self.reader.id)})
        self.assertEqual(response.status_code, 404)

    def test_post_reaction_listing(self):
        reaction_service.toggle_reaction(self.reader.id, 'like', post_id=self.post.id)
        response = self.client.get(f'/api/v1/posts/{self.post.id}/reactions')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['total'], 1)
        self.assertEqual(response.json()['reactions'][0]['user']['username'], 'reader')
