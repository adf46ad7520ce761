"""
Tests for the gift catalogue and gift sending.
"""
import json
from django.test import TestCase, Client
from django.contrib.auth import get_user_model

from apps.identity.models import UserRole
from apps.ledger.models import Wallet, WalletTransaction, WalletTransactionType
from apps.gifts.models import Gift, GiftTransaction
from apps.gifts import services


User = get_user_model()


class GiftTestCase(TestCase):
    def setUp(self):
        self.client = Client()
        self.fan = User.objects.create_user(username='fan', password='pw')
        self.star = User.objects.create_user(username='star', password='pw', role=UserRole.CREATOR)
        self.admin = User.objects.create_user(username='admin', password='pw', role=UserRole.ADMIN)
        Wallet.objects.filter(user_id=self.fan.id).update(tokens=100)
        self.rose = Gift.objects.create(name='Rose', description='A red rose', price=10, category='flowers')
        self.crown = Gift.objects.create(name='Crown', price=80, category='royal', rarity='LEGENDARY')
        self.retired = Gift.objects.create(name='Old badge', price=1, is_active=False)

    def post_json(self, url, payload):
        return self.client.post(url, data=json.dumps(payload), content_type='application/json')


class SendGiftTest(GiftTestCase):
    def test_tokens_move_to_recipient(self):
        result = services.send_gift(self.fan.id, self.rose.id, self.star.id, quantity=3, message='For you')

        self.assertEqual(result.remaining_tokens, 70)
        self.assertEqual(result.transaction.total_tokens, 30)
        self.assertEqual(Wallet.objects.get(user_id=self.fan.id).tokens, 70)
        self.assertEqual(Wallet.objects.get(user_id=self.star.id).tokens, 30)

        sent = WalletTransaction.objects.get(transaction_type=WalletTransactionType.GIFT_SENT)
        received = WalletTransaction.objects.get(transaction_type=WalletTransactionType.GIFT_RECEIVED)
        self.assertEqual(sent.tokens, -30)
        self.assertEqual(received.tokens, 30)
        self.assertEqual(sent.related_request_id, result.transaction.id)

    def test_insufficient_tokens_rolls_back(self):
        with self.assertRaises(ValueError):
            services.send_gift(self.fan.id, self.crown.id, self.star.id, quantity=2)
        self.assertFalse(GiftTransaction.objects.exists())
        self.assertEqual(Wallet.objects.get(user_id=self.fan.id).tokens, 100)

    def test_cannot_gift_yourself(self):
        with self.assertRaises(ValueError):
            services.send_gift(self.fan.id, self.rose.id, self.fan.id)

    def test_inactive_gift(self):
        with self.assertRaises(ValueError):
            services.send_gift(self.fan.id, self.retired.id, self.star.id)

    def test_zero_quantity(self):
        with self.assertRaises(ValueError):
            services.send_gift(self.fan.id, self.rose.id, self.star.id, quantity=0)

    def test_anonymous_sender_hidden_from_recipient(self):
        services.send_gift(self.fan.id, self.rose.id, self.star.id, is_anonymous=True)

        received, _ = services.received_gifts(self.star.id)
        self.assertIsNone(received[0].sender_id)
        self.assertIsNone(received[0].sender)

        sent, _ = services.sent_gifts(self.fan.id)
        self.assertEqual(sent[0].recipient.username, 'star')


class GiftAPITest(GiftTestCase):
    def test_catalogue_hides_inactive(self):
        response = self.client.get('/api/v1/gifts/')
        names = {g['name'] for g in response.json()['items']}
        self.assertEqual(names, {'Rose', 'Crown'})
        self.assertEqual(self.client.get(f'/api/v1/gifts/{self.retired.id}').status_code, 404)

    def test_search(self):
        response = self.client.get('/api/v1/gifts/search?q=red')
        self.assertEqual([g['name'] for g in response.json()], ['Rose'])
        response = self.client.get('/api/v1/gifts/search?min_price=50')
        self.assertEqual([g['name'] for g in response.json()], ['Crown'])

    def test_by_category_and_rarity(self):
        response = self.client.get('/api/v1/gifts/category/flowers')
        self.assertEqual([g['name'] for g in response.json()], ['Rose'])
        response = self.client.get('/api/v1/gifts/rarity/legendary')
        self.assertEqual([g['name'] for g in response.json()], ['Crown'])
        self.assertEqual(self.client.get('/api/v1/gifts/rarity/mythic').status_code, 400)

    def test_send_via_api(self):
        self.client.force_login(self.fan)
        response = self.post_json(f'/api/v1/gifts/{self.rose.id}/send', {
            'recipient_id': str(self.star.id), 'quantity': 2,
        })
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['remaining_tokens'], 80)

        self.client.force_login(self.star)
        response = self.client.get('/api/v1/gifts/received')
        self.assertEqual(response.json()['items'][0]['sender']['username'], 'fan')

    def test_send_to_unknown_user(self):
        self.client.force_login(self.fan)
        response = self.post_json(f'/api/v1/gifts/{self.rose.id}/send', {'recipient_id': str(self.rose.id)})
        self.assertEqual(response.status_code, 404)

    def test_admin_manages_catalogue(self):
        self.client.force_login(self.fan)
        response = self.post_json('/api/v1/gifts/', {'name': 'Star', 'price': 5})
        self.assertEqual(response.status_code, 403)

        self.client.force_login(self.admin)
        response = self.post_json('/api/v1/gifts/', {'name': 'Star', 'price': 5, 'rarity': 'rare'})
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['rarity'], 'RARE')

        response = self.client.delete(f'/api/v1/gifts/{self.rose.id}')
        self.assertEqual(response.status_code, 204)
        self.assertFalse(Gift.objects.get(id=self.rose.id).is_active)
