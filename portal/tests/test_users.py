"""
Admin user management through the API.

Mirrors the role checks of the session tests: admins pass, every other
role gets a 403 and an anonymous caller never reaches the view.
"""
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from portal.models import AuditEvent, User
from portal.roles import Role

PASSWORD = 'P@ssw0rd1'
STRONG = 'Kuat#Sekali2024'


class AdminUserTests(APITestCase):
    def setUp(self) -> None:
        self.admin = User.objects.create_user(username='admin1', email='admin1@phc.local', password=PASSWORD,
                                              role=Role.ADMIN, full_name='Admin Satu')
        self.staff = User.objects.create_user(username='staff1', email='staff1@phc.local', password=PASSWORD,
                                              role=Role.STAFF)
        self.client = self._login('admin1')

    def _login(self, identifier: str) -> APIClient:
        client = APIClient()
        r = client.post(reverse('login_view'), {'email': identifier, 'password': PASSWORD}, format='json')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        return client

    def test_list_users(self):
        r = self.client.get(reverse('users_collection'))
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual({u['username'] for u in r.data}, {'admin1', 'staff1'})

    def test_create_user(self):
        r = self.client.post(reverse('users_collection'), {
            'username': 'doc1', 'email': 'doc1@phc.local', 'fullName': 'Dr. Rina', 'password': STRONG,
            'role': 'doctor',
        }, format='json')
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        created = User.objects.get(username='doc1')
        self.assertEqual(created.role, Role.DOCTOR)
        self.assertTrue(created.check_password(STRONG))
        self.assertTrue(AuditEvent.objects.filter(action='user_create', object_id=str(created.pk)).exists())

    def test_create_defaults_to_participant(self):
        r = self.client.post(reverse('users_collection'), {
            'username': 'p1', 'email': 'p1@phc.local', 'fullName': 'Peserta', 'password': STRONG,
        }, format='json')
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        self.assertEqual(r.data['role'], 'participant')

    def test_create_duplicate(self):
        r = self.client.post(reverse('users_collection'), {
            'username': 'staff1', 'email': 'other@phc.local', 'fullName': 'X', 'password': STRONG,
        }, format='json')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        r = self.client.post(reverse('users_collection'), {
            'username': 'other', 'email': 'STAFF1@phc.local', 'fullName': 'X', 'password': STRONG,
        }, format='json')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)

    def test_create_rejects_unknown_role(self):
        r = self.client.post(reverse('users_collection'), {
            'username': 'x1', 'email': 'x1@phc.local', 'fullName': 'X', 'password': STRONG, 'role': 'root',
        }, format='json')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)

    def test_get_and_update_user(self):
        url = reverse('user_detail', args=[self.staff.pk])
        self.assertEqual(self.client.get(url).data['username'], 'staff1')
        r = self.client.put(url, {'fullName': 'Staf Baru', 'isActive': False, 'password': STRONG}, format='json')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.staff.refresh_from_db()
        self.assertEqual(self.staff.full_name, 'Staf Baru')
        self.assertFalse(self.staff.is_active)
        self.assertTrue(self.staff.check_password(STRONG))
        event = AuditEvent.objects.get(action='user_update')
        self.assertNotIn('password', event.detail['fields'])

    def test_update_conflicting_email(self):
        url = reverse('user_detail', args=[self.staff.pk])
        r = self.client.put(url, {'email': 'admin1@phc.local'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        # keeping one's own email is not a conflict
        r = self.client.put(url, {'email': 'staff1@phc.local'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_200_OK)

    def test_unknown_user(self):
        r = self.client.get('/api/admin/users/00000000-0000-0000-0000-000000000000')
        self.assertEqual(r.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(r.data, {'error': 'User not found'})

    def test_delete_user(self):
        r = self.client.delete(reverse('user_detail', args=[self.staff.pk]))
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertFalse(User.objects.filter(pk=self.staff.pk).exists())

    def test_cannot_delete_self(self):
        r = self.client.delete(reverse('user_detail', args=[self.admin.pk]))
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(User.objects.filter(pk=self.admin.pk).exists())

    def test_non_admin_is_forbidden(self):
        staff_client = self._login('staff1')
        r = staff_client.get(reverse('users_collection'))
        self.assertEqual(r.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(r.data['success'])
        r = staff_client.get(reverse('db_status'))
        self.assertEqual(r.status_code, status.HTTP_403_FORBIDDEN)

    def test_anonymous_stopped_by_gate(self):
        r = APIClient().get(reverse('users_collection'))
        self.assertEqual(r.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(r.json()['authenticated'])

    def test_db_status(self):
        r = self.client.get(reverse('db_status'))
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.data, {'ok': True, 'db': True})
