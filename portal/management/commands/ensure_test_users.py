# portal/management/commands/ensure_test_users.py
from django.contrib.auth.hashers import make_password
from django.core.management.base import BaseCommand

from portal.models import User
from portal.roles import Role

TEST_SET = [
    ("admin1", "admin1@phc.local", Role.ADMIN),
    ("staff1", "staff1@phc.local", Role.STAFF),
    ("doctor1", "doctor1@phc.local", Role.DOCTOR),
    ("participant1", "participant1@phc.local", Role.PARTICIPANT),
]


class Command(BaseCommand):
    help = "Ensure one test user per role exists with the given password (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("--password", default="P@ssw0rd1")

    def handle(self, *args, **opts):
        password = make_password(opts["password"])
        for username, email, role in TEST_SET:
            u, created = User.objects.get_or_create(
                username=username,
                defaults={
                    "email": email,
                    "full_name": username.rstrip("1").title(),
                    "role": role,
                    "password": password,
                    "is_active": True,
                },
            )
            if not created:
                # reset password, role and active flag
                u.password = password
                u.role = role
                u.is_active = True
                u.save(update_fields=["password", "role", "is_active"])
            self.stdout.write(self.style.SUCCESS(f"ok: {username} ({role.value})"))
        self.stdout.write(self.style.SUCCESS("All test users ensured."))
