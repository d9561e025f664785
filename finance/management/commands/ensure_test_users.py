from django.conf import settings
from django.core.management.base import BaseCommand

from finance.models import User

TEST_SET = [
    ("admin", "admin@hospital.com", User.ROLE_ADMIN, "Administration"),
    ("finance", "finance@hospital.com", User.ROLE_FINANCE, "Finance"),
    ("viewer", "viewer@hospital.com", User.ROLE_VIEWER, "General"),
]


class Command(BaseCommand):
    help = "Ensure one admin, finance and viewer user exist for a hospital (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("--hospital", default=settings.DEFAULT_HOSPITAL_ID)
        parser.add_argument("--password", default="password")

    def handle(self, *args, **opts):
        hospital_id = opts["hospital"]
        for username, email, role, department in TEST_SET:
            u, created = User.objects.get_or_create(
                username=username,
                defaults={"email": email, "role": role, "hospital_id": hospital_id, "department": department},
            )
            u.email = email
            u.role = role
            u.hospital_id = hospital_id
            u.department = department
            u.is_active = True
            u.set_password(opts["password"])
            u.save()
            verb = "created" if created else "reset"
            self.stdout.write(self.style.SUCCESS(f"{verb}: {username} ({role}) @ {hospital_id}"))
        self.stdout.write(self.style.SUCCESS("All test users ensured."))
