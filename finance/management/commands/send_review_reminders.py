from datetime import timedelta

from django.core.management.base import BaseCommand
from django.db.models import Q
from django.utils import timezone

from finance.models import ReviewSchedule
from finance.services.hospital_settings import reminder_days
from finance.services.schedules import OPEN_STATUSES, reconcile_overdue, send_reminder


class Command(BaseCommand):
    help = "Record system reminders for open reviews due in one of the hospital's reminder days."

    def handle(self, *args, **options):
        today = timezone.localdate()
        hospital_ids = sorted(set(
            ReviewSchedule.objects.filter(status__in=OPEN_STATUSES).values_list('hospital_id', flat=True)
        ))
        sent = 0
        for hid in hospital_ids:
            reconcile_overdue(hid)
            due = Q()
            for days in reminder_days(hid):
                due |= Q(scheduled_date__date=today + timedelta(days=days))
            if not due:
                continue
            open_reviews = ReviewSchedule.objects.filter(hospital_id=hid, status__in=OPEN_STATUSES).filter(due)
            for schedule in open_reviews.select_related('assigned_to'):
                already = schedule.reminders.filter(reminder_type='system', sent_at__date=today).exists()
                if not already:
                    send_reminder(schedule, reminder_type='system')
                    sent += 1
        self.stdout.write(self.style.SUCCESS(f"Sent {sent} reminders"))
