from django.core.management.base import BaseCommand
from django.utils import timezone

from finance.models import FinancialReport
from finance.services import dashboard
from finance.services.realtime import notify_update


class Command(BaseCommand):
    help = "Recompute cached dashboard stats for every hospital and notify WebSocket clients."

    def handle(self, *args, **options):
        now = timezone.now()
        hospital_ids = sorted(set(FinancialReport.objects.values_list('hospital_id', flat=True)))
        for hid in hospital_ids:
            dashboard.invalidate_stats(hid)
            dashboard.dashboard_stats(hid)
            notify_update(hid, 'dashboard', None, 'refreshed')
        self.stdout.write(self.style.SUCCESS(f"Refreshed stats for {len(hospital_ids)} hospitals at {now}"))
