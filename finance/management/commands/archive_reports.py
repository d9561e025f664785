import logging

from django.core.management.base import BaseCommand

from finance.models import FinancialReport
from finance.services.archive import archive_old_reports

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Archive approved reports older than each hospital's archiveAfterMonths setting."

    def add_arguments(self, parser):
        parser.add_argument('--hospital', help='Only this hospital (default: all with reports)')
        parser.add_argument('--months', type=int, help="Override the hospital's retention in months")

    def handle(self, *args, **options):
        if options['hospital']:
            hospital_ids = [options['hospital']]
        else:
            hospital_ids = sorted(set(FinancialReport.objects.values_list('hospital_id', flat=True)))
        total = 0
        for hid in hospital_ids:
            result = archive_old_reports(None, options['months'], archive_type='automatic', hospital_id=hid)
            total += result['totalArchived']
            self.stdout.write(f"{hid}: {result['totalArchived']} archived")
        logger.info("automatic archive run finished: %d reports across %d hospitals", total, len(hospital_ids))
        self.stdout.write(self.style.SUCCESS(f"Archived {total} reports"))
