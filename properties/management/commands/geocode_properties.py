"""
Geocode shopping centers that have no coordinates yet.

Usage:
    python manage.py geocode_properties
    python manage.py geocode_properties --force  # Re-geocode every center
    python manage.py geocode_properties --id 42
"""

from django.core.management.base import BaseCommand
from django.db.models import Q

from properties.models import ShoppingCenter
from services.geocoding import get_geocoding_service


class Command(BaseCommand):
    help = 'Geocode shopping center addresses and populate latitude/longitude fields'

    def add_arguments(self, parser):
        parser.add_argument(
            '--force',
            action='store_true',
            help='Re-geocode centers that already have coordinates',
        )
        parser.add_argument(
            '--id',
            type=int,
            help='Geocode a single shopping center by ID',
        )
        parser.add_argument(
            '--delay',
            type=float,
            default=None,
            help='Seconds between requests (defaults to GEOCODING_RATE_LIMIT_DELAY)',
        )

    def handle(self, *args, **options):
        force = options['force']
        center_id = options['id']

        service = get_geocoding_service()
        if not service.is_configured:
            self.stdout.write(self.style.WARNING('GOOGLE_MAPS_API_KEY is not set; nothing to do'))
            return

        if center_id:
            queryset = ShoppingCenter.objects.filter(id=center_id)
            if not queryset.exists():
                self.stdout.write(self.style.ERROR(f'Shopping center with ID {center_id} not found'))
                return
        elif force:
            queryset = ShoppingCenter.objects.all()
            self.stdout.write(self.style.WARNING('Force mode: re-geocoding ALL shopping centers'))
        else:
            queryset = ShoppingCenter.objects.filter(
                Q(latitude__isnull=True) | Q(longitude__isnull=True)
            )

        total = queryset.count()
        if total == 0:
            self.stdout.write(self.style.SUCCESS('All shopping centers already have coordinates'))
            return

        self.stdout.write(f'Found {total} shopping centers to geocode')
        results = service.batch_geocode_shopping_centers(
            queryset, delay=options['delay'], force=force or bool(center_id)
        )

        self.stdout.write('\n' + '=' * 60)
        self.stdout.write('GEOCODING COMPLETE')
        self.stdout.write('=' * 60)
        self.stdout.write(f'Total centers:          {results["total"]}')
        self.stdout.write(self.style.SUCCESS(f'Successfully geocoded:  {results["success"]}'))
        self.stdout.write(f'Already had coords:     {results["skipped"]}')

        if results['failed'] > 0:
            self.stdout.write(self.style.ERROR(f'Failed:                 {results["failed"]}'))
            self.stdout.write(f'Failed IDs: {", ".join(map(str, results["failed_ids"]))}')
        self.stdout.write('=' * 60)
