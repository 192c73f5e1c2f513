"""
CSV import management command.

Usage:
    python manage.py import_csv /path/to/file.csv
    python manage.py import_csv /path/to/file.csv --no-geocode
    python manage.py import_csv /path/to/file.csv --dry-run
"""

import os

from django.core.management.base import BaseCommand, CommandError

from imports.services import CSVImportService, build_import_service, import_with_batch
from properties.storage import InMemoryStorage
from services import CSVParseError


class Command(BaseCommand):
    help = 'Import shopping centers, spaces, tenants and leases from a CSV file'

    def add_arguments(self, parser):
        parser.add_argument('csv_file', type=str, help='Path to CSV file')
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Reconcile into an in-memory store and report; the database is not touched',
        )
        parser.add_argument(
            '--no-geocode',
            action='store_true',
            help='Skip geocoding of newly created shopping centers',
        )

    def handle(self, *args, **options):
        csv_file = options['csv_file']
        dry_run = options['dry_run']
        geocode = not options['no_geocode']

        self.stdout.write(f"Reading CSV file: {csv_file}")
        try:
            with open(csv_file, 'r', encoding='utf-8-sig', newline='') as f:
                content = f.read()
        except FileNotFoundError:
            raise CommandError(f"File not found: {csv_file}")
        except UnicodeDecodeError as e:
            raise CommandError(f"File is not valid UTF-8: {str(e)}")

        if dry_run:
            storage = InMemoryStorage()
            service = CSVImportService(storage)
            self.stdout.write(self.style.WARNING("Dry run: using in-memory storage, geocoding disabled"))
            try:
                stats = service.import_content(content)
            except CSVParseError as e:
                raise CommandError(f"Import failed: {str(e)}")
            self._print_summary(stats)
            self.stdout.write(f"In-memory store: {storage.summary()}")
            return

        service = build_import_service(geocode=geocode)
        try:
            batch, stats = import_with_batch(
                service, content, os.path.basename(csv_file), source='cli'
            )
        except CSVParseError as e:
            raise CommandError(f"Import failed: {str(e)}")

        self.stdout.write(f"Import batch: {batch.batch_id}")
        self._print_summary(stats)

    def _print_summary(self, stats):
        self.stdout.write("\n" + "=" * 70)
        self.stdout.write(self.style.SUCCESS("Import Complete"))
        self.stdout.write("=" * 70)
        self.stdout.write(f"Rows processed:            {stats['rows_processed']}")
        self.stdout.write(f"Shopping centers created:  {stats['shopping_centers_created']}")
        self.stdout.write(f"Shopping centers updated:  {stats['shopping_centers_updated']}")
        self.stdout.write(f"Spaces created:            {stats['spaces_created']}")
        self.stdout.write(f"Tenants created:           {stats['tenants_created']}")
        self.stdout.write(f"Leases created:            {stats['leases_created']}")
        self.stdout.write(f"Centers geocoded:          {stats['geocoded_centers']}")

        if stats['center_types_processed']:
            self.stdout.write("\nCenter types:")
            for center_type, count in sorted(stats['center_types_processed'].items()):
                self.stdout.write(f"  {center_type}: {count}")

        if stats['unrecognized_center_types']:
            self.stdout.write(self.style.WARNING(
                f"\nUnrecognized center types: {', '.join(stats['unrecognized_center_types'])}"
            ))

        if stats['errors']:
            self.stdout.write(self.style.ERROR(f"\nErrors: {stats['errors']}"))
            for message in stats['sample_errors']:
                self.stdout.write(f"  {message}")
        self.stdout.write("=" * 70)
