"""
Management command to fill the holiday cache from the public holiday API.
"""
from datetime import date

from django.core.management.base import BaseCommand, CommandError

from grafik_app.exceptions import GrafikError
from grafik_app.models import HolidayCache
from grafik_app.services.holiday_api import get_holidays


class Command(BaseCommand):
    help = 'Fetch public holidays into the holiday cache'

    def add_arguments(self, parser):
        parser.add_argument(
            'years',
            nargs='*',
            type=int,
            help='Years to fetch (default: current and next year)'
        )
        parser.add_argument('--country', type=str, help='ISO country code (default: HOLIDAY_COUNTRY_CODE)')
        parser.add_argument(
            '--refresh',
            action='store_true',
            help='Drop cached entries before fetching'
        )

    def handle(self, *args, **options):
        this_year = date.today().year
        years = options['years'] or [this_year, this_year + 1]
        country = options['country']

        for year in years:
            if options['refresh']:
                cached = HolidayCache.objects.filter(year=year)
                if country:
                    cached = cached.filter(country_code=country.upper())
                cached.delete()
            try:
                holidays, from_cache = get_holidays(year, country)
            except GrafikError as exc:
                raise CommandError(exc.message)

            if not holidays:
                self.stdout.write(self.style.ERROR(f'{year}: no holidays fetched'))
            elif from_cache:
                self.stdout.write(f'{year}: {len(holidays)} holidays already cached')
            else:
                self.stdout.write(self.style.SUCCESS(f'{year}: cached {len(holidays)} holidays'))
