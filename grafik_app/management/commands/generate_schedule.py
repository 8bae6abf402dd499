from datetime import date

from django.core.management.base import BaseCommand, CommandError

from grafik_app.exceptions import GrafikError
from grafik_app.models import Team
from grafik_app.services.scheduling import ALGORITHMS, generate_and_save, generate_for_team
from grafik_app.utils import parse_period


class Command(BaseCommand):
    help = 'Generate the monthly schedule for a team'

    def add_arguments(self, parser):
        parser.add_argument('team', type=int, help='Team ID')
        parser.add_argument(
            '--year',
            type=int,
            default=date.today().year,
            help='Year to schedule (default: current year)'
        )
        parser.add_argument(
            '--month',
            type=int,
            default=date.today().month,
            help='Month to schedule (default: current month)'
        )
        parser.add_argument(
            '--algorithm',
            choices=ALGORITHMS,
            default='templates',
            help='Scheduling algorithm (default: templates)'
        )
        parser.add_argument('--seed', type=int, help='Random seed for preference tolerance draws')
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Only print the result, do not save shifts'
        )
        parser.add_argument(
            '--replace',
            action='store_true',
            help='Delete the existing shifts of the month before saving'
        )

    def handle(self, *args, **options):
        try:
            team = Team.objects.get(pk=options['team'])
        except Team.DoesNotExist:
            raise CommandError(f"Team {options['team']} does not exist")

        try:
            year, month = parse_period(options['year'], options['month'])
            kwargs = {'algorithm': options['algorithm'], 'seed': options['seed']}
            if options['dry_run']:
                result, saved = generate_for_team(team, year, month, **kwargs), []
            else:
                result, saved = generate_and_save(team, year, month, replace=options['replace'], **kwargs)
        except GrafikError as exc:
            raise CommandError(exc.message)

        for warning in result.warnings:
            self.stdout.write(self.style.WARNING(warning))

        if not result.success:
            raise CommandError(f'Schedule generation failed for {team.name} {year}-{month:02d}')

        self.stdout.write(self.style.SUCCESS(
            f'{team.name} {year}-{month:02d}: {len(result.shifts)} shifts generated, {len(saved)} saved'
        ))
