import datetime

from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from help_requests.exceptions import InvalidReleaseDayError
from help_requests.models import CATEGORIES
from help_requests.release import ReleaseScheduler


class Command(BaseCommand):
    help = 'Release visit tickets for a date, oldest approved requests first.'

    def add_arguments(self, parser):
        parser.add_argument('date', help='Visit date as YYYY-MM-DD')
        parser.add_argument(
            '--category',
            action='append',
            choices=CATEGORIES,
            dest='categories',
            help='Category to release (repeatable, default: all)',
        )
        parser.add_argument(
            '--priority',
            action='append',
            dest='priorities',
            help='Only release requests with this priority (repeatable)',
        )
        parser.add_argument(
            '--timeout',
            type=int,
            default=None,
            help='Stop starting new tickets after this many seconds',
        )

    def handle(self, *args, **options):
        try:
            day = datetime.date.fromisoformat(options['date'])
        except ValueError:
            raise CommandError(f"Invalid date: {options['date']}")

        deadline = None
        if options['timeout']:
            deadline = timezone.now() + datetime.timedelta(seconds=options['timeout'])

        try:
            result = ReleaseScheduler().release(
                day,
                categories=options['categories'],
                priorities=options['priorities'],
                deadline=deadline,
            )
        except InvalidReleaseDayError as e:
            raise CommandError(str(e))

        for category, count in result.per_category_released.items():
            self.stdout.write(f"{category}: released {count}, remaining {result.remaining_in_queue.get(category, 0)}")
        for failure in result.failures:
            self.stderr.write(f"request {failure.request_id} ({failure.category}): {failure.reason}")
        if result.timed_out:
            self.stderr.write('Stopped early: timeout reached')
        self.stdout.write(self.style.SUCCESS(f"Released {result.total_released} tickets for {day}"))
