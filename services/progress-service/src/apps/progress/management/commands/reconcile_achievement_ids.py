# services/progress-service/src/apps/progress/management/commands/reconcile_achievement_ids.py
"""
Backfill catalog ids on achievement unlocks recorded by display name only.
"""

import logging

from django.core.management.base import BaseCommand
from django.db import transaction

from apps.progress.achievements import get_definition_by_name
from apps.progress.models import AchievementUnlock

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Set definition_id on achievement unlocks that only carry a display name'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Report what would change without writing',
        )

    def handle(self, *args, **options):
        dry_run = options['dry_run']
        updated = 0
        unmatched = []
        duplicates = 0

        with transaction.atomic():
            pending = AchievementUnlock.objects.select_for_update().filter(
                definition_id__isnull=True
            ).order_by('unlocked_at')

            for unlock in pending:
                definition = get_definition_by_name(unlock.definition_name)
                if definition is None:
                    unmatched.append(unlock.definition_name)
                    continue

                already_keyed = AchievementUnlock.objects.filter(
                    student_id=unlock.student_id,
                    definition_id=definition.id
                ).exists()
                if already_keyed:
                    duplicates += 1
                    logger.warning(
                        f"Student {unlock.student_id} already has {definition.id}; "
                        f"leaving unlock {unlock.id} unkeyed"
                    )
                    continue

                if not dry_run:
                    unlock.definition_id = definition.id
                    unlock.save(update_fields=['definition_id'])
                updated += 1

            if dry_run:
                transaction.set_rollback(True)

        prefix = '[dry run] ' if dry_run else ''
        self.stdout.write(self.style.SUCCESS(
            f"{prefix}Reconciled {updated} unlock(s); "
            f"{duplicates} duplicate(s), {len(unmatched)} unmatched"
        ))
        for name in sorted(set(unmatched)):
            self.stdout.write(self.style.WARNING(f"No catalog entry named {name!r}"))
