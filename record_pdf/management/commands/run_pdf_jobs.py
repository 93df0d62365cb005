from django.core.management.base import BaseCommand

from record_pdf.jobs import run_due_jobs


class Command(BaseCommand):
    help = "Execute scheduled PDF jobs whose execution time has passed."

    def add_arguments(self, parser):
        parser.add_argument("--queue", default=None, help="Only run jobs of this queue")
        parser.add_argument(
            "--limit", type=int, default=None, help="Maximum number of jobs to run"
        )

    def handle(self, *args, **options):
        executed = run_due_jobs(queue=options.get("queue"), limit=options.get("limit"))
        self.stdout.write(self.style.SUCCESS(f"Executed {executed} job(s)"))
