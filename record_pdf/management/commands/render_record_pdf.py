from pathlib import Path

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError

from record_pdf.acl import SystemAcl
from record_pdf.exceptions import PdfError
from record_pdf.models import PdfTemplate
from record_pdf.printing import PdfService
from record_pdf.utils import get_entity_model, get_record_name, sanitize_file_name


class Command(BaseCommand):
    help = "Print one record with a stored PDF template to a file."

    def add_arguments(self, parser):
        parser.add_argument("template_id", help="Id of the PDF template")
        parser.add_argument("pk", help="Primary key of the record to print")
        parser.add_argument(
            "--output",
            "-o",
            default=None,
            help="Output file path (defaults to <record name>.pdf)",
        )
        parser.add_argument(
            "--username",
            default=None,
            help="Print as this user, enforcing their permissions",
        )

    def handle(self, *args, **options):
        try:
            template = PdfTemplate.objects.get(pk=options["template_id"])
        except (PdfTemplate.DoesNotExist, ValueError) as exc:
            raise CommandError(f"Template not found: {options['template_id']}") from exc

        try:
            model = get_entity_model(template.entity_type)
        except PdfError as exc:
            raise CommandError(exc.detail) from exc

        pk = options["pk"]
        try:
            record = model.objects.get(pk=pk)
        except (model.DoesNotExist, ValueError) as exc:
            raise CommandError(f"Record not found: {template.entity_type} {pk}") from exc

        username = options.get("username")
        if username:
            user_model = get_user_model()
            try:
                user = user_model.objects.get(**{user_model.USERNAME_FIELD: username})
            except user_model.DoesNotExist as exc:
                raise CommandError(f"User not found: {username}") from exc
            service = PdfService(user=user)
        else:
            service = PdfService(acl=SystemAcl())

        try:
            pdf_bytes = service.build_from_template(record, template)
        except PdfError as exc:
            raise CommandError(exc.detail) from exc

        default_filename = f"{sanitize_file_name(get_record_name(record))}.pdf"
        output_path = Path(options["output"] or default_filename)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(pdf_bytes)

        self.stdout.write(self.style.SUCCESS(f"Rendered: {output_path}"))
