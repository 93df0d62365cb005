"""
PDF printing service.

``PdfService`` drives the ``DocumentComposer`` over one or many records:

- ``build_from_template`` prints a single record, inline or as bytes
- ``generate_mail_merge`` prints an explicit record list into a durable
  "Mail Merge" attachment
- ``mass_generate`` prints an ACL-filtered record set into an ephemeral
  "Mass Pdf" attachment and schedules its removal
- ``remove_mass_file_job`` is the scheduled removal itself

Usage:
    from record_pdf.printing import PdfService

    attachment_id = PdfService(user=request.user).mass_generate(
        "crm.Contact", ["12", "13"], template_id, check_acl=True
    )
"""

import logging
from datetime import timedelta
from typing import Any, Callable, Iterable, Optional, Sequence, Union

from django.core.exceptions import ValidationError
from django.db import DatabaseError, models, transaction
from django.http import HttpResponse
from django.utils import timezone

from .acl import Acl, SystemAcl
from .composer import DocumentComposer
from .conf import PdfSettings, get_pdf_settings
from .exceptions import (
    Forbidden,
    NotFound,
    PdfError,
    RenderingFailure,
    ValidationMismatch,
    VolumeLimitExceeded,
)
from .jobs import DeferredJob, job_handler, schedule_job
from .merge import Htmlizer
from .models import Attachment, AttachmentRole, PdfTemplate
from .rendering import PdfDocument
from .services import RecordService, RecordServiceRegistry, load_record_fields, record_services
from .utils import (
    get_entity_model,
    get_entity_type,
    get_record_name,
    sanitize_file_name,
    translate_entity_type_plural,
)

logger = logging.getLogger(__name__)

PDF_MIME_TYPE = "application/pdf"
REMOVE_MASS_FILE_HANDLER = "record_pdf.remove_mass_file"


class PdfService:
    def __init__(
        self,
        user: Optional[Any] = None,
        *,
        acl: Optional[Acl] = None,
        settings: Optional[PdfSettings] = None,
        services: Optional[RecordServiceRegistry] = None,
        htmlizer_factory: Optional[Callable[[], Htmlizer]] = None,
        document_factory: Optional[Callable[[], PdfDocument]] = None,
        scheduler: Optional[Callable[[DeferredJob], Any]] = None,
    ):
        self.user = user
        self.acl = acl or Acl(user)
        self.settings = settings or get_pdf_settings()
        self.services = services or record_services
        self.htmlizer_factory = htmlizer_factory or Htmlizer
        self.document_factory = document_factory or self._create_document
        self.scheduler = scheduler or schedule_job
        self.composer = DocumentComposer(self.settings)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _create_document(self) -> PdfDocument:
        return PdfDocument(renderer=self.settings.renderer, base_url=self.settings.base_url)

    def _resolve_service(self, entity_type: str) -> RecordService:
        return self.services.resolve(entity_type, user=self.user)

    def _check_template_entity_type(self, template: PdfTemplate, entity_type: str) -> None:
        if template.entity_type != entity_type:
            raise ValidationMismatch(
                f"Template '{template.name}' prints {template.entity_type} records, "
                f"not {entity_type}."
            )

    def _load_template(self, template_id: Any) -> PdfTemplate:
        try:
            template = PdfTemplate.objects.filter(pk=template_id).first()
        except (ValidationError, ValueError, TypeError):
            template = None
        if template is None:
            raise NotFound(f"Template '{template_id}' not found.")
        return template

    def _print_records(
        self,
        pdf: PdfDocument,
        records: Iterable[models.Model],
        template: PdfTemplate,
        service: RecordService,
        htmlizer: Htmlizer,
    ) -> int:
        count = 0
        for record in records:
            try:
                load_record_fields(service, record)
                pdf.start_page_group()
                self.composer.compose(record, template, htmlizer, pdf)
            except PdfError:
                raise
            except Exception as exc:
                logger.exception(
                    "Failed to print %s %s with template %s: %s",
                    template.entity_type,
                    record.pk,
                    template.pk,
                    exc,
                )
                raise RenderingFailure(f"Failed to print record {record.pk}: {exc}") from exc
            count += 1
        return count

    def _output(self, pdf: PdfDocument, name: str = "", dest: str = "S") -> Union[bytes, HttpResponse]:
        try:
            return pdf.output(name, dest)
        except PdfError:
            raise
        except Exception as exc:
            logger.exception("PDF engine failed to serialize document: %s", exc)
            raise RenderingFailure(f"PDF engine failed: {exc}") from exc

    def _save_attachment(self, **fields: Any) -> Attachment:
        attachment = Attachment(mime_type=PDF_MIME_TYPE, **fields)
        attachment.save()
        logger.info(
            "Stored PDF attachment %s '%s' (%s bytes, role %s)",
            attachment.pk,
            attachment.name,
            attachment.size,
            attachment.role,
        )
        return attachment

    # ------------------------------------------------------------------
    # Batch composition
    # ------------------------------------------------------------------

    def compose_many(
        self, records: Sequence[models.Model], template: PdfTemplate, entity_type: str
    ) -> bytes:
        """Print ``records`` in order into one document, one page group per record."""
        self._check_template_entity_type(template, entity_type)
        service = self._resolve_service(entity_type)
        htmlizer = self.htmlizer_factory()
        pdf = self.document_factory()
        pdf.set_use_group_numbers(True)

        self._print_records(pdf, records, template, service, htmlizer)
        return self._output(pdf)

    def generate_mail_merge(
        self,
        entity_type: str,
        records: Sequence[models.Model],
        template: PdfTemplate,
        name: str,
        campaign_id: Optional[Any] = None,
    ) -> str:
        """Print ``records`` into a "Mail Merge" attachment and return its id."""
        content = self.compose_many(records, template, entity_type)

        related: dict[str, Any] = {}
        if campaign_id:
            related = {
                "related_type": self.settings.campaign_entity_type,
                "related_id": str(campaign_id),
            }
        attachment = self._save_attachment(
            name=f"{sanitize_file_name(name)}.pdf",
            role=AttachmentRole.MAIL_MERGE,
            contents=content,
            **related,
        )
        return str(attachment.pk)

    def mass_generate(
        self,
        entity_type: str,
        id_list: Sequence[Any],
        template_id: Any,
        check_acl: bool = False,
    ) -> str:
        """
        Print the records identified by ``id_list`` into a "Mass Pdf" attachment.

        Records come out in ``id_list`` order. With ``check_acl`` the template
        and the entity type must be readable, and records the user may not read
        are skipped. The attachment is removed after the configured retention
        period by a scheduled job.

        Raises:
            VolumeLimitExceeded: More ids than ``mass_render_max_count``.
            NotFound: Unknown template or entity type.
            Forbidden: Template or entity type not readable (``check_acl`` only).
            ValidationMismatch: Template bound to another entity type.
            RenderingFailure: Merging or the PDF engine failed.
        """
        service = self._resolve_service(entity_type)

        max_count = self.settings.mass_render_max_count
        if max_count and len(id_list) > max_count:
            raise VolumeLimitExceeded(
                f"Mass print to PDF max count exceeded ({len(id_list)} > {max_count})."
            )

        template = self._load_template(template_id)

        if check_acl:
            if not self.acl.check(template):
                raise Forbidden("No read access to the template.")
            if not self.acl.check_scope(entity_type):
                raise Forbidden(f"No access to {entity_type}.")

        self._check_template_entity_type(template, entity_type)
        model = get_entity_model(entity_type)
        records = self._load_records(model, id_list)

        if check_acl:
            readable = []
            for record in records:
                if self.acl.check(record):
                    readable.append(record)
                else:
                    logger.debug("Skipping unreadable %s %s in mass print", entity_type, record.pk)
            records = readable

        htmlizer = self.htmlizer_factory()
        pdf = self.document_factory()
        pdf.set_use_group_numbers(True)
        self._print_records(pdf, records, template, service, htmlizer)
        content = self._output(pdf)

        filename = f"{sanitize_file_name(translate_entity_type_plural(entity_type))}.pdf"
        run_at = timezone.now() + timedelta(seconds=self.settings.mass_file_retention_seconds)
        with transaction.atomic():
            attachment = self._save_attachment(
                name=filename,
                role=AttachmentRole.MASS_PDF,
                contents=content,
            )
            self.scheduler(
                DeferredJob(
                    handler=REMOVE_MASS_FILE_HANDLER,
                    run_at=run_at,
                    payload={"id": str(attachment.pk)},
                    queue=self.settings.cleanup_queue,
                )
            )
        return str(attachment.pk)

    def _load_records(self, model: type[models.Model], id_list: Sequence[Any]) -> list[models.Model]:
        pk_field = model._meta.pk
        wanted: list[Any] = []
        for record_id in id_list:
            try:
                pk = pk_field.to_python(record_id)
            except (ValidationError, ValueError, TypeError):
                logger.debug("Ignoring malformed %s id %r in mass print", model._meta.label, record_id)
                continue
            if pk is not None:
                wanted.append(pk)

        found = {record.pk: record for record in model.objects.filter(pk__in=wanted)}
        ordered: list[models.Model] = []
        seen: set[Any] = set()
        for pk in wanted:
            if pk in found and pk not in seen:
                ordered.append(found[pk])
                seen.add(pk)
        return ordered

    # ------------------------------------------------------------------
    # Single record
    # ------------------------------------------------------------------

    def build_from_template(
        self,
        record: models.Model,
        template: PdfTemplate,
        display_inline: bool = False,
        additional_data: Optional[dict[str, Any]] = None,
    ) -> Union[bytes, HttpResponse]:
        """
        Print one record.

        Returns the PDF bytes, or with ``display_inline`` an inline
        ``HttpResponse`` named after the record.
        """
        entity_type = get_entity_type(record)
        self._check_template_entity_type(template, entity_type)
        if not self.acl.check(record, "read") or not self.acl.check(template, "read"):
            raise Forbidden("No read access to the record or the template.")

        service = self._resolve_service(entity_type)
        htmlizer = self.htmlizer_factory()
        pdf = self.document_factory()
        try:
            load_record_fields(service, record)
            self.composer.compose(record, template, htmlizer, pdf, additional_data)
        except PdfError:
            raise
        except Exception as exc:
            logger.exception("Failed to print %s %s: %s", entity_type, record.pk, exc)
            raise RenderingFailure(f"Failed to print record {record.pk}: {exc}") from exc

        if display_inline:
            filename = f"{sanitize_file_name(get_record_name(record))}.pdf"
            return self._output(pdf, filename, "I")
        return self._output(pdf)

    # ------------------------------------------------------------------
    # Scheduled cleanup
    # ------------------------------------------------------------------

    def remove_mass_file_job(self, data: Optional[dict[str, Any]]) -> None:
        """Delete a "Mass Pdf" attachment if it still exists and still has that role."""
        attachment_id = (data or {}).get("id")
        if not attachment_id:
            return
        try:
            attachment = Attachment.objects.filter(pk=attachment_id).first()
        except (ValidationError, ValueError, TypeError):
            return
        if attachment is None:
            return
        if attachment.role != AttachmentRole.MASS_PDF:
            logger.debug("Attachment %s changed role; keeping it", attachment_id)
            return
        try:
            attachment.delete()
        except DatabaseError as exc:
            logger.warning("Could not remove mass PDF %s: %s", attachment_id, exc)
            return
        logger.info("Removed mass PDF attachment %s", attachment_id)


@job_handler(REMOVE_MASS_FILE_HANDLER)
def remove_mass_file(payload: dict[str, Any]) -> None:
    PdfService(acl=SystemAcl()).remove_mass_file_job(payload)
