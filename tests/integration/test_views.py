"""
Integration tests for the PDF printing endpoints.
"""

import json

import pytest
from django.contrib.auth import get_user_model
from django.contrib.auth.models import Permission
from django.test import TestCase, override_settings
from django.urls import reverse

from record_pdf.models import Attachment, AttachmentRole, PdfTemplate, ScheduledJob
from tests.engines import RECORDING_PDF_HEADER, recording_renderer
from tests.models import Contact

pytestmark = [pytest.mark.integration, pytest.mark.django_db]


class PdfViewTestCase(TestCase):
    def setUp(self):
        recording_renderer.reset()
        self.template = PdfTemplate.objects.create(
            name="Contact card",
            entity_type="tests.Contact",
            body="<p>{{ name }}</p>",
        )
        self.contact = Contact.objects.create(name="Ada Lovelace", city="London")
        self.admin = get_user_model().objects.create_superuser(
            username="admin", password="secret", email="admin@example.com"
        )

    def create_user(self, username, *codenames):
        user = get_user_model().objects.create_user(username=username, password="secret")
        for codename in codenames:
            user.user_permissions.add(Permission.objects.get(codename=codename))
        return user


class TestRecordPdfView(PdfViewTestCase):
    def url(self, template_id=None, pk=None):
        return reverse(
            "record_pdf:record_pdf",
            kwargs={
                "template_id": template_id or self.template.pk,
                "pk": pk or self.contact.pk,
            },
        )

    def test_requires_authentication(self):
        response = self.client.get(self.url())

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["error"], "Unauthenticated")

    def test_returns_inline_pdf(self):
        self.client.force_login(self.admin)

        response = self.client.get(self.url())

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response["Content-Type"], "application/pdf")
        self.assertEqual(
            response["Content-Disposition"], 'inline; filename="Ada Lovelace.pdf"'
        )
        self.assertTrue(response.content.startswith(RECORDING_PDF_HEADER))

    def test_missing_template_and_record(self):
        self.client.force_login(self.admin)

        missing_template = self.client.get(self.url(template_id=999999))
        missing_record = self.client.get(self.url(pk="999999"))
        invalid_record = self.client.get(self.url(pk="abc"))

        self.assertEqual(missing_template.status_code, 404)
        self.assertEqual(missing_template.json()["error"], "NotFound")
        self.assertEqual(missing_record.status_code, 404)
        self.assertEqual(invalid_record.status_code, 404)

    def test_forbidden_without_permissions(self):
        self.client.force_login(self.create_user("clerk", "view_contact"))

        response = self.client.get(self.url())

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["error"], "Forbidden")


class TestMassPdfView(PdfViewTestCase):
    url = "/api/pdf/mass/"

    def post(self, payload):
        return self.client.post(self.url, data=json.dumps(payload), content_type="application/json")

    def test_requires_authentication(self):
        response = self.post({"entity_type": "tests.Contact", "ids": [], "template_id": 1})
        self.assertEqual(response.status_code, 401)

    def test_creates_mass_attachment(self):
        self.client.force_login(self.admin)

        response = self.post(
            {
                "entity_type": "tests.Contact",
                "ids": [str(self.contact.pk)],
                "template_id": self.template.pk,
            }
        )

        self.assertEqual(response.status_code, 200)
        attachment = Attachment.objects.get(pk=response.json()["id"])
        self.assertEqual(attachment.role, AttachmentRole.MASS_PDF)
        self.assertEqual(ScheduledJob.objects.count(), 1)

    def test_rejects_invalid_payloads(self):
        self.client.force_login(self.admin)

        not_json = self.client.post(self.url, data="{", content_type="application/json")
        missing_ids = self.post({"entity_type": "tests.Contact", "template_id": 1})

        self.assertEqual(not_json.status_code, 400)
        self.assertEqual(missing_ids.status_code, 400)

    @override_settings(RECORD_PDF={"renderer": "recording", "mass_render_max_count": 1})
    def test_volume_limit_is_reported(self):
        self.client.force_login(self.admin)

        response = self.post(
            {"entity_type": "tests.Contact", "ids": ["1", "2"], "template_id": self.template.pk}
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(
            response.json(),
            {
                "error": "VolumeLimitExceeded",
                "detail": "Mass print to PDF max count exceeded (2 > 1).",
            },
        )

    def test_enforces_scope_access(self):
        self.client.force_login(self.create_user("designer", "view_pdftemplate"))

        response = self.post(
            {
                "entity_type": "tests.Contact",
                "ids": [str(self.contact.pk)],
                "template_id": self.template.pk,
            }
        )

        self.assertEqual(response.status_code, 403)
        self.assertFalse(Attachment.objects.exists())
