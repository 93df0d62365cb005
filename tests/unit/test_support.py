"""
Unit tests for enrichment services, access checks, settings and helpers.
"""

import pytest
from django.core.exceptions import PermissionDenied
from django.http import Http404
from django.test import TestCase, override_settings

from record_pdf.acl import Acl, SystemAcl
from record_pdf.conf import get_pdf_settings, resolve_url_fetcher
from record_pdf.exceptions import (
    Forbidden,
    NotFound,
    PdfError,
    ValidationMismatch,
    VolumeLimitExceeded,
)
from record_pdf.rendering import WEASYPRINT_AVAILABLE
from record_pdf.services import (
    PdfEnrichable,
    RecordService,
    RecordServiceRegistry,
    load_record_fields,
)
from record_pdf.utils import (
    get_entity_model,
    get_entity_type,
    get_record_name,
    sanitize_file_name,
    translate_entity_type_plural,
)
from tests.models import Contact

pytestmark = pytest.mark.unit


class DummyUser:
    def __init__(self, *, is_authenticated=True, perms=None, object_perms=None, is_superuser=False):
        self.is_authenticated = is_authenticated
        self.is_superuser = is_superuser
        self._perms = set(perms or [])
        self._object_perms = dict(object_perms or {})

    def has_perm(self, perm, obj=None):
        if obj is None:
            return perm in self._perms
        return perm in self._object_perms.get(obj.pk, set())


class TrackingService(RecordService):
    def load_additional_fields(self, record):
        record.loaded = ["basic"]


class TrackingPdfService(TrackingService, PdfEnrichable):
    def load_additional_fields_for_pdf(self, record):
        record.loaded.append("pdf")


class ContactSettingsService(RecordService):
    pass


class TestRecordServices(TestCase):
    def test_resolve_falls_back_to_generic_service(self):
        registry = RecordServiceRegistry()
        service = registry.resolve("tests.Contact", user="someone")

        self.assertIs(type(service), RecordService)
        self.assertEqual(service.user, "someone")

    def test_registered_service_wins(self):
        registry = RecordServiceRegistry()
        registry.register("tests.Contact", TrackingService)

        self.assertIsInstance(registry.resolve("tests.Contact"), TrackingService)
        registry.unregister("tests.Contact")
        self.assertIs(type(registry.resolve("tests.Contact")), RecordService)

    @override_settings(
        RECORD_PDF={
            "renderer": "recording",
            "services": {"tests.Contact": "tests.unit.test_support.ContactSettingsService"},
        }
    )
    def test_service_from_settings(self):
        registry = RecordServiceRegistry()
        self.assertIsInstance(registry.resolve("tests.Contact"), ContactSettingsService)

    def test_pdf_hook_runs_only_for_pdf_enrichable_services(self):
        basic_record = Contact(name="Ada")
        load_record_fields(TrackingService(), basic_record)
        pdf_record = Contact(name="Grace")
        load_record_fields(TrackingPdfService(), pdf_record)

        self.assertEqual(basic_record.loaded, ["basic"])
        self.assertEqual(pdf_record.loaded, ["basic", "pdf"])


class TestAcl(TestCase):
    def test_anonymous_user_is_denied(self):
        acl = Acl(DummyUser(is_authenticated=False, perms={"tests.view_contact"}))

        self.assertFalse(acl.check(Contact(pk=1)))
        self.assertFalse(acl.check_scope("tests.Contact"))
        self.assertFalse(Acl(None).check(Contact(pk=1)))

    def test_superuser_is_allowed(self):
        acl = Acl(DummyUser(is_superuser=True))

        self.assertTrue(acl.check(Contact(pk=1)))
        self.assertTrue(acl.check_scope("tests.Contact"))

    def test_model_permission_grants_read(self):
        acl = Acl(DummyUser(perms={"tests.view_contact"}))

        self.assertTrue(acl.check(Contact(pk=1)))
        self.assertTrue(acl.check_scope("tests.Contact"))
        self.assertFalse(acl.check(Contact(pk=1), "delete"))

    def test_object_permission_grants_read(self):
        acl = Acl(DummyUser(object_perms={1: {"tests.view_contact"}}))

        self.assertTrue(acl.check(Contact(pk=1)))
        self.assertFalse(acl.check(Contact(pk=2)))
        self.assertFalse(acl.check_scope("tests.Contact"))

    def test_unknown_scope_is_denied(self):
        self.assertFalse(Acl(DummyUser(perms={"x"})).check_scope("nope.Missing"))

    def test_system_acl_allows_everything(self):
        acl = SystemAcl()

        self.assertTrue(acl.check(Contact(pk=1)))
        self.assertTrue(acl.check_scope("nope.Missing"))


class TestSettings(TestCase):
    @override_settings(RECORD_PDF={})
    def test_defaults(self):
        config = get_pdf_settings()

        self.assertEqual(config.default_font_face, "freesans")
        self.assertEqual(config.font_size, 12)
        self.assertIsNone(config.mass_render_max_count)
        self.assertEqual(config.mass_file_retention_seconds, 3600)
        self.assertEqual(config.cleanup_queue, "default")
        self.assertEqual(config.renderer, "weasyprint")

    @override_settings(
        RECORD_PDF={
            "default_font_face": "dejavusans",
            "mass_render_max_count": "50",
            "renderer": "WeasyPrint",
            "cleanup_queue": "  ",
        }
    )
    def test_overrides_are_coerced(self):
        config = get_pdf_settings()

        self.assertEqual(config.default_font_face, "dejavusans")
        self.assertEqual(config.mass_render_max_count, 50)
        self.assertEqual(config.renderer, "weasyprint")
        self.assertEqual(config.cleanup_queue, "default")

    @override_settings(RECORD_PDF={"mass_render_max_count": 0})
    def test_zero_max_count_means_unlimited(self):
        self.assertIsNone(get_pdf_settings().mass_render_max_count)

    def test_settings_are_immutable(self):
        with self.assertRaises(Exception):
            get_pdf_settings().font_size = 20


def custom_fetcher(url, *args, **kwargs):
    return {"string": b"", "mime_type": "text/plain"}


class TestUrlFetcher(TestCase):
    @override_settings(RECORD_PDF={"url_fetcher": custom_fetcher})
    def test_custom_fetcher_wins(self):
        self.assertIs(resolve_url_fetcher(None), custom_fetcher)

    @pytest.mark.skipif(not WEASYPRINT_AVAILABLE, reason="WeasyPrint not available")
    @override_settings(RECORD_PDF={"url_fetcher_allowlist": {"schemes": ["https"]}})
    def test_blocks_disallowed_scheme(self):
        fetcher = resolve_url_fetcher(None)
        with self.assertRaises(ValueError):
            fetcher("ftp://example.com/logo.png")

    @pytest.mark.skipif(not WEASYPRINT_AVAILABLE, reason="WeasyPrint not available")
    def test_blocks_remote_hosts_by_default(self):
        fetcher = resolve_url_fetcher(None)
        with self.assertRaises(ValueError):
            fetcher("https://tracker.example.com/pixel.gif")

    @pytest.mark.skipif(not WEASYPRINT_AVAILABLE, reason="WeasyPrint not available")
    @override_settings(RECORD_PDF={"url_fetcher_allowlist": {"file_roots": ["/srv/assets"]}})
    def test_blocks_files_outside_roots(self):
        fetcher = resolve_url_fetcher(None)
        with self.assertRaises(ValueError):
            fetcher("file:///etc/passwd")


class TestHelpers(TestCase):
    def test_sanitize_file_name(self):
        self.assertEqual(sanitize_file_name("Q3 / Offers"), "Q3 _ Offers")
        self.assertEqual(sanitize_file_name('a<b>c:"d"'), "a_b_c:_d_")
        self.assertEqual(sanitize_file_name("..."), "document")
        self.assertEqual(sanitize_file_name(None, default="merge"), "merge")

    def test_sanitize_file_name_keeps_header_safe_ascii(self):
        self.assertEqual(sanitize_file_name("Иван Петров"), "____ ______")
        self.assertEqual(sanitize_file_name("Zoë\tMüller\r\n"), "Zo__M_ller__")
        self.assertTrue(sanitize_file_name("Ωμέγα").isascii())

    def test_entity_type_helpers(self):
        contact = Contact(pk=3, name="Ada")

        self.assertEqual(get_entity_type(contact), "tests.Contact")
        self.assertIs(get_entity_model("tests.Contact"), Contact)
        with self.assertRaises(NotFound):
            get_entity_model("tests.Missing")

    def test_record_name_falls_back_to_str(self):
        self.assertEqual(get_record_name(Contact(name="Ada")), "Ada")

        class Nameless:
            def __str__(self):
                return "Nameless #1"

        self.assertEqual(get_record_name(Nameless()), "Nameless #1")

    def test_translate_entity_type_plural(self):
        self.assertEqual(translate_entity_type_plural("tests.Contact"), "contacts")
        self.assertEqual(translate_entity_type_plural("unknown"), "unknown")


class TestExceptions(TestCase):
    def test_status_codes_and_django_bases(self):
        self.assertEqual(Forbidden().status_code, 403)
        self.assertIsInstance(Forbidden(), PermissionDenied)
        self.assertIsInstance(ValidationMismatch(), Forbidden)
        self.assertIsInstance(NotFound(), Http404)
        self.assertEqual(NotFound().status_code, 404)
        self.assertEqual(VolumeLimitExceeded().status_code, 400)

    def test_detail_defaults_to_class_message(self):
        self.assertEqual(VolumeLimitExceeded().detail, "Mass print to PDF max count exceeded.")
        self.assertEqual(PdfError("boom").detail, "boom")
        self.assertEqual(str(PdfError("boom")), "boom")
