# core/tests/test_exceptions.py
from django.test import SimpleTestCase
from rest_framework.exceptions import NotAuthenticated, ValidationError as DRFValidationError

from core import errors
from core.exceptions import custom_exception_handler


class ExceptionHandlerTest(SimpleTestCase):
    def assertEnvelope(self, exc, status_code, kind=None, code=None):
        res = custom_exception_handler(exc, {})
        self.assertEqual(res.status_code, status_code)
        self.assertFalse(res.data["success"])
        self.assertEqual(res.data["status_code"], status_code)
        if kind:
            self.assertEqual(res.data["errors"]["kind"], kind)
        if code:
            self.assertEqual(res.data["errors"]["code"], code)
        return res

    def test_domain_errors_map_to_http(self):
        self.assertEnvelope(errors.Unauthenticated(), 401, "unauthenticated", "UNAUTHENTICATED")
        self.assertEnvelope(errors.NotGigOwner(), 403, "forbidden", "NOT_GIG_OWNER")
        self.assertEnvelope(errors.WrongAccount(), 403, "forbidden", "WRONG_ACCOUNT")
        self.assertEnvelope(errors.InvitationNotFound(), 404, "not_found", "INVITATION_NOT_FOUND")
        self.assertEnvelope(errors.SlotAlreadyFilled(), 409, "conflict", "SLOT_ALREADY_FILLED")
        self.assertEnvelope(errors.InvitationExpired(), 409, "conflict", "INVITATION_EXPIRED")
        self.assertEnvelope(errors.NotEligible(), 400, "validation_error", "NOT_ELIGIBLE")
        self.assertEnvelope(errors.CodeGenerationFailed(), 500, "internal_error", "CODE_GENERATION_FAILED")

    def test_custom_message_is_the_detail(self):
        res = self.assertEnvelope(errors.NotEligible("You don't play Drums"), 400)
        self.assertEqual(res.data["errors"]["detail"], "You don't play Drums")

    def test_drf_errors_are_wrapped(self):
        res = self.assertEnvelope(DRFValidationError({"title": ["required"]}), 400)
        self.assertEqual(res.data["errors"], {"title": ["required"]})
        self.assertEnvelope(NotAuthenticated(), 401)

    def test_unhandled_exception_is_500(self):
        with self.assertLogs("gigboard", level="ERROR"):
            self.assertEnvelope(RuntimeError("boom"), 500, "internal_error", "INTERNAL_ERROR")
