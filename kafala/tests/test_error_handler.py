from django.test import TestCase, override_settings


@override_settings(DEBUG=False)
class ErrorHandlerTests(TestCase):
    def test_custom_404_template_used(self):
        response = self.client.get('/this-url-does-not-exist/')
        self.assertEqual(response.status_code, 404)
        self.assertTemplateUsed(response, '404.html')
