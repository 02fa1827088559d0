from urllib.parse import parse_qs, urlparse

from django.contrib.auth import get_user_model
from django.core import mail
from django.test import TestCase
from django.urls import reverse

from accounts.models import AccountProfile
from accounts.validation import PASSWORD_LENGTH_MESSAGE

User = get_user_model()

PASSWORD = "Tr0ub4dor&3x"


def _link_in(message):
    return next(line for line in message.body.splitlines() if line.startswith("http"))


class LoginRegisterViewTests(TestCase):
    def setUp(self):
        self.url = reverse("accounts:login_register")

    def test_get_renders_form_with_next(self):
        response = self.client.get(self.url, {"next": "/somewhere/"})

        self.assertEqual(response.status_code, 200)
        self.assertTemplateUsed(response, "accounts/login_register.html")
        self.assertContains(response, 'value="/somewhere/"')

    def test_new_email_registers_and_redirects_home(self):
        User.objects.create_user("existing", "bob@example.com", PASSWORD)

        response = self.client.post(self.url, {"identifier": "alice@example.com", "password": "Secret123"})

        self.assertRedirects(response, reverse("home"))
        self.assertEqual(User.objects.count(), 2)
        user = User.objects.get(email="alice@example.com")
        self.assertEqual(len(user.username), 7)
        self.assertTrue(user.username.isalpha())
        self.assertNotEqual(user.username, "existing")
        self.assertTrue(AccountProfile.objects.filter(user=user).exists())
        self.assertEqual(int(self.client.session["_auth_user_id"]), user.pk)

    def test_registration_by_email_sends_confirmation(self):
        self.client.post(self.url, {"identifier": "alice@example.com", "password": PASSWORD})

        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ["alice@example.com"])
        self.assertIn(reverse("accounts:confirm_email"), mail.outbox[0].body)

    def test_registration_by_username_has_empty_email_and_sends_nothing(self):
        response = self.client.post(self.url, {"identifier": "carol", "password": PASSWORD})

        self.assertRedirects(response, reverse("home"))
        user = User.objects.get(username="carol")
        self.assertEqual(user.email, "")
        self.assertEqual(mail.outbox, [])

    def test_existing_email_signs_in(self):
        user = User.objects.create_user("bob", "bob@example.com", PASSWORD)

        response = self.client.post(self.url, {"identifier": "bob@example.com", "password": PASSWORD})

        self.assertRedirects(response, reverse("home"))
        self.assertEqual(User.objects.count(), 1)
        self.assertEqual(int(self.client.session["_auth_user_id"]), user.pk)

    def test_wrong_password_is_generic_and_keeps_input(self):
        User.objects.create_user("bob", "bob@example.com", PASSWORD)

        response = self.client.post(self.url, {"identifier": "bob@example.com", "password": "wrong-pass"})

        self.assertEqual(response.status_code, 200)
        self.assertContains(response, "Invalid login attempt.")
        self.assertContains(response, 'value="bob@example.com"')
        self.assertNotIn("_auth_user_id", self.client.session)
        self.assertEqual(User.objects.count(), 1)

    def test_wrong_password_for_username_gives_same_message(self):
        User.objects.create_user("bob", "", PASSWORD)

        response = self.client.post(self.url, {"identifier": "bob", "password": "wrong-pass"})

        self.assertContains(response, "Invalid login attempt.")

    def test_missing_fields_are_reported_before_any_lookup(self):
        response = self.client.post(self.url, {"identifier": "", "password": ""})

        self.assertEqual(response.status_code, 200)
        self.assertContains(response, "The Username / Email field is required.")
        self.assertContains(response, "The Password field is required.")
        self.assertFalse(User.objects.exists())

    def test_short_password_is_rejected(self):
        response = self.client.post(self.url, {"identifier": "carol", "password": "abc"})

        self.assertContains(response, PASSWORD_LENGTH_MESSAGE)
        self.assertFalse(User.objects.exists())

    def test_password_policy_errors_are_listed(self):
        response = self.client.post(self.url, {"identifier": "carol", "password": "123456"})

        self.assertEqual(response.status_code, 200)
        self.assertContains(response, "This password is entirely numeric.")
        self.assertFalse(User.objects.exists())

    def test_local_next_is_followed(self):
        response = self.client.post(
            f"{self.url}?next=/private/page/",
            {"identifier": "carol", "password": PASSWORD},
        )

        self.assertRedirects(response, "/private/page/", fetch_redirect_response=False)

    def test_foreign_next_falls_back_to_home(self):
        response = self.client.post(
            self.url,
            {"identifier": "carol", "password": PASSWORD, "next": "https://evil.example.com/"},
        )

        self.assertRedirects(response, reverse("home"))


class LogOffViewTests(TestCase):
    def test_post_ends_session(self):
        user = User.objects.create_user("bob", "", PASSWORD)
        self.client.force_login(user)

        response = self.client.post(reverse("accounts:logout"))

        self.assertRedirects(response, reverse("home"))
        self.assertNotIn("_auth_user_id", self.client.session)

    def test_get_is_not_allowed(self):
        response = self.client.get(reverse("accounts:logout"))

        self.assertEqual(response.status_code, 405)


class ConfirmEmailViewTests(TestCase):
    def setUp(self):
        self.url = reverse("accounts:confirm_email")
        self.client.post(
            reverse("accounts:login_register"),
            {"identifier": "alice@example.com", "password": PASSWORD},
        )
        self.user = User.objects.get(email="alice@example.com")
        link = urlparse(_link_in(mail.outbox[0]))
        self.params = {k: v[0] for k, v in parse_qs(link.query).items()}

    def test_link_from_email_confirms(self):
        response = self.client.get(self.url, self.params)

        self.assertTemplateUsed(response, "accounts/confirm_email.html")
        self.assertTrue(AccountProfile.objects.get(user=self.user).email_confirmed)

    def test_link_only_works_once(self):
        self.client.get(self.url, self.params)

        response = self.client.get(self.url, self.params)

        self.assertTemplateUsed(response, "error.html")

    def test_missing_parameters_render_error(self):
        response = self.client.get(self.url, {"userId": self.user.pk})

        self.assertTemplateUsed(response, "error.html")

    def test_unknown_user_renders_error(self):
        response = self.client.get(self.url, {"userId": "424242", "code": self.params["code"]})

        self.assertTemplateUsed(response, "error.html")

    def test_bad_code_renders_error(self):
        response = self.client.get(self.url, {"userId": self.user.pk, "code": "abc-def"})

        self.assertTemplateUsed(response, "error.html")
        self.assertFalse(AccountProfile.objects.get(user=self.user).email_confirmed)


class PasswordResetViewTests(TestCase):
    def setUp(self):
        self.url = reverse("accounts:reset_password")
        self.confirmation_url = reverse("accounts:reset_password_confirmation")
        self.user = User.objects.create_user("bob", "bob@example.com", PASSWORD)

    def _reset_code(self):
        self.client.post(reverse("accounts:forgot_password"), {"identifier": "bob@example.com"})
        link = urlparse(_link_in(mail.outbox[-1]))
        return parse_qs(link.query)["code"][0]

    def _post(self, identifier, code, password="N3w-Passphrase!"):
        return self.client.post(
            self.url,
            {
                "identifier": identifier,
                "code": code,
                "password": password,
                "confirm_password": password,
            },
        )

    def test_get_without_code_renders_error(self):
        response = self.client.get(self.url)

        self.assertTemplateUsed(response, "error.html")

    def test_get_with_code_prefills_form(self):
        response = self.client.get(self.url, {"code": "some-code"})

        self.assertTemplateUsed(response, "accounts/reset_password.html")
        self.assertContains(response, 'value="some-code"')

    def test_forgot_password_does_not_reveal_accounts(self):
        known = self.client.post(reverse("accounts:forgot_password"), {"identifier": "bob"})
        unknown = self.client.post(reverse("accounts:forgot_password"), {"identifier": "nobody"})

        self.assertRedirects(known, reverse("accounts:forgot_password_confirmation"))
        self.assertRedirects(unknown, reverse("accounts:forgot_password_confirmation"))
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ["bob@example.com"])

    def test_unknown_account_and_wrong_code_look_the_same(self):
        unknown = self._post("nobody@example.com", "whatever")
        wrong_code = self._post("bob@example.com", "whatever")

        self.assertRedirects(unknown, self.confirmation_url)
        self.assertRedirects(wrong_code, self.confirmation_url)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password(PASSWORD))

    def test_valid_code_resets_password(self):
        code = self._reset_code()

        response = self._post("bob", code)

        self.assertRedirects(response, self.confirmation_url)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password("N3w-Passphrase!"))

    def test_valid_code_with_weak_password_lists_errors(self):
        code = self._reset_code()

        response = self._post("bob@example.com", code, password="12345678")

        self.assertEqual(response.status_code, 200)
        self.assertContains(response, "This password is entirely numeric.")
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password(PASSWORD))

    def test_mismatched_confirmation_is_a_field_error(self):
        response = self.client.post(
            self.url,
            {
                "identifier": "bob",
                "code": "code",
                "password": "N3w-Passphrase!",
                "confirm_password": "different",
            },
        )

        self.assertContains(response, "The password and confirmation password do not match.")


class HomeViewTests(TestCase):
    def test_home_renders(self):
        response = self.client.get(reverse("home"))

        self.assertEqual(response.status_code, 200)
        self.assertTemplateUsed(response, "core/home.html")
        self.assertNotIn("navbar_mode", response.context)

    def test_privacy_policy_renders_and_is_linked(self):
        response = self.client.get(reverse("privacy_policy"))

        self.assertEqual(response.status_code, 200)
        self.assertTemplateUsed(response, "core/privacy_policy.html")
        self.assertContains(self.client.get(reverse("home")), reverse("privacy_policy"))
