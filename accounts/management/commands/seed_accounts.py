from django.core.management.base import BaseCommand, CommandError
from faker import Faker

from accounts.identity import DjangoIdentityService
from accounts.usernames import UsernameGenerationError, create_account_with_generated_username

fake = Faker()


# ------------------------------------------------------------
# 🎯 Django Command
# ------------------------------------------------------------
class Command(BaseCommand):
    help = "Seeds demo accounts: half registered by email, half by username."

    def add_arguments(self, parser):
        parser.add_argument("--count", type=int, default=10,
                            help="Number of accounts to create")
        parser.add_argument("--password", default="DemoPassw0rd!",
                            help="Password given to every seeded account")

    def handle(self, *args, **options):
        count = options["count"]
        password = options["password"]
        if count < 1:
            raise CommandError("--count must be at least 1")

        identity = DjangoIdentityService()
        created = 0

        for i in range(count):
            if i % 2 == 0:
                email = fake.unique.email()
                try:
                    result = create_account_with_generated_username(identity, email, password)
                except UsernameGenerationError as e:
                    raise CommandError(str(e)) from e
            else:
                username = fake.unique.user_name()
                result = identity.create_account(username, "", password)

            if result.succeeded:
                created += 1
                user = result.user
                self.stdout.write(f"Created {user.username} <{user.email or '-'}>")
            else:
                self.stdout.write(self.style.ERROR(
                    f"Skipped: {'; '.join(result.descriptions)}"))

        self.stdout.write(self.style.SUCCESS(f"Done. Created={created}"))
