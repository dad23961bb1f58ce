"""Seed demo staff accounts and a handful of security news articles."""

from datetime import timedelta

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.utils import timezone

from access_control.policy import Role
from articles.models import Article, ArticleStatus, Category, Priority

DEMO_STAFF = [
    # (username, email, full name, role, password)
    ("editor", "editor@example.com", "Demo Editor", Role.EDITOR, "editor123"),
    ("author", "author@example.com", "Demo Author", Role.AUTHOR, "author123"),
]

DEMO_ARTICLES = [
    {
        "title": "Critical remote code execution flaw found in popular operating system",
        "summary": (
            "Researchers disclosed a network-stack vulnerability affecting millions of "
            "devices. Vendors have shipped emergency patches."
        ),
        "content": (
            "Security researchers have published details of a critical vulnerability in "
            "the network protocol handling of a widely deployed operating system. The flaw "
            "allows unauthenticated remote attackers to execute code. Update immediately, "
            "enable the firewall and watch for unusual activity."
        ),
        "category": Category.CYBERSECURITY,
        "tags": ["vulnerability", "patch", "urgent", "cve"],
        "status": ArticleStatus.PUBLISHED,
        "priority": Priority.URGENT,
        "is_breaking": True,
        "is_featured": True,
        "views": 2847,
        "likes": 156,
        "age": timedelta(hours=6),
    },
    {
        "title": "10 basic security habits every internet user should know",
        "summary": "Strong passwords, two-factor authentication and regular updates go a long way.",
        "content": (
            "Use long unique passwords and a password manager. Turn on two-factor "
            "authentication. Be suspicious of unexpected email links. Keep software "
            "updated, use a VPN on public Wi-Fi and back up your data regularly."
        ),
        "category": Category.TIPS,
        "tags": ["passwords", "2fa", "phishing"],
        "status": ArticleStatus.PUBLISHED,
        "priority": Priority.NORMAL,
        "is_featured": True,
        "views": 1523,
        "likes": 98,
        "age": timedelta(days=2),
    },
    {
        "title": "New ransomware strain targets hospital networks",
        "summary": "A ransomware family spreading through exposed remote desktop services.",
        "content": (
            "Incident responders report a new ransomware strain that encrypts backups "
            "before demanding payment. Close exposed RDP ports and test offline backups."
        ),
        "category": Category.MALWARE,
        "tags": ["ransomware", "healthcare"],
        "status": ArticleStatus.PUBLISHED,
        "priority": Priority.HIGH,
        "is_breaking": True,
        "views": 934,
        "likes": 41,
        "age": timedelta(days=4),
    },
    {
        "title": "Retailer confirms breach of customer payment data",
        "summary": "Card details of an undisclosed number of customers were exposed.",
        "content": "The company says attackers accessed its checkout system for three weeks.",
        "category": Category.DATA_BREACH,
        "tags": ["breach", "payments"],
        "status": ArticleStatus.PUBLISHED,
        "priority": Priority.NORMAL,
        "views": 412,
        "likes": 12,
        "age": timedelta(days=20),
    },
    {
        "title": "Draft: privacy regulation changes coming next year",
        "summary": "An overview of upcoming privacy rule changes for online services.",
        "content": "Work in progress.",
        "category": Category.PRIVACY,
        "tags": ["privacy", "regulation"],
        "status": ArticleStatus.DRAFT,
        "priority": Priority.LOW,
    },
]


def create_seed_users() -> dict:
    """Create the administrator and demo staff if missing; return them by role."""
    User = get_user_model()
    users = {}

    admin = User.objects.filter(email__iexact=settings.ADMIN_EMAIL).first()
    if admin is None:
        admin = User.objects.create_superuser(
            "admin", settings.ADMIN_EMAIL, settings.ADMIN_PASSWORD, full_name="Administrator"
        )
    users[Role.ADMIN.value] = admin

    for username, email, full_name, role, password in DEMO_STAFF:
        user = User.objects.filter(email__iexact=email).first()
        if user is None:
            user = User.objects.create_user(
                username, email, password, full_name=full_name, role=role
            )
        users[role.value] = user
    return users


def create_seed_articles(users: dict) -> int:
    """Create the sample articles that do not exist yet; return how many."""
    now = timezone.now()
    authors = [users[Role.ADMIN.value], users[Role.EDITOR.value], users[Role.AUTHOR.value]]
    created = 0
    for index, sample in enumerate(DEMO_ARTICLES):
        fields = dict(sample)
        age = fields.pop("age", None)
        if Article.objects.filter(title=fields["title"]).exists():
            continue
        author = authors[index % len(authors)]
        article = Article(**fields, **Article.author_snapshot(author))
        if age is not None:
            article.published_at = now - age
        article.save()
        created += 1
    return created


class Command(BaseCommand):
    """Management command to seed demo users and articles."""

    help = (
        "Seed the administrator (ADMIN_EMAIL/ADMIN_PASSWORD), demo editor and author "
        "accounts, and sample articles. Use --reset to clear seeded data first."
    )

    def add_arguments(self, parser):
        parser.add_argument(
            "--reset",
            action="store_true",
            help="Delete the demo accounts and every seeded article before seeding.",
        )

    def handle(self, *args, **options):
        """Entrypoint for the management command."""
        if options.get("reset"):
            self._reset_seeded_data()

        self.stdout.write("Seeding newsroom data...")
        users = create_seed_users()
        created = create_seed_articles(users)
        self.stdout.write(
            self.style.SUCCESS(f"Seed completed: {len(users)} users, {created} new articles.")
        )

    def _reset_seeded_data(self) -> None:
        """Remove demo accounts and articles created by this command.

        The administrator account is kept.
        """
        self.stdout.write("Resetting previously seeded data...")
        User = get_user_model()
        Article.objects.filter(title__in=[a["title"] for a in DEMO_ARTICLES]).delete()
        User.objects.filter(email__in=[email for _, email, *_ in DEMO_STAFF]).delete()
        self.stdout.write(self.style.WARNING("Seeded data cleared."))
