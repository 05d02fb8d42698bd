import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Franchise",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, help_text="Time when the record was created.")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Time when the record was last updated.")),
                ("title", models.CharField(help_text="Display title.", max_length=200)),
                (
                    "category",
                    models.CharField(
                        choices=[("movie", "Movie"), ("series", "Series"), ("game", "Game")],
                        db_index=True,
                        default="movie",
                        max_length=16,
                    ),
                ),
            ],
            options={
                "verbose_name": "Franchise",
                "verbose_name_plural": "Franchises",
                "ordering": ["title"],
            },
        ),
        migrations.CreateModel(
            name="Question",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, help_text="Time when the record was created.")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Time when the record was last updated.")),
                (
                    "kind",
                    models.CharField(
                        choices=[("quote", "Quote"), ("character", "Character"), ("banner", "Banner")],
                        db_index=True,
                        max_length=16,
                    ),
                ),
                ("media_path", models.CharField(help_text="Asset path relative to the media root.", max_length=255)),
                ("answer", models.CharField(help_text="Canonical answer shown on solve.", max_length=200)),
                ("stop_time", models.FloatField(blank=True, help_text="Quote clips pause here (seconds).", null=True)),
                (
                    "base_clarity",
                    models.FloatField(
                        default=0.02,
                        help_text="Clarity shown with zero hints.",
                        validators=[
                            django.core.validators.MinValueValidator(0.0),
                            django.core.validators.MaxValueValidator(1.0),
                        ],
                    ),
                ),
                (
                    "franchise",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="questions",
                        to="quotevault.franchise",
                    ),
                ),
            ],
            options={
                "verbose_name": "Question",
                "verbose_name_plural": "Questions",
                "ordering": ["franchise", "kind", "id"],
            },
        ),
        migrations.CreateModel(
            name="ActivityRecord",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, help_text="Time when the record was created.")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Time when the record was last updated.")),
                ("attempts", models.PositiveIntegerField(default=0)),
                ("hints_used", models.PositiveIntegerField(default=0)),
                ("time_taken", models.PositiveIntegerField(default=0, help_text="Seconds from serve to solve.")),
                (
                    "question",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="activity",
                        to="quotevault.question",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="quotevault_activity",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Activity Record",
                "verbose_name_plural": "Activity Records",
                "ordering": ["-created_at"],
            },
        ),
    ]
