import django.contrib.auth.models
import django.contrib.auth.validators
import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models

import finance.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("auth", "0012_alter_user_first_name_max_length"),
    ]

    operations = [
        migrations.CreateModel(
            name="User",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("password", models.CharField(max_length=128, verbose_name="password")),
                ("last_login", models.DateTimeField(blank=True, null=True, verbose_name="last login")),
                ("is_superuser", models.BooleanField(default=False, help_text="Designates that this user has all permissions without explicitly assigning them.", verbose_name="superuser status")),
                ("username", models.CharField(error_messages={"unique": "A user with that username already exists."}, help_text="Required. 150 characters or fewer. Letters, digits and @/./+/-/_ only.", max_length=150, unique=True, validators=[django.contrib.auth.validators.UnicodeUsernameValidator()], verbose_name="username")),
                ("first_name", models.CharField(blank=True, max_length=150, verbose_name="first name")),
                ("last_name", models.CharField(blank=True, max_length=150, verbose_name="last name")),
                ("email", models.EmailField(blank=True, max_length=254, verbose_name="email address")),
                ("is_staff", models.BooleanField(default=False, help_text="Designates whether the user can log into this admin site.", verbose_name="staff status")),
                ("is_active", models.BooleanField(default=True, help_text="Designates whether this user should be treated as active. Unselect this instead of deleting accounts.", verbose_name="active")),
                ("date_joined", models.DateTimeField(default=django.utils.timezone.now, verbose_name="date joined")),
                ("role", models.CharField(choices=[("admin", "Administrator"), ("finance", "Finance staff"), ("viewer", "Viewer")], default="viewer", max_length=10)),
                ("hospital_id", models.CharField(db_index=True, default="hospital-1", max_length=64)),
                ("phone", models.CharField(blank=True, max_length=20)),
                ("department", models.CharField(blank=True, max_length=100)),
                ("groups", models.ManyToManyField(blank=True, help_text="The groups this user belongs to. A user will get all permissions granted to each of their groups.", related_name="user_set", related_query_name="user", to="auth.group", verbose_name="groups")),
                ("user_permissions", models.ManyToManyField(blank=True, help_text="Specific permissions for this user.", related_name="user_set", related_query_name="user", to="auth.permission", verbose_name="user permissions")),
            ],
            options={
                "verbose_name": "user",
                "verbose_name_plural": "users",
                "abstract": False,
            },
            managers=[
                ("objects", django.contrib.auth.models.UserManager()),
            ],
        ),
        migrations.CreateModel(
            name="FinancialReport",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("hospital_id", models.CharField(db_index=True, max_length=64)),
                ("report_type", models.CharField(choices=[("monthly", "monthly"), ("quarterly", "quarterly"), ("annual", "annual")], max_length=10)),
                ("year", models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(2020), django.core.validators.MaxValueValidator(2030)])),
                ("month", models.PositiveSmallIntegerField(blank=True, null=True, validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(12)])),
                ("quarter", models.PositiveSmallIntegerField(blank=True, null=True, validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(4)])),
                ("period", models.CharField(max_length=64)),
                ("period_key", models.CharField(editable=False, max_length=32)),
                ("revenue_patient_care", models.DecimalField(decimal_places=2, default=0, max_digits=18, validators=[django.core.validators.MinValueValidator(0)])),
                ("revenue_emergency_services", models.DecimalField(decimal_places=2, default=0, max_digits=18, validators=[django.core.validators.MinValueValidator(0)])),
                ("revenue_surgery", models.DecimalField(decimal_places=2, default=0, max_digits=18, validators=[django.core.validators.MinValueValidator(0)])),
                ("revenue_laboratory", models.DecimalField(decimal_places=2, default=0, max_digits=18, validators=[django.core.validators.MinValueValidator(0)])),
                ("revenue_pharmacy", models.DecimalField(decimal_places=2, default=0, max_digits=18, validators=[django.core.validators.MinValueValidator(0)])),
                ("revenue_other", models.DecimalField(decimal_places=2, default=0, max_digits=18, validators=[django.core.validators.MinValueValidator(0)])),
                ("expense_salaries", models.DecimalField(decimal_places=2, default=0, max_digits=18, validators=[django.core.validators.MinValueValidator(0)])),
                ("expense_medical_supplies", models.DecimalField(decimal_places=2, default=0, max_digits=18, validators=[django.core.validators.MinValueValidator(0)])),
                ("expense_equipment", models.DecimalField(decimal_places=2, default=0, max_digits=18, validators=[django.core.validators.MinValueValidator(0)])),
                ("expense_utilities", models.DecimalField(decimal_places=2, default=0, max_digits=18, validators=[django.core.validators.MinValueValidator(0)])),
                ("expense_maintenance", models.DecimalField(decimal_places=2, default=0, max_digits=18, validators=[django.core.validators.MinValueValidator(0)])),
                ("expense_insurance", models.DecimalField(decimal_places=2, default=0, max_digits=18, validators=[django.core.validators.MinValueValidator(0)])),
                ("expense_other", models.DecimalField(decimal_places=2, default=0, max_digits=18, validators=[django.core.validators.MinValueValidator(0)])),
                ("asset_cash", models.DecimalField(decimal_places=2, default=0, max_digits=18, validators=[django.core.validators.MinValueValidator(0)])),
                ("asset_accounts_receivable", models.DecimalField(decimal_places=2, default=0, max_digits=18, validators=[django.core.validators.MinValueValidator(0)])),
                ("asset_inventory", models.DecimalField(decimal_places=2, default=0, max_digits=18, validators=[django.core.validators.MinValueValidator(0)])),
                ("asset_current_other", models.DecimalField(decimal_places=2, default=0, max_digits=18, validators=[django.core.validators.MinValueValidator(0)])),
                ("asset_buildings", models.DecimalField(decimal_places=2, default=0, max_digits=18, validators=[django.core.validators.MinValueValidator(0)])),
                ("asset_equipment", models.DecimalField(decimal_places=2, default=0, max_digits=18, validators=[django.core.validators.MinValueValidator(0)])),
                ("asset_vehicles", models.DecimalField(decimal_places=2, default=0, max_digits=18, validators=[django.core.validators.MinValueValidator(0)])),
                ("asset_fixed_other", models.DecimalField(decimal_places=2, default=0, max_digits=18, validators=[django.core.validators.MinValueValidator(0)])),
                ("liability_accounts_payable", models.DecimalField(decimal_places=2, default=0, max_digits=18, validators=[django.core.validators.MinValueValidator(0)])),
                ("liability_short_term_debt", models.DecimalField(decimal_places=2, default=0, max_digits=18, validators=[django.core.validators.MinValueValidator(0)])),
                ("liability_accrued_expenses", models.DecimalField(decimal_places=2, default=0, max_digits=18, validators=[django.core.validators.MinValueValidator(0)])),
                ("liability_current_other", models.DecimalField(decimal_places=2, default=0, max_digits=18, validators=[django.core.validators.MinValueValidator(0)])),
                ("liability_long_term_debt", models.DecimalField(decimal_places=2, default=0, max_digits=18, validators=[django.core.validators.MinValueValidator(0)])),
                ("liability_long_term_other", models.DecimalField(decimal_places=2, default=0, max_digits=18, validators=[django.core.validators.MinValueValidator(0)])),
                ("equity_capital", models.DecimalField(decimal_places=2, default=0, max_digits=18, validators=[django.core.validators.MinValueValidator(0)])),
                ("equity_retained_earnings", models.DecimalField(decimal_places=2, default=0, max_digits=18, validators=[django.core.validators.MinValueValidator(0)])),
                ("equity_current_earnings", models.DecimalField(decimal_places=2, default=0, max_digits=18)),
                ("tax_rate", models.DecimalField(decimal_places=4, default=Decimal("0.25"), max_digits=5, validators=[django.core.validators.MinValueValidator(0), django.core.validators.MaxValueValidator(1)])),
                ("tax_deductions", models.DecimalField(decimal_places=2, default=0, max_digits=18, validators=[django.core.validators.MinValueValidator(0)])),
                ("tax_income", models.DecimalField(decimal_places=2, default=0, max_digits=18)),
                ("tax_amount", models.DecimalField(decimal_places=2, default=0, max_digits=18)),
                ("tax_net_taxable", models.DecimalField(decimal_places=2, default=0, max_digits=18)),
                ("status", models.CharField(choices=[("draft", "draft"), ("submitted", "submitted"), ("approved", "approved"), ("archived", "archived")], db_index=True, default="draft", max_length=10)),
                ("approved_at", models.DateTimeField(blank=True, null=True)),
                ("version", models.PositiveIntegerField(default=1)),
                ("notes", models.TextField(blank=True, max_length=1000)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("approved_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="approved_reports", to=settings.AUTH_USER_MODEL)),
                ("created_by", models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="created_reports", to=settings.AUTH_USER_MODEL)),
                ("previous_version", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="revisions", to="finance.financialreport")),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["hospital_id", "status", "created_at"], name="report_hosp_status_idx"),
                    models.Index(fields=["hospital_id", "report_type", "year"], name="report_hosp_type_year_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(condition=models.Q(models.Q(("status", "archived"), _negated=True), ("previous_version__isnull", True)), fields=("hospital_id", "period_key"), name="uniq_active_report_period"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ReviewSchedule",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("hospital_id", models.CharField(db_index=True, max_length=64)),
                ("scheduled_date", models.DateTimeField(db_index=True)),
                ("review_type", models.CharField(choices=[("monthly", "monthly"), ("quarterly", "quarterly"), ("annual", "annual"), ("audit", "audit"), ("special", "special")], max_length=10)),
                ("status", models.CharField(choices=[("pending", "pending"), ("in-progress", "in-progress"), ("completed", "completed"), ("overdue", "overdue"), ("cancelled", "cancelled")], db_index=True, default="pending", max_length=12)),
                ("priority", models.CharField(choices=[("low", "low"), ("medium", "medium"), ("high", "high"), ("urgent", "urgent")], default="medium", max_length=10)),
                ("notes", models.TextField(blank=True, max_length=1000)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("assigned_to", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="assigned_reviews", to=settings.AUTH_USER_MODEL)),
                ("completed_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="completed_reviews", to=settings.AUTH_USER_MODEL)),
                ("created_by", models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="created_reviews", to=settings.AUTH_USER_MODEL)),
                ("report", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="review_schedules", to="finance.financialreport")),
            ],
            options={
                "ordering": ["scheduled_date"],
                "indexes": [
                    models.Index(fields=["hospital_id", "status", "scheduled_date"], name="review_hosp_status_idx"),
                    models.Index(fields=["assigned_to", "scheduled_date"], name="review_assignee_date_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ReviewComment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("comment", models.TextField(max_length=500)),
                ("commented_at", models.DateTimeField(auto_now_add=True)),
                ("commented_by", models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL)),
                ("schedule", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="comments", to="finance.reviewschedule")),
            ],
            options={
                "ordering": ["commented_at", "id"],
            },
        ),
        migrations.CreateModel(
            name="ReviewReminder",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("reminder_type", models.CharField(choices=[("email", "email"), ("system", "system"), ("sms", "sms")], default="system", max_length=10)),
                ("sent_at", models.DateTimeField(auto_now_add=True)),
                ("schedule", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="reminders", to="finance.reviewschedule")),
                ("sent_to", models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["sent_at", "id"],
            },
        ),
        migrations.CreateModel(
            name="FinancialAnalysis",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("hospital_id", models.CharField(db_index=True, max_length=64)),
                ("analysis_type", models.CharField(choices=[("trend", "trend"), ("ratio", "ratio"), ("comparative", "comparative"), ("forecast", "forecast"), ("performance", "performance")], default="performance", max_length=12)),
                ("start_date", models.DateTimeField()),
                ("end_date", models.DateTimeField()),
                ("metrics", models.JSONField(blank=True, default=dict)),
                ("insights", models.JSONField(blank=True, default=list)),
                ("trends", models.JSONField(blank=True, default=list)),
                ("forecasts", models.JSONField(blank=True, default=list)),
                ("benchmarks", models.JSONField(blank=True, default=list)),
                ("status", models.CharField(choices=[("generating", "generating"), ("completed", "completed"), ("failed", "failed")], default="generating", max_length=12)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("error_message", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("generated_by", models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL)),
                ("reports", models.ManyToManyField(blank=True, related_name="analyses", to="finance.financialreport")),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["hospital_id", "created_at"], name="analysis_hosp_created_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ArchiveLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("hospital_id", models.CharField(db_index=True, max_length=64)),
                ("archive_type", models.CharField(choices=[("manual", "manual"), ("automatic", "automatic"), ("scheduled", "scheduled")], default="manual", max_length=10)),
                ("archived_reports", models.JSONField(blank=True, default=list)),
                ("total_reports_archived", models.PositiveIntegerField(default=0)),
                ("archive_reason", models.CharField(blank=True, max_length=500)),
                ("status", models.CharField(choices=[("pending", "pending"), ("in-progress", "in-progress"), ("completed", "completed"), ("failed", "failed")], default="pending", max_length=12)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("error_message", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("archived_by", models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["hospital_id", "created_at"], name="archive_hosp_created_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="HospitalSettings",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("hospital_id", models.CharField(max_length=64, unique=True)),
                ("hospital_name", models.CharField(default="Rumah Sakit Umum Daerah", max_length=255)),
                ("address", models.CharField(default="Jl. Kesehatan No. 123", max_length=500)),
                ("phone", models.CharField(default="+62-21-1234567", max_length=32)),
                ("email", models.EmailField(default="admin@hospital.com", max_length=254)),
                ("tax_id", models.CharField(default="01.234.567.8-901.000", max_length=32)),
                ("fiscal_year_start", models.PositiveSmallIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(12)])),
                ("currency", models.CharField(choices=[("IDR", "IDR"), ("USD", "USD"), ("EUR", "EUR")], default="IDR", max_length=3)),
                ("tax_settings", models.JSONField(default=finance.models.default_tax_settings)),
                ("reporting_settings", models.JSONField(default=finance.models.default_reporting_settings)),
                ("notification_settings", models.JSONField(default=finance.models.default_notification_settings)),
                ("security_settings", models.JSONField(default=finance.models.default_security_settings)),
                ("backup_settings", models.JSONField(default=finance.models.default_backup_settings)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("updated_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "verbose_name_plural": "hospital settings",
            },
        ),
        migrations.CreateModel(
            name="AuditEvent",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("action", models.CharField(max_length=64)),
                ("object_type", models.CharField(blank=True, max_length=64, null=True)),
                ("object_id", models.IntegerField(blank=True, null=True)),
                ("detail", models.JSONField(blank=True, default=dict)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("user", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "indexes": [
                    models.Index(fields=["action", "created_at"], name="audit_action_created_idx"),
                    models.Index(fields=["object_type", "object_id", "created_at"], name="audit_object_created_idx"),
                ],
            },
        ),
    ]
