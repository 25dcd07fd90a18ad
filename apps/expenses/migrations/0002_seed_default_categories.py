# Generated manually to seed the default expense categories
from django.db import migrations


CATEGORIES = [
    ('Utilities', 'Electricity, water, internet'),
    ('Rent', 'Shop and storage rent'),
    ('Supplies', 'Stock and consumables'),
    ('Marketing', 'Advertising and promotion'),
    ('Transportation', 'Fuel, delivery and travel'),
    ('Professional Services', 'Accounting, legal and consulting'),
    ('Insurance', 'Business insurance premiums'),
    ('Maintenance', 'Repairs and upkeep'),
    ('Other', 'Anything else'),
]


def seed_categories(apps, schema_editor):
    """Create the default categories if they don't exist yet."""
    ExpenseCategory = apps.get_model('expenses', 'ExpenseCategory')
    for name, description in CATEGORIES:
        ExpenseCategory.objects.get_or_create(name=name, defaults={'description': description})


def remove_categories(apps, schema_editor):
    """Drop default categories that no expense uses."""
    ExpenseCategory = apps.get_model('expenses', 'ExpenseCategory')
    ExpenseCategory.objects.filter(
        name__in=[name for name, _ in CATEGORIES],
        expenses__isnull=True,
    ).delete()


class Migration(migrations.Migration):

    dependencies = [
        ('expenses', '0001_initial'),
    ]

    operations = [
        migrations.RunPython(seed_categories, remove_categories),
    ]
