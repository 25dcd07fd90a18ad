from decimal import Decimal
import uuid

from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.db import models


class PartnerManager(BaseUserManager):
    """Manager for email-based partner accounts."""

    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError('Email is required')

        email = self.normalize_email(email)
        partner = self.model(email=email, **extra_fields)
        partner.set_password(password)
        partner.save(using=self._db)
        return partner

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)

        if extra_fields.get('is_staff') is not True:
            raise ValueError('Superuser must have is_staff=True')
        if extra_fields.get('is_superuser') is not True:
            raise ValueError('Superuser must have is_superuser=True')

        return self.create_user(email, password, **extra_fields)


class Partner(AbstractBaseUser, PermissionsMixin):
    """
    A business partner.

    ``balance`` is the partner's running position in the business:
    sales attributed to them plus approved business transfers received,
    minus approved business transfers sent. Only the ledger services
    write it.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(unique=True, max_length=255, db_index=True)
    full_name = models.CharField(max_length=150, blank=True)

    balance = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal('0.00'),
    )

    # Permissions
    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = PartnerManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = []

    class Meta:
        db_table = 'partners'
        ordering = ['full_name', 'email']
        indexes = [
            models.Index(fields=['email'], name='partners_email_idx'),
            models.Index(fields=['created_at'], name='partners_created_idx'),
        ]

    def __str__(self):
        return self.full_name or self.email

    def get_display_name(self):
        """Return full name or email prefix."""
        return self.full_name or self.email.split('@')[0]
