"""
PATH: users/models/user.py

CUSTOMER ACCOUNT (CUSTOM USER MODEL)

Financial fields:
- loyalty_points: cached projection of the points ledger. Only the ledger
  service (loyalty.services.ledger) writes it, under a row lock, together
  with a LedgerEntry.
- membership_*: membership record (inactive | active | expired).
- referral_code / referred_by / referred_by_code: referral graph.
- payment_settings: per-customer payment options, merged through
  users.services.payment_settings (typed partial update).

Accounts are never deleted, only deactivated (is_active=False).
"""

from __future__ import annotations

import uuid

from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.core.exceptions import ValidationError
from django.db import models


# ---------------- USER MANAGER ----------------
class UserManager(BaseUserManager):
    def create_user(self, email=None, password=None, **extra_fields):
        """
        Rules:
        - email is the login identity and is required.
        - username is derived from the email local-part when missing (uniqueness ensured).
        """
        email = (email or extra_fields.pop("email", "") or "").strip()
        if not email:
            raise ValueError("Users must have an email address")

        email = self.normalize_email(email)

        username = (extra_fields.get("username") or "").strip()
        if not username:
            base = (email.split("@")[0] or "user").strip().lower()
            candidate = base
            i = 1
            while self.model.objects.filter(username__iexact=candidate).exists():
                i += 1
                candidate = f"{base}{i}"
            username = candidate

        extra_fields["username"] = username
        extra_fields.setdefault("is_active", True)

        user = self.model(email=email, **extra_fields)

        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()

        user.full_clean(exclude=["password"])
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        if not password:
            raise ValueError("Superuser must have a password")

        extra_fields.setdefault("role", User.ROLE_ADMIN)
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)

        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True")

        return self.create_user(email=email, password=password, **extra_fields)


# ---------------- USER MODEL ----------------
class User(AbstractBaseUser, PermissionsMixin):
    ROLE_ADMIN = "admin"
    ROLE_STAFF = "staff"
    ROLE_CUSTOMER = "customer"

    ROLE_CHOICES = [
        (ROLE_ADMIN, "Admin"),
        (ROLE_STAFF, "Staff"),
        (ROLE_CUSTOMER, "Customer"),
    ]

    MEMBERSHIP_INACTIVE = "inactive"
    MEMBERSHIP_ACTIVE = "active"
    MEMBERSHIP_EXPIRED = "expired"

    MEMBERSHIP_CHOICES = [
        (MEMBERSHIP_INACTIVE, "Inactive"),
        (MEMBERSHIP_ACTIVE, "Active"),
        (MEMBERSHIP_EXPIRED, "Expired"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    username = models.CharField(max_length=150, unique=True, null=True, blank=True)
    email = models.EmailField(unique=True)

    first_name = models.CharField(max_length=100, blank=True)
    last_name = models.CharField(max_length=100, blank=True)
    phone = models.CharField(max_length=20, blank=True, default="")

    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_CUSTOMER)

    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)

    # Loyalty (cached balance; ledger is the source of truth)
    loyalty_points = models.PositiveIntegerField(default=0)

    # Membership
    membership_status = models.CharField(
        max_length=20,
        choices=MEMBERSHIP_CHOICES,
        default=MEMBERSHIP_INACTIVE,
    )
    membership_activated_at = models.DateTimeField(null=True, blank=True)
    membership_expires_at = models.DateTimeField(null=True, blank=True)
    membership_discount_percent = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=0,
    )

    # Referral graph
    referral_code = models.CharField(max_length=16, unique=True, null=True, blank=True)
    referred_by = models.ForeignKey(
        "self",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="referred_accounts",
    )
    referred_by_code = models.CharField(max_length=16, blank=True, default="")

    # Per-customer payment options (see users.services.payment_settings)
    payment_settings = models.JSONField(default=dict, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    class Meta:
        ordering = ["-created_at"]

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip() or (self.username or self.email)

    def clean(self):
        if self.email:
            self.email = self.__class__.objects.normalize_email(self.email).strip()
        if self.username is not None:
            self.username = self.username.strip() or None
        if self.referred_by_id and self.referred_by_id == self.id:
            raise ValidationError({"referred_by": "An account cannot refer itself."})

    def __str__(self):
        return f"{self.email} ({self.role})"
