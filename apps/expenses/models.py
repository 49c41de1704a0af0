from django.db import models
from django.core.validators import MinValueValidator, MaxValueValidator
from django.utils import timezone
import uuid

from apps.accounts.models import Campus


class Team(models.TextChoices):
    PHOTOGRAPHY_AND_STORYTELLING = 'PHOTOGRAPHY_AND_STORYTELLING', 'Photography and Storytelling'
    FOLLOW_UP = 'FOLLOW_UP', 'Follow Up'
    CCW = 'CCW', 'CCW'
    AMBIENCE = 'AMBIENCE', 'Ambience'
    ADMINISTRATION = 'ADMINISTRATION', 'Administration'
    SOCIAL_MEDIA = 'SOCIAL_MEDIA', 'Social Media'
    VISION_AND_VOLUME = 'VISION_AND_VOLUME', 'Vision and Volume'
    CREATIVE = 'CREATIVE', 'Creative'
    CONNECTIONS_AND_COMMUNITY = 'CONNECTIONS_AND_COMMUNITY', 'Connections and Community'
    VIRTUAL_DESIGN = 'VIRTUAL_DESIGN', 'Virtual Design'
    CELEB_KIDS = 'CELEB_KIDS', 'Celeb Kids'
    PROTOCOL_AND_CHURCH_EXPERIENCE = 'PROTOCOL_AND_CHURCH_EXPERIENCE', 'Protocol and Church Experience'


class Account(models.TextChoices):
    """Bank account an expense is paid from or into."""

    CCI_DMV_CHECKINGS = 'CCI_DMV_CHECKINGS', 'CCI DMV Checkings'
    CCI_USA_CHECKINGS = 'CCI_USA_CHECKINGS', 'CCI USA Checkings'
    CCI_DALLAS_CHECKING = 'CCI_DALLAS_CHECKING', 'CCI Dallas Checking'
    CCI_BOSTON_CHECKINGS = 'CCI_BOSTON_CHECKINGS', 'CCI Boston Checkings'
    CCI_AUSTIN_CHECKINGS = 'CCI_AUSTIN_CHECKINGS', 'CCI Austin Checkings'
    CCI_DMV_SAVINGS = 'CCI_DMV_SAVINGS', 'CCI DMV Savings'
    CCI_DALLAS_SAVINGS = 'CCI_DALLAS_SAVINGS', 'CCI Dallas Savings'
    CCI_BOSTON_SAVINGS = 'CCI_BOSTON_SAVINGS', 'CCI Boston Savings'
    CCI_AUSTIN_SAVINGS = 'CCI_AUSTIN_SAVINGS', 'CCI Austin Savings'
    CCI_GLOBAL = 'CCI_GLOBAL', 'CCI Global'
    CCI_SEED_CHURCH_CHECKINGS = 'CCI_SEED_CHURCH_CHECKINGS', 'CCI Seed Church Checkings'
    CCI_SPECIAL_EVENT_CHECKINGS = 'CCI_SPECIAL_EVENT_CHECKINGS', 'CCI Special Event Checkings'


class ExpenseType(models.TextChoices):
    """Administrative classification set by admins after review."""

    DIRECT_PAYMENT = 'Direct Payment', 'Direct Payment'
    INTERNAL_TRANSFER = 'Internal Transfer', 'Internal Transfer'
    PAYMENT_REIMBURSEMENT = 'Payment Reimbursement', 'Payment Reimbursement'
    PAYMENT_REQUEST = 'Payment Request', 'Payment Request'
    OTHER = 'Other', 'Other'


class Urgency(models.IntegerChoices):
    NOT_URGENT = 1, 'Not Urgent (Few months)'
    URGENT = 2, 'Urgent (This Month)'
    VERY_URGENT = 3, 'Very Urgent (This week)'


class ExpenseCategory(models.TextChoices):
    ADMINISTRATIVE_EXPENSES = 'Administrative Expenses'
    ADVERTISEMENT_AND_PUBLICITY = 'Advertisement and Publicity'
    AMBIENCE = 'Ambience'
    BANK_CHARGES = 'Bank Charges'
    CCI_GLOBAL = 'CCI Global'
    CCW_MUSIC_EXPENSES = 'CCW/Music Expenses'
    CELEB_KIDS = 'Celeb Kids'
    BUILDING_PROJECT = 'Building Project'
    EQUIPMENT_PURCHASE = 'Equipment Purchase'
    EQUIPMENT_RENTAL = 'Equipment Rental'
    FINANCIAL_WELFARE = 'Financial Welfare/Assistance'
    FOOD = 'Food'
    FOLLOW_UP = 'Follow Up'
    GUEST_MINISTER_HONORARIUM = 'Guest Minister Honorarium'
    GUEST_MINISTER_HOTEL_ACCOMMODATION = 'Guest Minister Hotel/Accommodation'
    GUEST_MINISTER_TRAVEL_EXPENSE = 'Guest Minister Travel Expense'
    GUEST_MINISTER_WELFARE = 'Guest Minister Hospitality'
    HONORARIUM = 'Other Honorarium'
    HOSPITALITY = 'Hospitality'
    HOTEL_AND_ACCOMMODATION = 'Hotel and Accommodation'
    INTERNET_TELEPHONE = 'Internet/telephone'
    LOGISTICS = 'Logistics'
    MAP = 'MAP'
    MEDIA_AND_TECHNICAL = 'Media and Technical'
    OTHERS = 'Others'
    OUTREACH = 'Outreach'
    PASTORAL_TRAVEL_EXPENSE = 'Pastoral Travel/Expense'
    RENT = 'Rent'
    REPAIRS_AND_MAINTENANCE = 'Repairs and Maintenance'
    SALARIES_AND_ALLOWANCES = 'Salaries and Allowances'
    SECURITY_PROTOCOL = 'Protocol/Security'
    SOCIAL_MEDIA = 'Social Media'
    SPECIAL_EVENTS_AND_PROGRAMS = 'Special Events and Programs'
    SUBSCRIPTION = 'Subscription'
    TRAVEL_EXPENSES = 'Travel Expenses'
    WELFARE = 'General Welfare'


class ExpenseStatus(models.TextChoices):
    SUBMITTED = 'SUBMITTED', 'Submitted'
    PARTIALLY_APPROVED = 'PARTIALLY_APPROVED', 'Partially Approved'
    APPROVED = 'APPROVED', 'Approved'
    DENIED = 'DENIED', 'Denied'
    CHANGE_REQUESTED = 'CHANGE_REQUESTED', 'Change Requested'
    PAID = 'PAID', 'Paid'
    EXPENSE_REPORT_REQUESTED = 'EXPENSE_REPORT_REQUESTED', 'Expense Report Requested'
    CLOSED = 'CLOSED', 'Closed'


class ApprovalStatus(models.TextChoices):
    """Decision recorded by a single approver on an expense, item or report."""

    APPROVED = 'APPROVED', 'Approved'
    DENIED = 'DENIED', 'Denied'
    CHANGE_REQUESTED = 'CHANGE_REQUESTED', 'Change Requested'


class ExpenseRequest(models.Model):
    """Reimbursement request submitted by a team leader."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    requester = models.ForeignKey(
        'accounts.User',
        on_delete=models.PROTECT,
        related_name='expense_requests'
    )

    title = models.CharField(max_length=200)
    amount_cents = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    team = models.CharField(max_length=40, choices=Team.choices)
    campus = models.CharField(max_length=40, choices=Campus.choices)
    description = models.TextField()
    notes = models.TextField(blank=True, null=True)
    category = models.CharField(max_length=60, choices=ExpenseCategory.choices)
    urgency = models.PositiveSmallIntegerField(
        choices=Urgency.choices,
        default=Urgency.URGENT,
        validators=[MinValueValidator(1), MaxValueValidator(3)]
    )

    # Special events
    event_date = models.DateField(null=True, blank=True)
    event_name = models.CharField(max_length=200, blank=True, null=True)
    full_event_budget_cents = models.PositiveIntegerField(null=True, blank=True)

    # Payee when paying someone other than the requester
    pay_to_external = models.BooleanField(default=False)
    payee_name = models.CharField(max_length=200, blank=True, null=True)
    payee_zelle = models.CharField(max_length=255, blank=True, null=True)

    status = models.CharField(
        max_length=30,
        choices=ExpenseStatus.choices,
        default=ExpenseStatus.SUBMITTED
    )

    # Admin tagging
    account = models.CharField(max_length=40, choices=Account.choices, blank=True, null=True)
    expense_type = models.CharField(max_length=100, choices=ExpenseType.choices, blank=True, null=True)
    destination_account = models.CharField(max_length=40, choices=Account.choices, blank=True, null=True)

    # Payment
    paid_at = models.DateTimeField(null=True, blank=True)
    payment_date = models.DateTimeField(null=True, blank=True)
    paid_amount_cents = models.PositiveIntegerField(null=True, blank=True)
    paid_by = models.CharField(max_length=200, blank=True, null=True)
    report_required = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'expense_requests'
        constraints = [
            models.CheckConstraint(
                check=models.Q(amount_cents__gt=0),
                name='expense_amount_positive'
            ),
        ]
        indexes = [
            models.Index(fields=['status', 'created_at']),
            models.Index(fields=['requester', 'created_at']),
            models.Index(fields=['campus', 'status']),
            models.Index(fields=['team']),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.title} ({self.amount_cents / 100:.2f}) - {self.status}"

    @property
    def is_paid(self):
        return self.paid_at is not None


class ExpenseItem(models.Model):
    """Line item of an expense request, approved individually."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    expense = models.ForeignKey(
        ExpenseRequest,
        on_delete=models.CASCADE,
        related_name='items'
    )
    description = models.CharField(max_length=500)
    category = models.CharField(max_length=60, choices=ExpenseCategory.choices, blank=True, null=True)
    quantity = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    unit_price_cents = models.PositiveIntegerField()
    amount_cents = models.PositiveIntegerField()

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'expense_items'
        ordering = ['created_at']

    def __str__(self):
        return f"{self.description} x{self.quantity}"


class ExpenseItemApproval(models.Model):
    """One approver's live decision on one item."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    item = models.ForeignKey(
        ExpenseItem,
        on_delete=models.CASCADE,
        related_name='approvals'
    )
    approver = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='item_approvals'
    )
    status = models.CharField(max_length=20, choices=ApprovalStatus.choices)
    comment = models.TextField(blank=True, null=True)
    approved_amount_cents = models.PositiveIntegerField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'expense_item_approvals'
        unique_together = [['item', 'approver']]
        ordering = ['-updated_at']

    def __str__(self):
        return f"{self.approver} {self.status} {self.item}"


class Approval(models.Model):
    """One approver's decision on a whole expense request."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    expense = models.ForeignKey(
        ExpenseRequest,
        on_delete=models.CASCADE,
        related_name='approvals'
    )
    approver = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='expense_approvals'
    )
    stage = models.PositiveSmallIntegerField(
        default=1,
        validators=[MinValueValidator(1), MaxValueValidator(2)]
    )
    status = models.CharField(max_length=20, choices=ApprovalStatus.choices)
    comment = models.TextField(blank=True, null=True)
    decided_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'approvals'
        unique_together = [['expense', 'approver']]
        ordering = ['stage', 'decided_at']

    def __str__(self):
        return f"Stage {self.stage}: {self.approver} {self.status}"


class StatusEvent(models.Model):
    """
    Audit record of a single status transition.

    Rows are append-only: saving an existing event or deleting one raises.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    expense = models.ForeignKey(
        ExpenseRequest,
        on_delete=models.CASCADE,
        related_name='status_events'
    )
    from_status = models.CharField(max_length=30, choices=ExpenseStatus.choices, blank=True, null=True)
    to_status = models.CharField(max_length=30, choices=ExpenseStatus.choices)
    actor = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        related_name='status_events'
    )
    reason = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'status_events'
        ordering = ['created_at']
        indexes = [
            models.Index(fields=['expense', 'created_at']),
        ]

    def __str__(self):
        return f"{self.from_status or '-'} -> {self.to_status}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("Status events are append-only and cannot be modified")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError("Status events are append-only and cannot be deleted")


class ExpenseNote(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    expense = models.ForeignKey(
        ExpenseRequest,
        on_delete=models.CASCADE,
        related_name='expense_notes'
    )
    author = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='expense_notes'
    )
    note = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'expense_notes'
        ordering = ['created_at']

    def __str__(self):
        return f"Note by {self.author} on {self.expense_id}"


class Attachment(models.Model):
    """Uploaded receipt or quote; the file itself lives with the upload provider."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    expense = models.ForeignKey(
        ExpenseRequest,
        on_delete=models.CASCADE,
        related_name='attachments'
    )
    item = models.ForeignKey(
        ExpenseItem,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='attachments'
    )
    public_id = models.CharField(max_length=255)
    secure_url = models.URLField(max_length=500)
    mime_type = models.CharField(max_length=100)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'attachments'
        ordering = ['created_at']

    def __str__(self):
        return self.public_id


class PastorRemark(models.Model):
    """Campus pastor's remark on a submitted expense; one per pastor."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    expense = models.ForeignKey(
        ExpenseRequest,
        on_delete=models.CASCADE,
        related_name='pastor_remarks'
    )
    pastor = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='pastor_remarks'
    )
    remark = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'pastor_remarks'
        unique_together = [['expense', 'pastor']]

    def __str__(self):
        return f"Remark by {self.pastor} on {self.expense_id}"
