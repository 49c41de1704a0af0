"""CSV export of expense requests."""

from datetime import date
from typing import Iterable, Iterator
import csv

HEADER = [
    'ID',
    'Title',
    'Amount',
    'Team',
    'Requester',
    'Description',
    'Urgency',
    'Status',
    'Created At',
    'Updated At',
    'Paid At',
]


class Echo:
    """File-like object whose write() hands the row back to csv.writer's caller."""

    def write(self, value):
        return value


def _isoformat(value):
    return value.isoformat() if value else ''


def expense_row(expense) -> list:
    return [
        str(expense.id),
        expense.title,
        f"{expense.amount_cents / 100:.2f}",
        expense.team,
        expense.requester.name or expense.requester.email,
        expense.description,
        expense.get_urgency_display(),
        expense.status,
        _isoformat(expense.created_at),
        _isoformat(expense.updated_at),
        _isoformat(expense.paid_at),
    ]


def iter_expense_csv(expenses: Iterable) -> Iterator[str]:
    """Yield the header then one encoded CSV line per expense."""
    writer = csv.writer(Echo())
    yield writer.writerow(HEADER)
    for expense in expenses:
        yield writer.writerow(expense_row(expense))


def get_csv_filename(today: date) -> str:
    return f"expenses_{today.isoformat()}.csv"
