"""Read-only views recomputed from the complaint list on every call."""

from .models import ComplaintCategory, ComplaintStatus


def _percent(part, total):
    return round(part / total * 100, 1) if total > 0 else 0.0


def local_complaints(complaints, state, city):
    return [c for c in complaints if c.state == state and c.city == city]


def my_complaints(complaints, user_id):
    return [c for c in complaints if c.user_id == user_id]


def status_counts(complaints):
    counts = {status.value: 0 for status in ComplaintStatus}
    for c in complaints:
        counts[c.status.value] += 1
    return {
        'total': len(complaints),
        'pending': counts['PENDING'],
        'in_progress': counts['IN_PROGRESS'],
        'resolved': counts['RESOLVED'],
        'rejected': counts['REJECTED'],
    }


def resolution_rate(complaints):
    resolved = sum(1 for c in complaints if c.status == ComplaintStatus.RESOLVED)
    return _percent(resolved, len(complaints))


def category_breakdown(complaints):
    total = len(complaints)
    breakdown = []
    for category in ComplaintCategory:
        count = sum(1 for c in complaints if c.category == category)
        breakdown.append({
            'category': category.value,
            'count': count,
            'percentage': _percent(count, total),
        })
    return breakdown


def filter_complaints(complaints, status='ALL', search=''):
    """Admin list filter: by status (or ALL) and a case-insensitive search term."""
    term = (search or '').strip().lower()
    result = []
    for c in complaints:
        if status != 'ALL' and c.status.value != status:
            continue
        if term and not (term in c.description.lower() or term in c.category.value.lower()
                         or term in c.id.lower()):
            continue
        result.append(c)
    return result

