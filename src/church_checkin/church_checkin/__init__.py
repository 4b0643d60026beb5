"""Church check-in package.

Feature modules (people, attendance, ministries) expose the backend services
behind a thin Flask JSON API; the ``checkin`` module is the operator-side
workflow that resolves a typed name and records today's attendance.
"""
