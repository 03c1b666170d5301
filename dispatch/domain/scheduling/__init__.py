"""
Scheduling Domain

Availability checks, job booking, auto-completion and job queries/stats.

Structure:
- time windows live in shared/time_window.py
- errors.py               # ErrorKind, SchedulingError, Result
- filters.py              # Typed job listing filter
- repository.py           # Technician and job queries
- availability_service.py # Working hours and double-booking checks
- scheduler_service.py    # Job creation and updates
- completion.py           # Elapsed-slot predicate, sweep and lazy completion
- query_service.py        # Listing, pagination and statistics
- schemas.py / router.py  # HTTP surface under /api/v1/jobs
"""
