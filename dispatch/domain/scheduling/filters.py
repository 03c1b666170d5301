"""Typed job filter resolved into SQLAlchemy criteria"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional

from sqlalchemy import or_

from ...models import Job, JobStatus, Technician


@dataclass(frozen=True)
class DateRange:
    """Inclusive calendar-date range; either bound may be open"""

    start: Optional[date] = None
    end: Optional[date] = None

    def date_criteria(self, column) -> list:
        criteria = []
        if self.start is not None:
            criteria.append(column >= self.start)
        if self.end is not None:
            criteria.append(column <= self.end)
        return criteria

    def datetime_criteria(self, column) -> list:
        """Criteria for a timestamp column, covering whole days at both ends"""
        criteria = []
        if self.start is not None:
            criteria.append(column >= datetime.combine(self.start, time.min))
        if self.end is not None:
            criteria.append(column < datetime.combine(self.end + timedelta(days=1), time.min))
        return criteria


@dataclass(frozen=True)
class JobFilter:
    """
    Job listing filter.

    Matching per field:
    - city, state, customer_name, customer_phone, customer_email: case-insensitive contains
    - zip_code: prefix
    - technician_id, time_slot_id, status: exact
    - scheduled: inclusive range on scheduled_date
    - created: inclusive day range on created_at
    - search: case-insensitive contains, OR across customer name/phone/email,
      service address, city and technician name
    """

    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    customer_email: Optional[str] = None
    technician_id: Optional[str] = None
    time_slot_id: Optional[str] = None
    status: Optional[JobStatus] = None
    scheduled: Optional[DateRange] = None
    created: Optional[DateRange] = None
    search: Optional[str] = None

    @property
    def needs_technician_join(self) -> bool:
        return bool(self.search)

    def criteria(self) -> list:
        criteria = []

        for column, value in (
            (Job.city, self.city),
            (Job.customer_name, self.customer_name),
            (Job.customer_phone, self.customer_phone),
            (Job.customer_email, self.customer_email),
        ):
            if value:
                criteria.append(column.ilike(f"%{value}%"))

        if self.state:
            pattern = f"%{self.state}%"
            criteria.append(or_(Job.state.ilike(pattern), Job.state_code.ilike(pattern)))
        if self.zip_code:
            criteria.append(Job.zip_code.like(f"{self.zip_code}%"))

        if self.technician_id:
            criteria.append(Job.technician_id == self.technician_id)
        if self.time_slot_id:
            criteria.append(Job.time_slot_id == self.time_slot_id)
        if self.status is not None:
            criteria.append(Job.status == self.status.value)

        if self.scheduled is not None:
            criteria.extend(self.scheduled.date_criteria(Job.scheduled_date))
        if self.created is not None:
            criteria.extend(self.created.datetime_criteria(Job.created_at))

        if self.search:
            pattern = f"%{self.search.strip()}%"
            criteria.append(
                or_(
                    Job.customer_name.ilike(pattern),
                    Job.customer_phone.ilike(pattern),
                    Job.customer_email.ilike(pattern),
                    Job.service_address.ilike(pattern),
                    Job.city.ilike(pattern),
                    Technician.name.ilike(pattern),
                )
            )

        return criteria
