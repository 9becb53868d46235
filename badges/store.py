"""
sqlite-backed guest and event lookup.

The app is handed a ``GuestStore`` when it is created; nothing in ``badges``
opens a database on its own.
"""
import logging
import sqlite3
import uuid
from datetime import datetime

from badges.models import GuestIdentity, make_badge_id

logger = logging.getLogger(__name__)


class GuestStore:
    def __init__(self, db_path):
        self.db_path = db_path

    def get_db(self):
        con = sqlite3.connect(self.db_path)
        con.row_factory = sqlite3.Row
        return con

    def query_db(self, query, args=(), one=False):
        con = self.get_db()
        try:
            cur = con.execute(query, args)
            rv = cur.fetchall()
            con.commit()
        finally:
            con.close()
        return (rv[0] if rv else None) if one else rv

    def add_event(self, name, event_id=None, location=None, start_date=None, end_date=None):
        event_id = event_id or str(uuid.uuid4())
        self.query_db(
            "INSERT INTO event (id,name,location,start_date,end_date) VALUES (?,?,?,?,?)",
            [event_id, name, location, start_date, end_date],
        )
        return event_id

    def event_name(self, event_id):
        row = self.query_db("SELECT name FROM event WHERE id=?", [event_id], one=True)
        return row["name"] if row else ""

    def add_guest(self, event_id, first_name, last_name, email, phone=None, company=None,
                  job_title=None, registration_type="self", guest_id=None, badge_id=None):
        guest_id = guest_id or str(uuid.uuid4())
        badge_id = badge_id or make_badge_id(event_id)
        self.query_db(
            "INSERT INTO guest (id,event_id,first_name,last_name,email,phone,company,job_title,"
            "registration_type,badge_id) VALUES (?,?,?,?,?,?,?,?,?,?)",
            [guest_id, event_id, first_name, last_name, email, phone, company, job_title,
             registration_type, badge_id],
        )
        logger.info("Registered guest %s with badge %s", guest_id, badge_id)
        return self.get_guest(guest_id)

    def _identity(self, row):
        if row is None:
            return None
        return GuestIdentity.from_row(row, self.event_name(row["event_id"]))

    def get_guest(self, guest_id):
        row = self.query_db("SELECT * FROM guest WHERE id=?", [guest_id], one=True)
        return self._identity(row)

    def get_guest_by_badge(self, event_id, badge_id):
        row = self.query_db(
            "SELECT * FROM guest WHERE event_id=? AND badge_id=?", [event_id, badge_id], one=True
        )
        return self._identity(row)

    def list_guests(self, event_id, guest_ids=None):
        rows = self.query_db(
            "SELECT * FROM guest WHERE event_id=? ORDER BY last_name, first_name", [event_id]
        )
        if guest_ids is not None:
            wanted = set(guest_ids)
            rows = [row for row in rows if row["id"] in wanted]
        name = self.event_name(event_id)
        return [GuestIdentity.from_row(row, name) for row in rows]

    def mark_badge_printed(self, guest_ids):
        for guest_id in guest_ids:
            self.query_db("UPDATE guest SET badge_printed=1 WHERE id=?", [guest_id])

    def badge_printed(self, guest_id):
        row = self.query_db("SELECT badge_printed FROM guest WHERE id=?", [guest_id], one=True)
        return bool(row and row["badge_printed"])

    def check_in(self, guest_id, now=None):
        """Record the guest's arrival.

        Returns ``(check_in_time, already_checked_in)``. A guest who is
        already checked in keeps the first time. Unknown ids raise ``KeyError``.
        """
        row = self.query_db("SELECT check_in_time FROM guest WHERE id=?", [guest_id], one=True)
        if row is None:
            raise KeyError(guest_id)
        if row["check_in_time"]:
            return row["check_in_time"], True

        checked_in_at = (now or datetime.now()).isoformat(timespec="seconds")
        self.query_db(
            "UPDATE guest SET check_in_time=? WHERE id=? AND check_in_time IS NULL",
            [checked_in_at, guest_id],
        )
        logger.info("Checked in guest %s", guest_id)
        return checked_in_at, False

    def check_in_time(self, guest_id):
        row = self.query_db("SELECT check_in_time FROM guest WHERE id=?", [guest_id], one=True)
        return row["check_in_time"] if row else None
