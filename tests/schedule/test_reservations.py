"""
Tests del ciclo de vida de las reservas: alta con control de aforo y
duplicados, check-in, cancelación y consultas.
"""
from datetime import date

import pytest

from app.core.exceptions import (
    CapacityExceededError,
    DuplicateReservationError,
    InvalidStatusTransitionError,
    NotFoundError,
    OccurrenceNotFoundError,
    ScheduleValidationError,
)
from app.models.reservation import ClassReservation, ReservationStatus
from app.services.reservation import reservation_service

MONDAY = date(2025, 6, 9)


def _reserve(db, member, template, day=MONDAY):
    return reservation_service.create_reservation(
        db, member_id=member.id, class_id=template.id, reservation_date=day
    )


class TestCreateReservation:
    def test_create(self, db, make_template, members):
        template = make_template(max_capacity=10)
        reservation = _reserve(db, members[0], template)

        assert reservation.id is not None
        assert reservation.status == ReservationStatus.RESERVED
        assert reservation.reservation_date == MONDAY
        assert reservation.created_at is not None
        assert reservation_service.count_active(db, class_id=template.id, reservation_date=MONDAY) == 1

    def test_unlimited_capacity(self, db, make_template, members):
        template = make_template(max_capacity=None)
        for member in members:
            _reserve(db, member, template)
        assert reservation_service.count_active(db, class_id=template.id, reservation_date=MONDAY) == 3

    def test_duplicate(self, db, make_template, members):
        template = make_template()
        _reserve(db, members[0], template)
        with pytest.raises(DuplicateReservationError):
            _reserve(db, members[0], template)
        assert db.query(ClassReservation).count() == 1

    def test_same_member_other_date(self, db, make_template, members):
        template = make_template()
        _reserve(db, members[0], template, date(2025, 6, 2))
        _reserve(db, members[0], template, date(2025, 6, 9))
        assert db.query(ClassReservation).count() == 2

    def test_rebook_after_cancel(self, db, make_template, members):
        template = make_template()
        first = _reserve(db, members[0], template)
        reservation_service.cancel_reservation(db, first.id)

        second = _reserve(db, members[0], template)
        assert second.id != first.id
        assert second.status == ReservationStatus.RESERVED

    def test_capacity_exceeded(self, db, make_template, members):
        template = make_template(max_capacity=2)
        _reserve(db, members[0], template)
        _reserve(db, members[1], template)
        with pytest.raises(CapacityExceededError):
            _reserve(db, members[2], template)
        assert reservation_service.count_active(db, class_id=template.id, reservation_date=MONDAY) == 2

    def test_capacity_is_per_occurrence(self, db, make_template, members):
        template = make_template(max_capacity=1)
        _reserve(db, members[0], template, date(2025, 6, 2))
        _reserve(db, members[1], template, date(2025, 6, 9))

    def test_cancel_frees_spot(self, db, make_template, members):
        template = make_template(max_capacity=1)
        first = _reserve(db, members[0], template)
        reservation_service.cancel_reservation(db, first.id)
        _reserve(db, members[1], template)

    def test_checked_in_still_counts(self, db, make_template, members):
        template = make_template(max_capacity=1)
        first = _reserve(db, members[0], template)
        reservation_service.check_in(db, first.id)
        with pytest.raises(CapacityExceededError):
            _reserve(db, members[1], template)

    def test_duplicate_wins_over_full(self, db, make_template, members):
        template = make_template(max_capacity=1)
        _reserve(db, members[0], template)
        with pytest.raises(DuplicateReservationError):
            _reserve(db, members[0], template)

    @pytest.mark.parametrize("day", [
        date(2025, 6, 10),  # martes
        date(2025, 5, 26),  # antes de start_date
        date(2025, 6, 23),  # después de recurrence_end_date
    ])
    def test_no_occurrence(self, db, make_template, members, day):
        template = make_template()
        with pytest.raises(OccurrenceNotFoundError):
            _reserve(db, members[0], template, day)

    def test_inactive_template_has_no_occurrences(self, db, make_template, members):
        template = make_template(is_active=False)
        with pytest.raises(OccurrenceNotFoundError):
            _reserve(db, members[0], template)

    def test_recurring_without_end_date(self, db, make_template, members):
        template = make_template(recurrence_end_date=None)
        with pytest.raises(OccurrenceNotFoundError):
            _reserve(db, members[0], template, date(2025, 6, 2))

    def test_unknown_class(self, db, members):
        with pytest.raises(NotFoundError) as exc_info:
            reservation_service.create_reservation(
                db, member_id=members[0].id, class_id=999, reservation_date=MONDAY
            )
        assert not isinstance(exc_info.value, OccurrenceNotFoundError)

    def test_unknown_member(self, db, make_template):
        template = make_template()
        with pytest.raises(NotFoundError):
            reservation_service.create_reservation(
                db, member_id=999, class_id=template.id, reservation_date=MONDAY
            )

    def test_inactive_member(self, db, make_template, members):
        template = make_template()
        members[0].is_active = False
        db.commit()
        with pytest.raises(ScheduleValidationError):
            _reserve(db, members[0], template)


class TestStatusTransitions:
    def test_cancel(self, db, make_template, members):
        reservation = _reserve(db, members[0], make_template())
        cancelled = reservation_service.cancel_reservation(db, reservation.id)
        assert cancelled.status == ReservationStatus.CANCELLED
        assert cancelled.cancelled_at is not None
        assert cancelled.checked_in_at is None

    def test_cancel_is_idempotent(self, db, make_template, members):
        reservation = _reserve(db, members[0], make_template())
        first = reservation_service.cancel_reservation(db, reservation.id)
        stamp = first.cancelled_at
        again = reservation_service.cancel_reservation(db, reservation.id)
        assert again.status == ReservationStatus.CANCELLED
        assert again.cancelled_at == stamp

    def test_check_in(self, db, make_template, members):
        reservation = _reserve(db, members[0], make_template())
        checked = reservation_service.check_in(db, reservation.id)
        assert checked.status == ReservationStatus.CHECKED_IN
        assert checked.checked_in_at is not None

    def test_check_in_is_idempotent(self, db, make_template, members):
        reservation = _reserve(db, members[0], make_template())
        reservation_service.check_in(db, reservation.id)
        again = reservation_service.check_in(db, reservation.id)
        assert again.status == ReservationStatus.CHECKED_IN

    def test_cannot_cancel_after_check_in(self, db, make_template, members):
        reservation = _reserve(db, members[0], make_template())
        reservation_service.check_in(db, reservation.id)
        with pytest.raises(InvalidStatusTransitionError):
            reservation_service.cancel_reservation(db, reservation.id)

    def test_cannot_check_in_after_cancel(self, db, make_template, members):
        reservation = _reserve(db, members[0], make_template())
        reservation_service.cancel_reservation(db, reservation.id)
        with pytest.raises(InvalidStatusTransitionError):
            reservation_service.check_in(db, reservation.id)

    def test_unknown_reservation(self, db):
        with pytest.raises(NotFoundError):
            reservation_service.cancel_reservation(db, 999)
        with pytest.raises(NotFoundError):
            reservation_service.check_in(db, 999)


class TestReservationQueries:
    def test_occurrence_reservations(self, db, make_template, members):
        template = make_template(max_capacity=5)
        first = _reserve(db, members[0], template)
        second = _reserve(db, members[1], template)
        cancelled = _reserve(db, members[2], template)
        reservation_service.cancel_reservation(db, cancelled.id)
        reservation_service.check_in(db, second.id)

        result = reservation_service.get_occurrence_reservations(
            db, class_id=template.id, reservation_date=MONDAY
        )
        assert result.active_count == 2
        assert result.spots_left == 3
        assert result.max_capacity == 5
        assert [r.id for r in result.reservations] == [first.id, second.id]
        assert [r.member_name for r in result.reservations] == ["Anna Claes", "Bram Wouters"]

    def test_occurrence_reservations_without_limit(self, db, make_template):
        template = make_template()
        result = reservation_service.get_occurrence_reservations(
            db, class_id=template.id, reservation_date=MONDAY
        )
        assert result.active_count == 0
        assert result.spots_left is None
        assert result.reservations == []

    def test_occurrence_reservations_unknown_class(self, db):
        with pytest.raises(NotFoundError):
            reservation_service.get_occurrence_reservations(db, class_id=999, reservation_date=MONDAY)

    def test_member_reservations(self, db, make_template, members):
        template = make_template()
        kept = _reserve(db, members[0], template, date(2025, 6, 2))
        dropped = _reserve(db, members[0], template, date(2025, 6, 9))
        reservation_service.cancel_reservation(db, dropped.id)
        _reserve(db, members[1], template, date(2025, 6, 2))

        all_rows = reservation_service.get_member_reservations(db, member_id=members[0].id)
        assert [r.id for r in all_rows] == [kept.id, dropped.id]

        active = reservation_service.get_member_reservations(
            db, member_id=members[0].id, include_cancelled=False
        )
        assert [r.id for r in active] == [kept.id]

        on_day = reservation_service.get_member_reservations(
            db, member_id=members[0].id, on_date=date(2025, 6, 9)
        )
        assert [r.id for r in on_day] == [dropped.id]

    def test_member_reservations_unknown_member(self, db):
        with pytest.raises(NotFoundError):
            reservation_service.get_member_reservations(db, member_id=999)
