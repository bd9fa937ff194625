from __future__ import annotations

import pytest

from clinicrecon.domain.model import TransactionRecord
from clinicrecon.domain.reconciliation import (
    AmbiguousCanonicalMappingError,
    LinkOutcome,
    LinkStatus,
    apply_link_outcomes,
    build_label_index,
    link_records,
)
from tests.helpers.catalog import make_entry, make_record


def test_end_to_end_scenario() -> None:
    catalog = [make_entry(10, "Massage 60min")]
    records = [
        make_record(100, "massage   60min"),
        make_record(101, "Massage 60min", 10),
        make_record(102, "Yoga"),
    ]

    report = link_records(catalog, records)

    assert [(o.record_id, o.status, o.entry_id) for o in report.outcomes] == [
        (100, LinkStatus.LINKED, 10),
        (101, LinkStatus.ALREADY_LINKED, 10),
        (102, LinkStatus.UNMATCHED, None),
    ]
    assert report.assignments == {100: 10}
    assert report.counts == {
        LinkStatus.LINKED: 1,
        LinkStatus.ALREADY_LINKED: 1,
        LinkStatus.UNMATCHED: 1,
        LinkStatus.INVALID: 0,
    }


def test_linking_is_idempotent_once_applied() -> None:
    catalog = [make_entry(10, "Massage 60min"), make_entry(11, "Sauna")]
    records = [
        make_record(1, "massage 60MIN"),
        make_record(2, "SAUNA", 10),
        make_record(3, "sauna", 11),
        make_record(4, "Float tank"),
    ]

    first = link_records(catalog, records)
    updated = apply_link_outcomes(records, first.outcomes)
    second = link_records(catalog, updated)

    assert first.assignments == {1: 10, 2: 11}
    assert second.assignments == {}
    for before, after in zip(first.outcomes, second.outcomes, strict=True):
        if before.status is LinkStatus.LINKED:
            assert after.status is LinkStatus.ALREADY_LINKED
            assert after.entry_id == before.entry_id
        else:
            assert after.status is before.status
    assert link_records(catalog, updated) == second


def test_relink_reports_previous_entry() -> None:
    report = link_records([make_entry(10, "Massage")], [make_record(5, "massage", 99)])

    assert report.outcomes == (
        LinkOutcome(
            record_id=5,
            status=LinkStatus.LINKED,
            entry_id=10,
            previous_entry_id=99,
            reason="relinked",
        ),
    )


@pytest.mark.parametrize("title", [None, "", "   "])
def test_blank_titles_are_unmatched(title: str | None) -> None:
    report = link_records([make_entry(10, "Massage")], [make_record(1, title)])

    (outcome,) = report.outcomes
    assert outcome.status is LinkStatus.UNMATCHED
    assert outcome.reason == "blank_title"


def test_unmatched_record_keeps_its_previous_link_in_report() -> None:
    report = link_records([make_entry(10, "Massage")], [make_record(1, "Yoga", 10)])

    (outcome,) = report.outcomes
    assert outcome.status is LinkStatus.UNMATCHED
    assert outcome.previous_entry_id == 10
    assert report.assignments == {}


def test_redirects_move_unmatched_records_off_superseded_entries() -> None:
    canonical = [make_entry(2, "Sauna")]
    records = [make_record(1, "Legacy sauna booking", 3), make_record(4, "Yoga", 2)]

    report = link_records(canonical, records, redirects={3: 2, 2: 2})

    assert report.outcomes[0] == LinkOutcome(
        record_id=1,
        status=LinkStatus.LINKED,
        entry_id=2,
        previous_entry_id=3,
        reason="superseded",
    )
    assert report.outcomes[1].status is LinkStatus.UNMATCHED


def test_invalid_records_are_reported_and_do_not_abort() -> None:
    catalog = [make_entry(10, "Massage")]
    records = [
        TransactionRecord(id="abc", title="Massage"),  # type: ignore[arg-type]
        TransactionRecord(id=-1, title="Massage"),
        TransactionRecord(id=2, title=42),  # type: ignore[arg-type]
        TransactionRecord(id=3, title="Massage", linked_entry_id=True),  # type: ignore[arg-type]
        make_record(4, "Massage"),
    ]

    report = link_records(catalog, records)

    assert [o.status for o in report.outcomes] == [
        LinkStatus.INVALID,
        LinkStatus.INVALID,
        LinkStatus.INVALID,
        LinkStatus.INVALID,
        LinkStatus.LINKED,
    ]
    assert [o.reason for o in report.outcomes[:4]] == [
        "malformed_id",
        "malformed_id",
        "malformed_title",
        "malformed_linked_entry_id",
    ]
    assert report.assignments == {4: 10}


def test_ambiguous_canonical_entries_fail_loudly() -> None:
    catalog = [make_entry(1, "Massage"), make_entry(2, " massage ")]

    with pytest.raises(AmbiguousCanonicalMappingError) as exc:
        link_records(catalog, [make_record(1, "Massage")])

    assert exc.value.key == "massage"
    assert exc.value.entry_ids == (1, 2)


def test_ambiguity_is_detected_even_without_records() -> None:
    with pytest.raises(AmbiguousCanonicalMappingError):
        link_records([make_entry(1, "A"), make_entry(2, "a")], [])


def test_empty_inputs_produce_empty_report() -> None:
    report = link_records([], [])

    assert report.outcomes == ()
    assert report.assignments == {}
    assert set(report.counts.values()) == {0}


def test_label_index_skips_blank_labels() -> None:
    index = build_label_index([make_entry(1, " "), make_entry(2, "Sauna")])

    assert index == {(2, "sauna"): 2}


def test_records_only_match_entries_of_their_own_scope() -> None:
    catalog = [make_entry(1, "Massage", scope_id=2), make_entry(2, "Massage", scope_id=3)]
    records = [
        make_record(10, "massage", scope_id=2),
        make_record(11, "massage", 1, scope_id=3),
        make_record(12, "massage", scope_id=4),
    ]

    report = link_records(catalog, records)

    assert [(o.record_id, o.status, o.entry_id, o.reason) for o in report.outcomes] == [
        (10, LinkStatus.LINKED, 1, "unlinked"),
        (11, LinkStatus.LINKED, 2, "relinked"),
        (12, LinkStatus.UNMATCHED, None, "no_matching_label"),
    ]


def test_same_label_in_two_scopes_is_not_ambiguous() -> None:
    index = build_label_index(
        [make_entry(1, "Sauna", scope_id=2), make_entry(2, " sauna", scope_id=3)]
    )

    assert index == {(2, "sauna"): 1, (3, "sauna"): 2}


def test_unmatched_record_with_dangling_link_is_flagged() -> None:
    catalog = [make_entry(10, "Massage"), make_entry(20, "Sauna", scope_id=3)]
    records = [make_record(1, "Yoga", 99), make_record(2, "Yoga", 20), make_record(3, "Yoga", 10)]

    report = link_records(catalog, records)

    assert [o.reason for o in report.outcomes] == [
        "unknown_entry",
        "foreign_entry",
        "no_matching_label",
    ]
    assert {o.status for o in report.outcomes} == {LinkStatus.UNMATCHED}
    assert report.assignments == {}


def test_redirects_never_cross_scopes() -> None:
    canonical = [make_entry(2, "Sauna", scope_id=3)]
    records = [make_record(1, "Legacy sauna booking", 5, scope_id=2)]

    report = link_records(canonical, records, redirects={5: 2})

    (outcome,) = report.outcomes
    assert outcome.status is LinkStatus.UNMATCHED
    assert outcome.reason == "foreign_entry"
