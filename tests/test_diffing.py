from namecheap_ctl.diffing import Correlation, incremental_diff

from tests.support import record


def test_identical_records_are_unchanged():
    desired = [record("@", "A", "1.2.3.4"), record("www", "CNAME", "example.com.")]
    existing = [record("www", "CNAME", "EXAMPLE.com"), record("@", "A", "1.2.3.4")]

    unchanged, create, delete, modify = incremental_diff(desired, existing)

    assert len(unchanged) == 2
    assert (create, delete, modify) == ([], [], [])


def test_ttl_change_is_a_modification():
    desired = [record("@", "A", "1.2.3.4", ttl=300)]
    existing = [record("@", "A", "1.2.3.4", ttl=1800)]

    _, create, delete, modify = incremental_diff(desired, existing)

    assert create == [] and delete == []
    assert str(modify[0]) == "MODIFY A example.com 1.2.3.4 ttl=1800 -> A example.com 1.2.3.4 ttl=300"


def test_changed_value_under_same_name_is_a_modification():
    desired = [record("@", "MX", "mx1.example.net.", mx=10)]
    existing = [record("@", "MX", "mx1.example.net.", mx=20)]

    _, create, delete, modify = incremental_diff(desired, existing)

    assert len(modify) == 1
    assert modify[0].existing.mx_preference == 20
    assert modify[0].desired.mx_preference == 10


def test_extra_values_become_creates_and_deletes():
    desired = [record("@", "A", "1.1.1.1"), record("@", "A", "2.2.2.2"), record("new", "TXT", "v=1")]
    existing = [record("@", "A", "1.1.1.1"), record("old", "TXT", "v=0")]

    unchanged, create, delete, modify = incremental_diff(desired, existing)

    assert len(unchanged) == 1
    assert [str(c) for c in create] == [
        "CREATE A example.com 2.2.2.2 ttl=1800",
        "CREATE TXT new.example.com v=1 ttl=1800",
    ]
    assert [str(c) for c in delete] == ["DELETE TXT old.example.com v=0 ttl=1800"]
    assert modify == []


def test_soa_records_are_ignored_on_both_sides():
    desired = [record("@", "SOA", "ns hostmaster 1 2 3 4 5")]
    existing = [record("@", "SOA", "other hostmaster 9 9 9 9 9")]

    assert incremental_diff(desired, existing) == ([], [], [], [])


def test_txt_values_are_case_sensitive():
    desired = [record("@", "TXT", "Hello")]
    existing = [record("@", "TXT", "hello")]

    _, _, _, modify = incremental_diff(desired, existing)

    assert modify == [Correlation(existing=existing[0], desired=desired[0])]
