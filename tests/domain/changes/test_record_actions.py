from __future__ import annotations

import pytest
from pymarc import Record, Subfield

from linktransform.domain.changes import (
    AddFields,
    CollectRule,
    FieldTemplate,
    RemoveSubfields,
    ReplaceValue,
    SourceLocator,
    TargetLocator,
)
from linktransform.domain.changes.record_actions import (
    add_or_replace_fields,
    filter_existing_fields,
    read_source_value,
    remove_subfields,
    replace_value_in_field,
    sort_subfields,
)
from linktransform.domain.errors import ChangeApplicationError
from linktransform.domain.model import control_field, field_key, insert_field
from tests.helpers.records import data_field, make_record, pairs, tags

LINK_ADD = AddFields(
    template=FieldTemplate(tag="650", ind2="7", subfields=(Subfield(code="a", value="%s"),)),
    order=("a", "2", "0"),
    duplicate_filter_codes=("2", "0"),
)

AUTHOR_LINK = ReplaceValue(
    source=SourceLocator(tag="001"),
    target=TargetLocator(
        tag="100",
        code="0",
        format="(FIN11)%s",
        where=CollectRule(collect=("a", "b", "c", "d", "q"), source_tag="100", target_tag="100"),
    ),
    order=("a", "c", "q", "d", "e", "0"),
)


def test_sort_subfields_puts_listed_codes_first() -> None:
    marc_field = data_field("100", ("0", "x"), ("9", "local"), ("d", "1950-"), ("a", "X"), ("8", "y"))

    sort_subfields(marc_field, ("a", "d", "0"))

    assert [subfield.code for subfield in marc_field.subfields] == ["a", "d", "0", "9", "8"]


def test_sort_subfields_without_order_is_noop() -> None:
    marc_field = data_field("100", ("d", "1950-"), ("a", "X"))

    sort_subfields(marc_field, ())

    assert [subfield.code for subfield in marc_field.subfields] == ["d", "a"]


def test_filter_existing_fields_uses_duplicate_codes() -> None:
    record = make_record(data_field("650", ("a", "cats"), ("2", "yso/eng"), ("0", "p1"), ind2="7"))
    same_link = data_field("650", ("a", "kissat"), ("2", "yso/eng"), ("0", "p1"), ind2="7")
    new_link = data_field("650", ("a", "koirat"), ("2", "yso/eng"), ("0", "p2"), ind2="7")

    unique = filter_existing_fields([same_link, new_link], record, ("2", "0"))

    assert unique == [new_link]


def test_filter_existing_fields_without_codes_compares_all_subfields() -> None:
    record = make_record(data_field("650", ("a", "kissat")))
    new_subject = data_field("650", ("a", "koirat"))

    unique = filter_existing_fields([data_field("650", ("a", "kissat")), new_subject], record)

    assert unique == [new_subject]


def test_filter_existing_fields_drops_duplicates_among_candidates() -> None:
    candidate = data_field("650", ("a", "kissat"), ("0", "p1"))
    twin = data_field("650", ("a", "kissat"), ("0", "p1"))

    unique = filter_existing_fields([candidate, twin], make_record(), ("0",))

    assert unique == [candidate]


def test_filter_existing_fields_ignores_other_tags() -> None:
    record = make_record(data_field("651", ("0", "p1")))
    candidate = data_field("650", ("a", "kissat"), ("0", "p1"))

    assert filter_existing_fields([candidate], record, ("0",)) == [candidate]


def test_add_inserts_new_field_in_tag_order(author_record: Record) -> None:
    new_field = data_field("600", ("0", "p9"), ("a", "Aihe"), ind2="7")

    add_or_replace_fields(author_record, [new_field], LINK_ADD)

    assert tags(author_record) == ["001", "100", "245", "600", "650"]
    assert [subfield.code for subfield in author_record.fields[3].subfields] == ["a", "0"]


def test_add_upgrades_field_with_same_label(author_record: Record) -> None:
    new_field = data_field("650", ("a", "kissat"), ("2", "yso/fin"), ("0", "p8122"), ind2="7")

    add_or_replace_fields(author_record, [new_field], LINK_ADD)

    subject_fields = author_record.get_fields("650")
    assert len(subject_fields) == 1
    assert field_key(subject_fields[0]) == field_key(new_field)


def test_add_upgrade_replaces_old_link_subfields() -> None:
    record = make_record(
        data_field("650", ("a", "kissat"), ("2", "yso/fin"), ("0", "yso:p1"), ind2="7")
    )
    new_field = data_field("650", ("a", "kissat"), ("2", "fin"), ("0", "yso:p2"), ind2="7")

    add_or_replace_fields(record, [new_field], LINK_ADD)

    assert len(record.fields) == 1
    assert pairs(record.fields[0]) == [
        ("a", "kissat"),
        ("2", "fin"),
        ("0", "yso:p2"),
    ]


def test_add_upgrade_keeps_label_subfields_and_takes_new_indicators() -> None:
    record = make_record(
        data_field("650", ("a", "kissat"), ("x", "historia"), ("9", "FENNI<KEEP>"), ind2="4")
    )
    new_field = data_field("650", ("a", "kissat"), ("x", "historia"), ("0", "p8122"), ind2="7")
    change = AddFields(template=LINK_ADD.template, order=("a", "x", "0"), duplicate_filter_codes=("0", "9"))

    add_or_replace_fields(record, [new_field], change)

    assert [field_key(marc_field) for marc_field in record.fields] == [
        ("650", " ", "7", (("a", "kissat"), ("x", "historia"), ("0", "p8122")))
    ]


def test_replace_value_honours_where_rule(author_record: Record, authority_record: Record) -> None:
    other_author = data_field("100", ("a", "Toinen, Tiina"), ind1="1")
    insert_field(author_record, other_author)

    replace_value_in_field(authority_record, author_record, AUTHOR_LINK)

    linked = author_record.get_fields("100")[0]
    assert pairs(linked) == [
        ("a", "Meikäläinen, Matti"),
        ("d", "1950-"),
        ("e", "kirjoittaja"),
        ("0", "(FIN11)000098765"),
    ]
    assert other_author.get_subfields("0") == []


def test_replace_value_overwrites_existing_code(author_record: Record, authority_record: Record) -> None:
    author_record.get_fields("100")[0].add_subfield("0", "(FIN11)old")

    replace_value_in_field(authority_record, author_record, AUTHOR_LINK)

    assert author_record.get_fields("100")[0].get_subfields("0") == ["(FIN11)000098765"]


def test_replace_value_writes_in_place() -> None:
    record = make_record(
        data_field("100", ("a", "X"), ("0", "(FIN11)old"), ("d", "1950-"), ("0", "(FIN11)older"))
    )
    source = make_record(control_field("001", "1"))
    change = ReplaceValue(
        source=SourceLocator(tag="001"),
        target=TargetLocator(tag="100", code="0", format="(FIN11)%s"),
    )

    replace_value_in_field(source, record, change)

    assert pairs(record.fields[0]) == [("a", "X"), ("0", "(FIN11)1"), ("d", "1950-")]


def test_replace_value_with_same_value_leaves_field_untouched() -> None:
    record = make_record(data_field("100", ("a", "X"), ("0", "(FIN11)1"), ("d", "1950-")))
    before = field_key(record.fields[0])
    change = ReplaceValue(
        source=SourceLocator(tag="001"),
        target=TargetLocator(tag="100", code="0", format="(FIN11)%s"),
    )

    replace_value_in_field(make_record(control_field("001", "1")), record, change)

    assert field_key(record.fields[0]) == before


def test_replace_value_without_where_touches_every_target(author_record: Record) -> None:
    source = make_record(data_field("035", ("a", "(FI-MELINDA)42")))
    change = ReplaceValue(
        source=SourceLocator(tag="035", code="a"),
        target=TargetLocator(tag="650", code="9"),
    )
    insert_field(author_record, data_field("650", ("a", "koirat")))

    replace_value_in_field(source, author_record, change)

    assert [marc_field.get_subfields("9") for marc_field in author_record.get_fields("650")] == [
        ["(FI-MELINDA)42"],
        ["(FI-MELINDA)42"],
    ]


def test_replace_value_with_empty_collect_restricts_nothing(author_record: Record) -> None:
    insert_field(author_record, data_field("100", ("a", "Toinen, Tiina"), ind1="1"))
    change = ReplaceValue(
        source=SourceLocator(tag="001"),
        target=TargetLocator(
            tag="100",
            code="0",
            where=CollectRule(collect=(), source_tag="100", target_tag="100"),
        ),
    )

    replace_value_in_field(make_record(control_field("001", "7")), author_record, change)

    assert [marc_field.get_subfields("0") for marc_field in author_record.get_fields("100")] == [
        ["7"],
        ["7"],
    ]


def test_replace_value_requires_source_record(author_record: Record) -> None:
    with pytest.raises(ChangeApplicationError, match="source record"):
        replace_value_in_field(None, author_record, AUTHOR_LINK)


def test_replace_value_requires_source_value(author_record: Record) -> None:
    empty_source = make_record(data_field("100", ("a", "Meikäläinen, Matti")))

    with pytest.raises(ChangeApplicationError, match="001"):
        replace_value_in_field(empty_source, author_record, AUTHOR_LINK)


def test_read_source_value(authority_record: Record) -> None:
    assert read_source_value(authority_record, SourceLocator(tag="001")) == "000098765"
    assert read_source_value(authority_record, SourceLocator(tag="100", code="d")) == "1950-"
    assert read_source_value(authority_record, SourceLocator(tag="100", code="q")) is None


def test_read_source_value_rejects_unknown_rule(authority_record: Record) -> None:
    with pytest.raises(ChangeApplicationError, match="'collect'"):
        read_source_value(authority_record, SourceLocator(tag="001", rule="collect"))


def test_remove_subfields_by_value() -> None:
    record = make_record(data_field("100", ("a", "X"), ("a", "Y"), ("d", "X")))

    remove_subfields(record, RemoveSubfields(tag="100", code="a", value="X"))

    assert pairs(record.fields[0]) == [("a", "Y"), ("d", "X")]


def test_remove_subfields_wildcard_keeps_empty_field() -> None:
    record = make_record(data_field("100", ("a", "X"), ("a", "Y")))

    remove_subfields(record, RemoveSubfields(tag="100", code="a", value="*"))

    assert tags(record) == ["100"]
    assert record.fields[0].subfields == []
