from frmr_oscal.cir.model import GlossaryTerm
from frmr_oscal.identifiers import identifier
from frmr_oscal.mappers.glossary_index import GlossaryIndex


def _term(key, name, aliases=()):
    return GlossaryTerm(key=key, applicability="both", name=name, definition="", aliases=tuple(aliases))


def test_names_and_aliases_resolve_case_insensitively():
    index = GlossaryIndex.build([_term("FRD-ET", "Example Term", ["ET"])])
    expected = identifier("glossary-term", "FRD-ET")

    assert index.resolve("example term") == expected
    assert index.resolve("EXAMPLE TERM") == expected
    assert index.resolve("et") == expected
    assert "Et" in index
    assert len(index) == 2


def test_unknown_text_resolves_to_none():
    index = GlossaryIndex.build([_term("FRD-ET", "Example Term")])

    assert index.resolve("Other") is None
    assert "Other" not in index
    assert 42 not in index


def test_later_registration_wins():
    index = GlossaryIndex.build([
        _term("FRD-A", "Shared"),
        _term("FRD-B", "Other", ["shared"])
    ])

    assert index.resolve("Shared") == identifier("glossary-term", "FRD-B")
    assert index.resolve("Other") == identifier("glossary-term", "FRD-B")


def test_empty_glossary():
    index = GlossaryIndex.build([])

    assert len(index) == 0
    assert index.resolve("anything") is None
