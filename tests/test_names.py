import pytest

from ticketintel.names import component_similarity, decompose, normalize, order_variations


def test_normalize_lowercases_and_collapses_whitespace():
    assert normalize("  JOHN    SMITH ") == "john smith"


def test_normalize_strips_honorifics():
    assert normalize("MR. John  SMITH,Jr") == "john smith"
    assert normalize("Mrs Jane Doe") == "jane doe"
    assert normalize("Dr. Prof. Ada Lovelace III") == "ada lovelace"


def test_normalize_spaces_after_comma():
    assert normalize("Smith,John") == "smith, john"
    assert normalize("Smith, John") == "smith, john"


def test_normalize_keeps_names_that_only_start_like_honorifics():
    assert normalize("Exavier Mrsic") == "exavier mrsic"


@pytest.mark.parametrize("value", [None, 42, 3.5, ["john"], b"\xff\xfe"])
def test_normalize_never_raises(value):
    assert normalize(value) == ""


def test_normalize_decodes_bytes():
    assert normalize(b"JOHN SMITH") == "john smith"


def test_decompose_shapes():
    assert decompose("").is_empty
    assert decompose(None).parts == []

    single = decompose("Cher")
    assert (single.first, single.last, single.middle) == ("cher", "", [])

    two = decompose("John Smith")
    assert (two.first, two.last, two.middle) == ("john", "smith", [])

    three = decompose("John Michael Paul Smith")
    assert three.first == "john"
    assert three.last == "smith"
    assert three.middle == ["michael", "paul"]


@pytest.mark.parametrize(
    "name",
    ["MR. John  SMITH,Jr", "Smith, John", "ada", "", "  Maria Elena  Garcia ", "O'Neil-Brown, Pat"],
)
def test_decompose_is_idempotent(name):
    first = decompose(normalize(name))
    again = decompose(normalize(" ".join(first.parts)))
    assert again == first


def test_order_variations_comma_form():
    assert order_variations("Smith, John") == ["john smith", "john, smith"]


def test_order_variations_three_tokens():
    assert order_variations("John Michael Smith") == ["smith michael john", "smith, john michael"]


def test_order_variations_single_token():
    assert order_variations("Cher") == []


def test_component_similarity_identical_names():
    assert component_similarity(decompose("John Smith"), decompose("john smith")) == pytest.approx(1.0)


def test_component_similarity_prefix_first_name():
    score = component_similarity(decompose("J Smith"), decompose("John Smith"))
    assert score == pytest.approx(6 / 7)


def test_component_similarity_mismatch_scores_low():
    score = component_similarity(decompose("Jon Smyth"), decompose("John Smith"))
    assert score == pytest.approx(1 / 7)
    assert score < 0.75


def test_component_similarity_middle_credit():
    contained = component_similarity(decompose("Maria E Garcia"), decompose("Maria Elena Garcia"))
    one_missing = component_similarity(decompose("Maria Garcia"), decompose("Maria Elena Garcia"))
    different = component_similarity(decompose("Maria Luz Garcia"), decompose("Maria Elena Garcia"))
    assert contained == pytest.approx(6.7 / 7)
    assert one_missing == pytest.approx(6.5 / 7)
    assert different == pytest.approx(6.3 / 7)


def test_component_similarity_without_first_or_last_is_zero():
    assert component_similarity(decompose(""), decompose("John Smith")) == 0.0


@pytest.mark.parametrize(
    "a,b",
    [("John Smith", "Jane Doe"), ("J", "John"), ("Ann Marie Lee", "Ann Lee"), ("x", "")],
)
def test_component_similarity_bounded(a, b):
    score = component_similarity(decompose(a), decompose(b))
    assert 0.0 <= score <= 1.0
