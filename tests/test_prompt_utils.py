from prompt_utils import (
    extract_variables,
    has_placeholder,
    parse_answer,
    parse_choices,
    parse_tagged_result,
    question_fields_from_output,
    render_template,
)


def test_extract_no_placeholders():
    assert extract_variables("") == []
    assert extract_variables("plain text with [single] brackets") == []


def test_extract_dedupes_in_first_occurrence_order():
    assert extract_variables("Hello [[name]], age [[age]], again [[name]]") == ["name", "age"]


def test_extract_unclosed_is_not_a_match():
    assert extract_variables("broken [[name and [[other") == []
    assert extract_variables("[[ok]] then [[broken") == ["ok"]


def test_extract_keeps_inner_text_verbatim():
    assert extract_variables("[[ passage ]] [[Korean text]]") == [" passage ", "Korean text"]


def test_has_placeholder_whitespace_and_case():
    assert has_placeholder("Read [[ passage ]] now", "passage")
    assert has_placeholder("Read [[Passage]] now", "passage")
    assert not has_placeholder("Read {{ passage }} now", "passage")
    assert not has_placeholder("Read [[passages]] now", "passage")
    assert not has_placeholder("", "passage")


def test_has_placeholder_escapes_name():
    assert not has_placeholder("[[ab]]", "a.")
    assert has_placeholder("[[a.]]", "a.")


def test_render_substitutes_and_reports_missing():
    res = render_template("Read [[passage]] and write [[count]] [[style]] items", {"passage": "TEXT", "count": 3})
    assert res.text == "Read TEXT and write 3 [[style]] items"
    assert res.used == ["passage", "count"]
    assert res.missing == ["style"]


def test_render_passage_aliases():
    res = render_template("[[sentence]] / [[input]] / [[korean]]", {"passage": "P", "korean": "K"})
    assert res.text == "P / P / K"
    assert res.missing == []


def test_render_tolerates_inner_whitespace():
    res = render_template("[[ passage ]]", {"passage": "P"})
    assert res.text == "P"


def test_parse_tagged_result():
    text = """
    [[original]]The concept of social capital[[/original]]
    [[vocabulary]]
    social: of society
    capital: wealth
    [[/vocabulary]]
    [[meta]]{"level": 2}[[/meta]]
    [[empty]]  [[/empty]]
    """
    res = parse_tagged_result(text, array_tags=["vocabulary"], json_tags=["meta"])
    assert res.success
    assert res.data["original"] == "The concept of social capital"
    assert res.data["vocabulary"] == ["social: of society", "capital: wealth"]
    assert res.data["meta"] == {"level": 2}
    assert "empty" not in res.data
    assert res.raw_tags == ["original", "vocabulary", "meta", "empty"]


def test_parse_tagged_result_bad_json_and_unknown_tags():
    res = parse_tagged_result("[[meta]]{nope[[/meta]][[x]]1[[/x]]", allowed_tags=["meta"], json_tags=["meta"])
    assert res.success is False
    assert res.data == {"meta": "{nope"}
    assert any("[[x]]" in w for w in res.warnings)


def test_parse_tagged_result_no_tags_warns():
    res = parse_tagged_result("nothing here")
    assert res.success and res.data == {} and res.warnings


def test_parse_choices_and_answer():
    assert parse_choices("① apple\n② banana\n③ cherry") == ["apple", "banana", "cherry"]
    assert parse_choices("(1) one\n(2) two") == ["one", "two"]
    assert parse_choices("first\n\nsecond") == ["first", "second"]
    assert parse_answer(" 3 ") == 3
    assert parse_answer("④") == 4
    assert parse_answer("B") == "B"


def test_question_fields_from_output():
    fields, res = question_fields_from_output(
        "[[body]]Pick one.[[/body]]\n[[choices]]A. red\nB. blue[[/choices]]\n[[answer]] 2 [[/answer]]"
    )
    assert fields == {"body": "Pick one.", "choices": ["red", "blue"], "answer": "2"}
    assert res.success and res.warnings == []

    fields, res = question_fields_from_output("[[meta]]x[[/meta]]")
    assert fields == {}
    assert res.warnings == ["unknown tag: [[meta]]"]
