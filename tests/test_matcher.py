from itertools import product

from phrasetrainer.matcher import edit_distance, is_close_enough, normalize, tolerance_for

SAMPLES = [
    "",
    "   ",
    "Como você está?",
    "  Olá,   MUNDO!! ",
    "Prazer em conhecê-lo.",
    "snake_case\tand\nnewlines",
    "Ação, coração & pão",
    "123 testes",
]


def test_normalize_lowercases_strips_accents_and_punctuation() -> None:
    assert normalize("Como você está?") == "como voce esta"
    assert normalize("  Olá,   MUNDO!! ") == "ola mundo"
    assert normalize("Prazer em conhecê-lo.") == "prazer em conhecelo"
    assert normalize("Ação, coração & pão") == "acao coracao pao"


def test_normalize_collapses_whitespace_and_drops_underscores() -> None:
    assert normalize("snake_case\tand\nnewlines") == "snakecase and newlines"
    assert normalize("a  -  b") == "a b"


def test_normalize_empty_and_blank_inputs() -> None:
    assert normalize("") == ""
    assert normalize("   ") == ""
    assert normalize("?!.") == ""


def test_normalize_is_idempotent() -> None:
    for sample in SAMPLES:
        once = normalize(sample)
        assert normalize(once) == once


def test_edit_distance_known_values() -> None:
    assert edit_distance("", "") == 0
    assert edit_distance("", "abc") == 3
    assert edit_distance("abc", "") == 3
    assert edit_distance("kitten", "sitting") == 3
    assert edit_distance("flaw", "lawn") == 2
    assert edit_distance("como voce esta", "comoo vce esta") == 2


def test_edit_distance_metric_properties() -> None:
    words = [normalize(sample) for sample in SAMPLES] + ["casa", "cama", "camas"]
    for a in words:
        assert edit_distance(a, a) == 0
    for a, b in product(words, repeat=2):
        assert edit_distance(a, b) == edit_distance(b, a)
    for a, b, c in product(words, repeat=3):
        assert edit_distance(a, c) <= edit_distance(a, b) + edit_distance(b, c)


def test_tolerance_scales_with_length_and_never_drops_below_one() -> None:
    assert tolerance_for("") == 1
    assert tolerance_for("oi") == 1
    assert tolerance_for("como voce esta") == 2
    assert tolerance_for("a" * 20) == 3


def test_is_close_enough_accepts_identical_answers() -> None:
    for sample in SAMPLES:
        assert is_close_enough(sample, sample) is True


def test_is_close_enough_tolerance_examples() -> None:
    expected = "Como você está?"
    assert is_close_enough("como voce esta", expected) is True
    assert is_close_enough("comoo vce esta", expected) is True
    assert is_close_enough("comoo vce estaa", expected) is False
    assert is_close_enough("onde fica o banheiro", expected) is False


def test_is_close_enough_short_answers_allow_one_typo() -> None:
    assert is_close_enough("ol", "Olá!") is True
    assert is_close_enough("oi", "Olá!") is False


def test_is_close_enough_empty_candidate_is_incorrect_not_an_error() -> None:
    assert is_close_enough("", "Tchau!") is False
    assert is_close_enough("   ", "Muito obrigado.") is False
