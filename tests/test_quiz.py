import pytest

from vocab_drill.models import PunishmentEntry, Term
from vocab_drill.quiz import grade_answer, matches_copy_out, normalize, score_percent

TERM = Term(id=1, text="Boarding Pass", meaning="a card that allows a passenger to get on a plane", category="n")


def test_normalize():
    assert normalize("  HeLLo \n") == "hello"


@pytest.mark.parametrize("answer", ["boarding pass", "BOARDING PASS", "  Boarding Pass  ", "\tboarding pass\n"])
def test_grade_answer_ignores_case_and_padding(answer):
    assert grade_answer(TERM, answer) is True


@pytest.mark.parametrize("answer", ["boarding", "boardingpass", "boarding  pass", "", "   "])
def test_grade_answer_wrong(answer):
    assert grade_answer(TERM, answer) is False


def test_timeout_is_always_wrong():
    assert grade_answer(TERM, None) is False


def test_matches_copy_out():
    entry = PunishmentEntry(term=TERM, required_count=20)
    assert matches_copy_out(entry, "boarding pass - A card that allows a passenger to get on a plane  ")
    assert not matches_copy_out(entry, "boarding pass")
    assert not matches_copy_out(entry, "boarding pass: a card that allows a passenger to get on a plane")


def test_score_percent():
    assert score_percent(3, 4) == 75.0
    assert score_percent(0, 0) == 0.0
